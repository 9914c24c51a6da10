"""
Profile Collections
===================
Concrete implementations of the shared profile collection.

Every subscriber receives the full snapshot (id -> record) right after
subscribing and again after every upsert/delete. Records are copied on the
way in and out, so subscribers never share mutable state with the store.

Classes:
    InMemoryProfileCollection: Process-local collection. Several histories
        attached to one instance behave like several synced clients.
    H5ProfileCollection: The same, persisted to an HDF5 file.
"""
from __future__ import annotations

import copy
import logging
import os
import tempfile
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from importlib.metadata import version, PackageNotFoundError

import h5py

from fluidshape.model.errors import RemoteOperationError

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("fluidshape")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

Record = Dict[str, Any]
SnapshotCallback = Callable[[Dict[str, Record]], None]
ErrorCallback = Callable[[Exception], None]

_RECORD_ATTRS = ("name", "area", "timestamp", "timestampMs", "createdBy")


class InMemoryProfileCollection:
    def __init__(self, records: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._records: Dict[str, Record] = copy.deepcopy(dict(records or {}))
        self._subscribers: List[Tuple[SnapshotCallback, ErrorCallback]] = []

    def __len__(self) -> int:
        return len(self._records)

    def get(self, profile_id: str) -> Optional[Record]:
        record = self._records.get(profile_id)
        return copy.deepcopy(record) if record is not None else None

    def snapshot(self) -> Dict[str, Record]:
        return copy.deepcopy(self._records)

    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Callable[[], None]:
        entry = (on_snapshot, on_error)
        self._subscribers.append(entry)
        on_snapshot(self.snapshot())

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def upsert(self, profile_id: str, record: Mapping[str, Any]) -> None:
        records = dict(self._records)
        records[profile_id] = copy.deepcopy(dict(record))
        self._commit(records)

    def delete(self, profile_id: str) -> None:
        if profile_id not in self._records:
            return
        records = dict(self._records)
        del records[profile_id]
        self._commit(records)

    def _commit(self, records: Dict[str, Record]) -> None:
        self._persist(records)
        self._records = records
        self._notify()

    def _persist(self, records: Dict[str, Record]) -> None:
        """Hook for durable subclasses; raise to reject the change."""

    def _notify(self) -> None:
        for on_snapshot, on_error in list(self._subscribers):
            try:
                on_snapshot(self.snapshot())
            except Exception as e:
                logger.exception(f"Subscriber failed to process snapshot: {e}")
                on_error(e)


class H5ProfileCollection(InMemoryProfileCollection):
    """
    Profile collection stored in an HDF5 file.

    Layout:
        /profiles/<n>            one group per profile, attrs = record fields
                                 plus "id"
        /profiles/<n>/params     attrs = parameter text values

    Profile ids are stored as attributes, not group names, because derived
    ids may contain characters HDF5 treats as path separators.
    """

    def __init__(self, filepath: str) -> None:
        self.filepath = filepath
        super().__init__(self._load(filepath))

    @staticmethod
    def _to_native(value: Any) -> Any:
        # HDF5 returns numpy scalars and sometimes bytes
        if isinstance(value, bytes):
            return value.decode("utf-8")
        if hasattr(value, "item"):
            return value.item()
        return value

    @classmethod
    def _load(cls, filepath: str) -> Dict[str, Record]:
        if not os.path.exists(filepath):
            logger.info(f"No profile file at {filepath}, starting empty.")
            return {}

        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise RemoteOperationError(msg)

        records: Dict[str, Record] = {}
        try:
            with h5py.File(filepath, "r") as f:
                if "profiles" not in f:
                    return records
                for key in sorted(f["profiles"].keys(), key=int):
                    grp = f["profiles"][key]
                    attrs = {k: cls._to_native(v) for k, v in grp.attrs.items()}
                    profile_id = str(attrs.pop("id"))
                    record: Record = {k: attrs[k] for k in _RECORD_ATTRS if k in attrs}
                    record["params"] = {}
                    if "params" in grp:
                        record["params"] = {
                            k: str(cls._to_native(v)) for k, v in grp["params"].attrs.items()
                        }
                    records[profile_id] = record
        except (OSError, KeyError, ValueError) as e:
            logger.exception(f"Failed to read profiles: {e}")
            raise RemoteOperationError(f"Failed to read profiles from '{filepath}'.") from e

        logger.info(f"Loaded {len(records)} profiles from {filepath}")
        return records

    def _persist(self, records: Dict[str, Record]) -> None:
        directory = os.path.dirname(os.path.abspath(self.filepath))
        os.makedirs(directory, exist_ok=True)

        # Written beside the old file and swapped in; the old file is untouched until os.replace.
        fd, tmp_path = tempfile.mkstemp(suffix=".h5.tmp", dir=directory)
        os.close(fd)
        try:
            with h5py.File(tmp_path, "w") as f:
                f.attrs["version"] = APP_VERSION
                grp_profiles = f.create_group("profiles")
                for index, (profile_id, record) in enumerate(records.items()):
                    grp = grp_profiles.create_group(str(index))
                    grp.attrs["id"] = profile_id
                    for key in _RECORD_ATTRS:
                        if key in record:
                            grp.attrs[key] = record[key]
                    grp_params = grp.create_group("params")
                    for key, text in (record.get("params") or {}).items():
                        grp_params.attrs[key] = str(text)
            os.replace(tmp_path, self.filepath)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.debug(f"Wrote {len(records)} profiles to {self.filepath}")
