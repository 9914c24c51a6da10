"""
Profile History
===============
Local, ordered view of the shared profile collection.

Why is this file needed?
------------------------
1. State: It holds the list of saved profiles shown in the history panel,
   most recent first.
2. Sync: The list is replaced wholesale whenever the collection pushes a new
   snapshot (`reconcile`). Nothing else writes to it, so a save only becomes
   visible once the collection reports it back.
3. Gating: Without a session identity the history is Disconnected: empty,
   unsubscribed, and saving/deleting is refused.

Classes:
    ProfileCollection: Protocol of the remote collection.
    ProfileHistoryCache: The observable history (Qt signals).
"""
from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from PySide6.QtCore import QObject, Signal

from fluidshape.model.errors import IdentityMissingError, RemoteOperationError
from fluidshape.model.profile import Profile, identity_for

logger = logging.getLogger(__name__)

Snapshot = Mapping[str, Mapping[str, Any]]


class ProfileCollection(Protocol):
    def subscribe(
        self,
        on_snapshot: Callable[[Snapshot], None],
        on_error: Callable[[Exception], None]
    ) -> Callable[[], None]: ...

    def upsert(self, profile_id: str, record: Mapping[str, Any]) -> None: ...

    def delete(self, profile_id: str) -> None: ...


class ProfileHistoryCache(QObject):
    """Ordered profile history reconciled from a `ProfileCollection`."""
    history_changed = Signal(object)
    connection_changed = Signal(bool)
    error_occurred = Signal(str)

    identity_for = staticmethod(identity_for)

    def __init__(
        self,
        collection: ProfileCollection,
        clock: Callable[[], datetime] = datetime.now,
        parent: Optional[QObject] = None
    ) -> None:
        super().__init__(parent)
        self._collection = collection
        self._clock = clock
        self._identity: Optional[str] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._profiles: List[Profile] = []

    # ------------------------------------------------------------------
    # Connection state
    # ------------------------------------------------------------------

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def is_connected(self) -> bool:
        return self._identity is not None and self._unsubscribe is not None

    @property
    def profiles(self) -> List[Profile]:
        return list(self._profiles)

    def set_identity(self, identity: Optional[str]) -> None:
        """Connect for a new identity, or disconnect when it is revoked."""
        identity = identity or None
        if identity == self._identity:
            return

        if self._identity is not None:
            self._disconnect()

        if identity is not None:
            self._connect(identity)

    def _connect(self, identity: str) -> None:
        self._identity = identity
        try:
            # The collection may push the first snapshot before this returns.
            self._unsubscribe = self._collection.subscribe(self.reconcile, self._on_remote_error)
        except Exception as e:
            self._identity = None
            logger.error(f"Could not subscribe to profile collection: {e}")
            self.error_occurred.emit(str(e))
            return
        logger.info("Profile history connected.")
        self.connection_changed.emit(True)

    def _disconnect(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._identity = None
        self._profiles = []
        logger.info("Profile history disconnected.")
        self.history_changed.emit(self.profiles)
        self.connection_changed.emit(False)

    def _on_remote_error(self, error: Exception) -> None:
        logger.error(f"Profile collection error: {error}")
        self.error_occurred.emit(str(error))

    def _require_identity(self, action: str) -> str:
        if self._identity is None:
            raise IdentityMissingError(f"Cannot {action} a profile without a session identity.")
        return self._identity

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def save(self, name: str, params_snapshot: Mapping[str, str], area_snapshot: str) -> Profile:
        """
        Upsert a profile under the id derived from `name`.

        A profile with a colliding id is replaced entirely, including its
        timestamp. Blank names fall back to "Profile <n>".

        Raises:
            IdentityMissingError: No session identity.
            RemoteOperationError: The collection failed the upsert.
        """
        owner = self._require_identity("save")
        final_name = name.strip() or f"Profile {len(self._profiles) + 1}"
        profile = Profile.create(
            name=final_name,
            params=params_snapshot,
            area=area_snapshot,
            owner=owner,
            now=self._clock(),
        )

        try:
            self._collection.upsert(profile.id, profile.to_record())
        except Exception as e:
            logger.error(f"Failed to save profile '{profile.id}': {e}")
            raise RemoteOperationError(f"Failed to save profile '{final_name}'.") from e

        logger.info(f"Saved profile '{profile.id}'.")
        return profile

    def delete(self, profile_id: str) -> None:
        """Remove a profile by id. Unknown ids are not an error."""
        self._require_identity("delete")
        try:
            self._collection.delete(profile_id)
        except Exception as e:
            logger.error(f"Failed to delete profile '{profile_id}': {e}")
            raise RemoteOperationError(f"Failed to delete profile '{profile_id}'.") from e
        logger.info(f"Deleted profile '{profile_id}'.")

    def reconcile(self, snapshot: Snapshot) -> None:
        """Replace the whole view with a pushed snapshot, newest first."""
        if self._identity is None:
            logger.debug("Ignoring snapshot pushed while disconnected.")
            return

        profiles = [Profile.from_record(pid, record) for pid, record in snapshot.items()]
        # sorted() is stable, so equal timestamps keep the pushed order
        self._profiles = sorted(profiles, key=lambda p: p.timestamp_ms, reverse=True)
        logger.debug(f"Reconciled {len(self._profiles)} profiles.")
        self.history_changed.emit(self.profiles)

    def select(self, profile_id: str) -> Dict[str, str]:
        """Return the stored parameter text of a profile."""
        for profile in self._profiles:
            if profile.id == profile_id:
                return dict(profile.params)
        raise KeyError(f"Profile '{profile_id}' not found.")
