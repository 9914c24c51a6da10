"""
Session Identity
================
Provides the opaque identity token the profile history needs before it may
subscribe, save or delete.

Classes:
    SyncSession: Anonymous or token-based sign-in with a change signal.
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class SyncSession(QObject):
    # Emits the new identity token, or None when the session ends
    identity_changed = Signal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._identity: Optional[str] = None

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    def sign_in(self, token: Optional[str] = None) -> str:
        """Sign in with `token`, or anonymously with a fresh random token."""
        identity = token or uuid.uuid4().hex
        if identity != self._identity:
            self._identity = identity
            logger.info(f"Session established ({'token' if token else 'anonymous'}).")
            self.identity_changed.emit(identity)
        return identity

    def sign_out(self) -> None:
        if self._identity is None:
            return
        self._identity = None
        logger.info("Session ended.")
        self.identity_changed.emit(None)
