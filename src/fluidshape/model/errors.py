"""Exceptions raised by the profile history."""


class FluidShapeError(Exception):
    """Base class for all recoverable application errors."""


class IdentityMissingError(FluidShapeError):
    """A save/delete was requested before a session identity was established."""


class RemoteOperationError(FluidShapeError):
    """The profile collection rejected or failed a subscribe/upsert/delete."""
