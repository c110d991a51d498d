from __future__ import annotations


class PetaError(Exception):
    pass


class StorageWriteError(PetaError):
    """Raised when the request store cannot be written to disk."""


class ExecutionError(PetaError):
    """Raised by a transport when no HTTP response could be obtained."""
