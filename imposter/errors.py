# imposter/errors.py
from __future__ import annotations

from typing import Optional


class ImposterError(Exception):
    """Base class for every error raised by the imposter core."""

    # Name of the workflow step that was running, when known.
    step: Optional[str] = None


class InvalidStateError(ImposterError, RuntimeError):
    """A required field or atlas is missing before an operation that needs it."""


class MalformedBlobError(ImposterError, ValueError):
    """A portable blob failed structural or image-decode validation."""


class MissingCapabilityError(ImposterError, LookupError):
    """A shader, importer, codec or store could not be resolved."""


class HostOperationFailedError(ImposterError):
    """
    Wraps an error raised by an external capability (storage write, import).
    The original exception is chained as __cause__.
    """

    def __init__(self, message: str, step: Optional[str] = None) -> None:
        self.step = step
        if step:
            message = f"[{step}] {message}"
        super().__init__(message)


class PersistError(HostOperationFailedError):
    """A persistence workflow step failed. Earlier steps are not rolled back."""
