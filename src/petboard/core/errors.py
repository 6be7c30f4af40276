"""Error taxonomy shared by the post, tag, interaction and moderation services.

Each error carries a stable ``kind`` so the HTTP layer can map it onto a status
code without inspecting message text.
"""

from __future__ import annotations


class PetboardError(Exception):
    """Base class for domain errors raised by the service layer."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """Return a JSON-friendly representation of the error."""
        return {"error": self.kind, "detail": self.message}


class ValidationError(PetboardError):
    """Caller-supplied input violates a precondition."""

    kind = "validation_error"


class NotFound(PetboardError):
    """A referenced entity does not exist."""

    kind = "not_found"


class Unauthorized(PetboardError):
    """The caller lacks the rights for the requested mutation."""

    kind = "unauthorized"


class ConflictError(PetboardError):
    """A concurrent write could not be reconciled after a retry."""

    kind = "conflict"
