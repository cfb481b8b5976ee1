"""Domain errors raised by services and mapped to HTTP responses in main."""
from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "error": self.code}


class DuplicateKeyError(DomainError):
    """An active record already holds the unique business key."""

    code = "duplicate_key"

    def __init__(self, entity: str, field: str, value: Any):
        super().__init__(f"{entity} with {field} '{value}' already exists")
        self.entity = entity
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["field"] = self.field
        out["value"] = self.value
        return out


class MismatchError(DomainError):
    """Route and body disagree about the target resource."""

    code = "mismatch"


class ValidationFailure(DomainError):
    """Request is well-formed JSON but violates a business validation rule."""

    code = "validation_failed"

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["errors"] = self.errors
        return out


class NotFoundError(DomainError):
    """Referenced entity does not exist or is archived."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} with ID {entity_id} was not found")
        self.entity = entity
        self.entity_id = entity_id
