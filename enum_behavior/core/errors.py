from __future__ import annotations

"""Domain-specific exception hierarchy for the enum behavior."""

from typing import Any, Iterable

__all__ = [
    "DomainError",
    "ValidationError",
    "EnumValidationError",
    "NotFoundError",
    "UnknownFieldError",
    "ModelNotRegisteredError",
    "EnumKeyNotFoundError",
    "ConfigurationError",
]


class DomainError(Exception):
    """Base class for recoverable domain-level errors."""

    status_code: int = 400
    error_code: str = "domain_error"
    default_message: str = "Domain error"

    def __init__(
        self,
        message: str | None = None,
        *,
        detail: Any | None = None,
        status_code: int | None = None,
    ) -> None:
        final_message = message or self.default_message
        super().__init__(final_message)
        self.message = final_message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DomainError, ValueError):
    """Raised when submitted model data fails validation."""

    error_code = "validation_error"
    default_message = "Invalid data"
    status_code = 400


class EnumValidationError(ValidationError):
    """Raised when an enum field holds a value outside its declared keys."""

    error_code = "enum_validation_failed"
    default_message = "Enum field validation failed"
    status_code = 422


class NotFoundError(DomainError):
    """Base class for missing domain resources."""

    error_code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class UnknownFieldError(NotFoundError):
    """Raised when a lookup addresses a field never registered for a model."""

    error_code = "unknown_enum_field"
    default_message = "Enum field not registered"

    def __init__(
        self,
        model_id: object,
        field: str,
        registered: Iterable[str] = (),
    ) -> None:
        known = tuple(registered)
        listing = ", ".join(known) if known else "none registered"
        super().__init__(
            f"Enum field not registered: {model_id}.{field}. Registered fields: {listing}",
            detail={"model": str(model_id), "field": field, "registered": list(known)},
        )
        self.model_id = model_id
        self.field = field


class ModelNotRegisteredError(NotFoundError):
    """Raised when a model has no enum declarations in the registry."""

    error_code = "model_not_registered"
    default_message = "Model has no registered enum fields"


class EnumKeyNotFoundError(NotFoundError):
    """Raised by outer layers when a key has no label in a known enum."""

    error_code = "enum_key_not_found"
    default_message = "Enum key not found"


class ConfigurationError(DomainError):
    """Raised when an enum declaration is malformed or ambiguous."""

    error_code = "configuration_error"
    status_code = 500
    default_message = "Invalid enum configuration"
