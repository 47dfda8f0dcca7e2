from .base import (
    AppError,
    DomainError,
    HashingError,
    InfrastructureError,
    StorageError,
    ValidationError,
)
from .validation import format_pydantic_errors, raise_validation_error

__all__ = [
    "AppError",
    "DomainError",
    "HashingError",
    "InfrastructureError",
    "StorageError",
    "ValidationError",
    "format_pydantic_errors",
    "raise_validation_error",
]
