from src.core.exceptions.base import (
    AppException,
    CounterUnavailableError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "AppException",
    "CounterUnavailableError",
    "DuplicateError",
    "NotFoundError",
    "ValidationError",
]
