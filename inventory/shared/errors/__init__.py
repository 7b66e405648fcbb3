from .base import (
    AppError,
    CorruptCredentialError,
    DomainError,
    DuplicateKeyError,
    InfrastructureError,
    NotificationError,
    StoreUnavailableError,
    ValidationError,
)
from .http import handle_app_error, register_error_handler, wants_json
from .messages import error_message

__all__ = [
    "AppError",
    "CorruptCredentialError",
    "DomainError",
    "DuplicateKeyError",
    "InfrastructureError",
    "NotificationError",
    "StoreUnavailableError",
    "ValidationError",
    "error_message",
    "handle_app_error",
    "register_error_handler",
    "wants_json",
]
