from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from inventory.shared.errors.validation_types import ValidationErrorType

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
PHONE_PATTERN = re.compile(r"^\d{10,11}$")
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72


def _check_password_strength(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_TOO_SHORT,
            "Password must be at least 6 characters long",
            {"min_length": PASSWORD_MIN_LENGTH}
        )

    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_TOO_LONG,
            "Password must be at most 72 bytes long",
            {"max_bytes": PASSWORD_MAX_BYTES}
        )

    if not re.search(r"[a-z]", value):
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_NO_LOWERCASE,
            "Password must contain at least one lowercase letter",
            {}
        )

    if not re.search(r"[A-Z]", value):
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_NO_UPPERCASE,
            "Password must contain at least one uppercase letter",
            {}
        )

    if not re.search(r"\d", value):
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_NO_DIGIT,
            "Password must contain at least one number",
            {}
        )

    return value


class _FormModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RegisterRequestDTO(_FormModel):
    username: str
    email: EmailStr
    password: str
    confirm_password: str
    phone: str | None = None

    @field_validator("username", "email", mode="before")
    @classmethod
    def strip_identity(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not 3 <= len(value) <= 30:
            raise PydanticCustomError(
                ValidationErrorType.USERNAME_LENGTH,
                "Username must be 3-30 characters",
                {"min_length": 3, "max_length": 30}
            )

        if not USERNAME_PATTERN.match(value):
            raise PydanticCustomError(
                ValidationErrorType.USERNAME_INVALID_CHARS,
                "Username can only contain letters, numbers, and underscores",
                {"pattern": USERNAME_PATTERN.pattern}
            )

        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        value = str(value).strip()
        if not PHONE_PATTERN.match(value):
            raise PydanticCustomError(
                ValidationErrorType.PHONE_INVALID,
                "Phone number must be 10-11 digits",
                {"pattern": PHONE_PATTERN.pattern}
            )
        return value

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, value: str) -> str:
        return _check_password_strength(value)

    @model_validator(mode="after")
    def passwords_match(self) -> RegisterRequestDTO:
        if self.password != self.confirm_password:
            raise PydanticCustomError(
                ValidationErrorType.PASSWORD_MISMATCH,
                "Passwords do not match",
                {}
            )
        return self


class LoginRequestDTO(_FormModel):
    identifier: str = Field(min_length=1, max_length=254)
    password: str = Field(min_length=1, max_length=128)  # No strength check on login
    remember_me: bool = False

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_field_names(cls, data: object) -> object:
        # the login form historically posted "email" or "username"
        if isinstance(data, dict) and not data.get("identifier"):
            data = dict(data)
            data["identifier"] = data.get("email") or data.get("username") or ""
        return data

    @field_validator("identifier", mode="before")
    @classmethod
    def strip_identifier(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("remember_me", mode="before")
    @classmethod
    def parse_checkbox(cls, value: object) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "on", "yes")
        return bool(value)


class ForgotPasswordRequestDTO(_FormModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class ResetPasswordRequestDTO(_FormModel):
    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, value: str) -> str:
        return _check_password_strength(value)
