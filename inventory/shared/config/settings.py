# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_SOURCES = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    validate_by_name=True,
)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///inventory.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _ENV_SOURCES


class AuthConfig(BaseSettings):
    # Falls back to AppConfig.secret_key when unset
    remember_secret: str | None = Field(None, alias="REMEMBER_ME_SECRET")

    session_cookie_name: str = Field("session_id", alias="SESSION_COOKIE_NAME")
    remember_cookie_name: str = Field("auth_token", alias="REMEMBER_COOKIE_NAME")

    session_ttl: int = Field(24 * 60 * 60, ge=60, alias="SESSION_TTL")
    remember_ttl: int = Field(7 * 24 * 60 * 60, ge=60, alias="REMEMBER_ME_TTL")
    reset_token_ttl: int = Field(60 * 60, ge=60, alias="RESET_TOKEN_TTL")

    bcrypt_rounds: int = Field(12, ge=4, le=31, alias="BCRYPT_ROUNDS")

    model_config = _ENV_SOURCES


class MailConfig(BaseSettings):
    host: str | None = Field(None, alias="EMAIL_HOST")
    port: int = Field(587, ge=1, le=65535, alias="EMAIL_PORT")
    username: str | None = Field(None, alias="EMAIL_USER")
    password: str | None = Field(None, alias="EMAIL_PASS")
    from_addr: str = Field("no-reply@inventory.local", alias="EMAIL_FROM")
    timeout: float = Field(10.0, ge=0.1, alias="EMAIL_TIMEOUT")

    model_config = _ENV_SOURCES

    @property
    def enabled(self) -> bool:
        return bool(self.host)


class SecurityConfig(BaseSettings):
    # None means "secure in production only"
    cookie_secure: bool | None = Field(None, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Lax", alias="COOKIE_SAMESITE")

    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = _ENV_SOURCES

    @field_validator("cookie_secure", "enable_hsts", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool | None) -> bool | None:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _auth_config_factory() -> AuthConfig:
    return AuthConfig()  # type: ignore[call-arg]


def _mail_config_factory() -> MailConfig:
    return MailConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    admin_username: str | None = Field(None, alias="ADMIN_USERNAME")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    auth: AuthConfig = Field(default_factory=_auth_config_factory)
    mail: MailConfig = Field(default_factory=_mail_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        validate_by_name=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key in ("dev", "development", "test", ""):
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure SECRET_KEY detected in production!\n"
                "   SECRET_KEY must be a strong random value in production.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if self.security.cookie_secure is False:
            warnings.append("⚠️  Cookie Secure flag is DISABLED (use HTTPS!)")
        if not self.security.enable_hsts:
            warnings.append("⚠️  HSTS is DISABLED (recommended for HTTPS)")
        if not self.mail.enabled:
            warnings.append("⚠️  EMAIL_HOST is not set, password reset links will not be delivered")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")

    @property
    def cookie_secure(self) -> bool:
        if self.security.cookie_secure is None:
            return self.is_production()
        return self.security.cookie_secure

    @property
    def remember_secret(self) -> str:
        return self.auth.remember_secret or self.secret_key


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "MailConfig",
    "SecurityConfig",
    "load_config",
]
