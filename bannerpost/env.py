from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from .constants import DEFAULT_CALLBACK_URL, DEFAULT_SCOPES, LOGGER, X_API_LOGGER


class ConfigurationError(RuntimeError):
    pass


@dataclass(frozen=True)
class MediaCredentials:
    api_key: str
    api_secret: str
    access_token: str
    access_secret: str


@dataclass(frozen=True)
class Settings:
    client_id: str = ""
    client_secret: str = ""
    callback_url: str = DEFAULT_CALLBACK_URL
    scopes: list[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))
    api_key: str = ""
    api_secret: str = ""
    access_token: str = ""
    access_secret: str = ""
    production: bool = False
    x_api_timeout: float = 30.0
    resize_timeout: float = 30.0
    debug: bool = True

    def require_oauth2(self) -> None:
        missing = [
            name
            for name, value in (
                ("X_OAUTH2_CLIENT_ID", self.client_id),
                ("X_OAUTH2_CLIENT_SECRET", self.client_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"X OAuth2 credentials are not configured: {', '.join(missing)}"
            )

    def media_credentials(self) -> MediaCredentials:
        values = {
            "X_API_KEY": self.api_key,
            "X_API_SECRET": self.api_secret,
            "X_ACCESS_TOKEN": self.access_token,
            "X_ACCESS_SECRET": self.access_secret,
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ConfigurationError(
                f"X media upload credentials are not configured: {', '.join(missing)}"
            )
        return MediaCredentials(
            api_key=self.api_key,
            api_secret=self.api_secret,
            access_token=self.access_token,
            access_secret=self.access_secret,
        )


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number.")
    if value <= 0:
        raise RuntimeError(f"{key} must be greater than zero.")
    return value


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    load_dotenv(env_path, override=True)


def load_settings() -> Settings:
    scopes = os.getenv("X_OAUTH2_SCOPES", " ".join(DEFAULT_SCOPES)).split()
    return Settings(
        client_id=os.getenv("X_OAUTH2_CLIENT_ID", "").strip(),
        client_secret=os.getenv("X_OAUTH2_CLIENT_SECRET", "").strip(),
        callback_url=os.getenv("X_OAUTH2_CALLBACK_URL", "").strip() or DEFAULT_CALLBACK_URL,
        scopes=scopes or list(DEFAULT_SCOPES),
        api_key=os.getenv("X_API_KEY", "").strip(),
        api_secret=os.getenv("X_API_SECRET", "").strip(),
        access_token=os.getenv("X_ACCESS_TOKEN", "").strip(),
        access_secret=os.getenv("X_ACCESS_SECRET", "").strip(),
        production=os.getenv("APP_ENV", "development").strip().lower() == "production",
        x_api_timeout=_get_env_float("X_API_TIMEOUT", 30.0),
        resize_timeout=_get_env_float("RESIZE_TIMEOUT", 30.0),
        debug=is_truthy(os.getenv("X_API_DEBUG", "1")),
    )


def validate_env(settings: Settings) -> None:
    """Check settings at startup.

    Only a malformed callback URL is fatal. Missing X credentials disable the
    auth and publish endpoints, which answer 500 until they are configured.
    """
    try:
        TypeAdapter(AnyHttpUrl).validate_python(settings.callback_url)
    except ValidationError as error:
        raise RuntimeError(
            "X_OAUTH2_CALLBACK_URL must be a valid http(s) URL (for example: "
            "https://banners.example.com/auth/callback)."
        ) from error

    try:
        settings.require_oauth2()
    except ConfigurationError as error:
        LOGGER.warning("%s; /auth/start will fail.", error)

    try:
        settings.media_credentials()
    except ConfigurationError as error:
        LOGGER.warning("%s; /publish will fail.", error)

    if "offline.access" not in settings.scopes:
        LOGGER.warning(
            "X_OAUTH2_SCOPES is missing offline.access; refresh tokens will not be issued."
        )


def setup_logging(settings: Settings) -> bool:
    if settings.debug:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
        X_API_LOGGER.setLevel(logging.INFO)
    return settings.debug
