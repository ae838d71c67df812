"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import Optional, Protocol

TRUE_VALUES = ("1", "true", "yes")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in TRUE_VALUES


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class CookieConfig:
    """Cookie attributes used by the transport boundary."""
    domain: str = ""
    path: str = "/"
    prefix: str = ""
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


@dataclass
class SessionConfig:
    """Session configuration."""
    driver: str = "memory"
    cookie_name: str = "sf_session"
    expiration: int = 7200
    save_path: Optional[str] = None
    match_ip: bool = False
    match_user_agent: bool = False
    time_to_update: int = 300
    regenerate_destroy: bool = False
    gc_interval: int = 600
    cookie: CookieConfig = field(default_factory=CookieConfig)

    @property
    def full_cookie_name(self) -> str:
        """Cookie name as sent on the wire."""
        return f"{self.cookie.prefix}{self.cookie_name}"


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_session_config(self) -> SessionConfig:
        """Get session configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_session_config(self) -> SessionConfig:
        """Get session configuration from environment variables."""
        return SessionConfig(
            driver=os.getenv("SESSION_DRIVER", "memory"),
            cookie_name=os.getenv("SESSION_COOKIE_NAME", "sf_session"),
            expiration=_env_int("SESSION_EXPIRATION", "7200"),
            save_path=os.getenv("SESSION_SAVE_PATH") or None,
            match_ip=_env_bool("SESSION_MATCH_IP"),
            match_user_agent=_env_bool("SESSION_MATCH_USER_AGENT"),
            time_to_update=_env_int("SESSION_TIME_TO_UPDATE", "300"),
            regenerate_destroy=_env_bool("SESSION_REGENERATE_DESTROY"),
            gc_interval=_env_int("SESSION_GC_INTERVAL", "600"),
            cookie=CookieConfig(
                domain=os.getenv("COOKIE_DOMAIN", ""),
                path=os.getenv("COOKIE_PATH", "/"),
                prefix=os.getenv("COOKIE_PREFIX", ""),
                secure=_env_bool("COOKIE_SECURE"),
            ),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=_env_int("API_PORT", "8080"),
            host=os.getenv("API_HOST", "0.0.0.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


class StaticConfigProvider:
    """Provider returning fixed configuration objects (tests, embedding)."""

    def __init__(self, session: Optional[SessionConfig] = None, api: Optional[APIConfig] = None):
        self._session = session or SessionConfig()
        self._api = api or APIConfig(port=8080, host="127.0.0.1", log_level="INFO")

    def get_session_config(self) -> SessionConfig:
        return self._session

    def get_api_config(self) -> APIConfig:
        return self._api
