"""Client configuration from the environment.

Settings are read from environment variables, optionally seeded from a .env file:
    UOA_CALENDAR_API_TOKEN    - bearer token sent with every request
    UOA_CALENDAR_BASE_URL     - API root (default http://localhost:8000/api)
    UOA_CALENDAR_AUTH_SCHEME  - Authorization scheme (default Bearer)
    UOA_CALENDAR_TIMEOUT      - request timeout in seconds (default 30)

The .env file is ./.env unless UOA_CALENDAR_ENV_FILE points elsewhere. It is
loaded on import; variables already in the environment take precedence.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_FILE = Path(os.environ.get("UOA_CALENDAR_ENV_FILE", Path.cwd() / ".env"))

TOKEN_VAR = "UOA_CALENDAR_API_TOKEN"
BASE_URL_VAR = "UOA_CALENDAR_BASE_URL"
AUTH_SCHEME_VAR = "UOA_CALENDAR_AUTH_SCHEME"
TIMEOUT_VAR = "UOA_CALENDAR_TIMEOUT"

DEFAULT_BASE_URL = "http://localhost:8000/api"
DEFAULT_AUTH_SCHEME = "Bearer"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Resolved client settings."""

    api_token: str | None
    base_url: str
    auth_scheme: str
    timeout: float


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load KEY=value lines from a file into os.environ.

    Args:
        env_path: Path to .env file.

    Returns:
        Dictionary of variables that were actually set.
    """
    loaded = {}
    if not env_path.is_file():
        return loaded

    with open(env_path) as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.removeprefix("export ").strip()
            value = value.strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]

            if key and key not in os.environ:
                os.environ[key] = value
                loaded[key] = value

    return loaded


def _read_timeout() -> float:
    raw = os.environ.get(TIMEOUT_VAR)
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {TIMEOUT_VAR}={raw!r}, using {DEFAULT_TIMEOUT}s")
        return DEFAULT_TIMEOUT


def load_settings() -> Settings:
    """Read client settings from the environment."""
    return Settings(
        api_token=os.environ.get(TOKEN_VAR) or None,
        base_url=os.environ.get(BASE_URL_VAR) or DEFAULT_BASE_URL,
        auth_scheme=os.environ.get(AUTH_SCHEME_VAR) or DEFAULT_AUTH_SCHEME,
        timeout=_read_timeout(),
    )


def get_config_status() -> dict:
    """Report which settings are configured, without exposing the token.

    Returns:
        Dictionary with configuration status.
    """
    settings = load_settings()
    return {
        "env_file": str(ENV_FILE),
        "env_file_exists": ENV_FILE.is_file(),
        "api_token": settings.api_token is not None,
        "base_url": settings.base_url,
        "base_url_configured": bool(os.environ.get(BASE_URL_VAR)),
        "auth_scheme": settings.auth_scheme,
        "timeout": settings.timeout,
    }


# Auto-load .env on import
_loaded = _load_env_file(ENV_FILE)
