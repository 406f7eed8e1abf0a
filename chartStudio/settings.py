"""Django settings for chartStudio.

The chart engine is a library of pure functions; Django provides settings,
logging configuration, locale-aware number/date formatting and the management
command runner. No database is configured.
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, *, default: bool) -> bool:
    """Parse a boolean environment variable.

    Args:
        name: Environment variable name.
        default: Value when the variable is not set.

    Returns:
        Parsed boolean value.
    """

    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_int(name: str, *, default: int) -> int:
    """Parse an integer environment variable."""

    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw.strip())


def _env_str(name: str, *, default: str) -> str:
    """Return an environment variable, or `default` when unset or blank."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw


DEBUG = _env_bool("DJANGO_DEBUG", default=True)

_DEV_SECRET_KEY = "dev-only-insecure-secret-key"
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY") or (_DEV_SECRET_KEY if DEBUG else "")
if not SECRET_KEY:
    raise RuntimeError("DJANGO_SECRET_KEY is required when DJANGO_DEBUG is False.")

INSTALLED_APPS = [
    "core.apps.CoreConfig",
]

DATABASES: dict[str, dict[str, str]] = {}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Number rendering for chart formatters (django.utils.numberformat).
DECIMAL_SEPARATOR = _env_str("CHART_DECIMAL_SEPARATOR", default=".")
THOUSAND_SEPARATOR = _env_str("CHART_THOUSAND_SEPARATOR", default=",")
NUMBER_GROUPING = _env_int("CHART_NUMBER_GROUPING", default=3)

# Named date pattern used when an axis formatter does not pick one.
CHART_DEFAULT_DATE_FORMAT = _env_str("CHART_DEFAULT_DATE_FORMAT", default="short")

CHART_STUDIO_LOG_LEVEL = _env_str("CHART_STUDIO_LOG_LEVEL", default="DEBUG" if DEBUG else "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "core.charting": {
            "handlers": ["console"],
            "level": CHART_STUDIO_LOG_LEVEL,
            "propagate": True,
        },
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
