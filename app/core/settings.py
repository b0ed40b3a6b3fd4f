"""
Currency layer settings.

Single source of truth for configuration. Values come from the environment
(a `.env` file is loaded first) and are validated when the module is imported,
so misconfigurations surface at startup rather than mid-request.

Usage:
    from app.core.settings import settings

    timeout = settings.HTTP_TIMEOUT_SEC
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class SettingsValidationError(Exception):
    """Raised when settings validation fails."""

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid configuration for {field}={value!r}: {message}")


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse a boolean from environment variable."""
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def _parse_int(value: str | None, default: int | None = None) -> int | None:
    """Parse an integer from environment variable."""
    if value is None or value.strip() == "":
        return default
    try:
        return int(value.strip(), 0)  # Support hex with 0x prefix
    except ValueError:
        return default


def _parse_float(value: str | None, default: float | None = None) -> float | None:
    """Parse a float from environment variable."""
    if value is None or value.strip() == "":
        return default
    try:
        return float(value.strip())
    except ValueError:
        return default


def _get_version_from_pyproject() -> str:
    """Extract version from pyproject.toml."""
    try:
        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        version: str = str(data.get("project", {}).get("version", "0.0.0"))
        return version
    except Exception:
        return "0.0.0"


@dataclass
class Settings:
    """
    Settings for chain access, price oracles and logging.
    """

    PROJECT_NAME: str = "chain-currencies"
    VERSION: str = field(default_factory=_get_version_from_pyproject)

    # Network
    HTTP_TIMEOUT_SEC: float = field(default_factory=lambda: _parse_float(os.getenv("HTTP_TIMEOUT_SEC"), 10.0) or 10.0)
    DEFAULT_MIN_CONFIRMATIONS: int = field(
        default_factory=lambda: _parse_int(os.getenv("DEFAULT_MIN_CONFIRMATIONS"), 5) or 0
    )

    # Price oracles
    FIAT_CURRENCY: str = field(default_factory=lambda: os.getenv("FIAT_CURRENCY", "USD").strip().upper())
    REDSTONE_API_URL: str = field(
        default_factory=lambda: os.getenv("REDSTONE_API_URL", "https://api.redstone.finance").strip().rstrip("/")
    )
    LIVECOINWATCH_API_URL: str = field(
        default_factory=lambda: os.getenv("LIVECOINWATCH_API_URL", "https://api.livecoinwatch.com").strip().rstrip("/")
    )
    LIVECOINWATCH_API_KEY: str | None = field(default_factory=lambda: os.getenv("LIVECOINWATCH_API_KEY"))

    # Observability
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "info").strip().lower())
    SERVICE_NAME: str = field(default_factory=lambda: os.getenv("SERVICE_NAME", "chain-currencies").strip())
    LOG_JSON: bool = field(default_factory=lambda: _parse_bool(os.getenv("LOG_JSON"), True))

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        self._validate()

    def _validate(self) -> None:
        errors: list[str] = []

        if self.HTTP_TIMEOUT_SEC <= 0:
            errors.append(f"HTTP_TIMEOUT_SEC must be positive, got {self.HTTP_TIMEOUT_SEC}")
        if self.DEFAULT_MIN_CONFIRMATIONS < 0:
            errors.append(f"DEFAULT_MIN_CONFIRMATIONS must be >= 0, got {self.DEFAULT_MIN_CONFIRMATIONS}")
        if self.LOG_LEVEL not in LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.LOG_LEVEL!r}")
        if not self.REDSTONE_API_URL.startswith(("http://", "https://")):
            errors.append("REDSTONE_API_URL must be an http(s) URL")

        if errors:
            raise SettingsValidationError("MULTIPLE", None, "; ".join(errors))


# Global settings instance
settings = Settings()
