"""
Settings for the wagate WhatsApp gateway.

Simple, reliable environment variable configuration for the single-session gateway.
"""

import os
import tomllib
from pathlib import Path

from dotenv import load_dotenv

# Load .env file for local development - look in current working directory
load_dotenv(".env")


def _get_version_from_pyproject() -> str:
    """
    Read version from pyproject.toml file.

    Returns:
        Version string from pyproject.toml, or fallback version
    """
    current_path = Path(__file__)
    for parent in [current_path.parent, *current_path.parents]:
        pyproject_path = parent / "pyproject.toml"
        if pyproject_path.exists():
            try:
                with open(pyproject_path, "rb") as f:
                    pyproject_data = tomllib.load(f)
                    version = pyproject_data.get("project", {}).get("version")
                    if version:
                        return version
            except (OSError, tomllib.TOMLDecodeError):
                continue

    return "0.1.0"


def _read_number(name: str, default: str, cast=float):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


class Settings:
    """Application settings with environment-based configuration."""

    def __init__(self):
        # ================================================================
        # Version & Environment
        # ================================================================
        self.version: str = _get_version_from_pyproject()
        self.port: int = _read_number("PORT", "3001", int)
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_dir: str = os.getenv("LOG_DIR", "./logs")
        self.environment: str = os.getenv("ENVIRONMENT", "DEV")

        # ================================================================
        # Access Control
        # ================================================================
        # Empty key disables the bearer check on protected routes
        self.api_key: str = os.getenv("API_KEY", "")

        # ================================================================
        # WhatsApp Session Configuration
        # ================================================================
        self.auth_folder: str = os.getenv("AUTH_FOLDER", "./auth_info")
        self.bridge_url: str = os.getenv("BRIDGE_URL", "http://localhost:3000")
        self.browser_name: str = os.getenv("BROWSER_NAME", "MediCitas")

        # ================================================================
        # Reconnection & Sending
        # ================================================================
        self.reconnect_delay: float = _read_number("RECONNECT_DELAY", "5")
        self.reconnect_max_delay: float = _read_number(
            "RECONNECT_MAX_DELAY", str(self.reconnect_delay)
        )
        max_attempts = os.getenv("RECONNECT_MAX_ATTEMPTS")
        self.reconnect_max_attempts: int | None = (
            _read_number("RECONNECT_MAX_ATTEMPTS", max_attempts, int)
            if max_attempts
            else None
        )
        self.send_timeout: float = _read_number("SEND_TIMEOUT", "30")

        self._validate_settings()

    def _validate_settings(self):
        """Validate settings values."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        self.log_level = self.log_level.upper()

        valid_environments = ["DEV", "PROD"]
        if self.environment.upper() not in valid_environments:
            self.environment = "DEV"  # Default fallback
        self.environment = self.environment.upper()

        if self.reconnect_delay < 0:
            raise ValueError("RECONNECT_DELAY must not be negative")
        if self.reconnect_max_delay < self.reconnect_delay:
            raise ValueError("RECONNECT_MAX_DELAY must be >= RECONNECT_DELAY")
        if self.send_timeout <= 0:
            raise ValueError("SEND_TIMEOUT must be positive")

    @property
    def auth_required(self) -> bool:
        """Check if protected routes require a bearer token."""
        return bool(self.api_key)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "DEV"


# Global settings instance
settings = Settings()
