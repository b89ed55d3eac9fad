# formhooks/settings.py
"""
Application settings.

Values are read from the environment (and .env) each time a Settings
instance is built, so Settings() after changing os.environ sees the
change.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

# Load .env file
from dotenv import load_dotenv
load_dotenv()


def _env(name: str, default: str):
    return field(default_factory=lambda: os.getenv(name, default))


def _env_optional(name: str):
    return field(default_factory=lambda: os.getenv(name) or None)


def _env_int(name: str, default: str):
    return field(default_factory=lambda: int(os.getenv(name, default)))


def _env_float(name: str, default: str):
    return field(default_factory=lambda: float(os.getenv(name, default)))


def _env_bool(name: str, default: str):
    return field(default_factory=lambda: os.getenv(name, default).lower() == "true")


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Application configuration."""

    # Delivery
    webhook_timeout_seconds: float = _env_float("WEBHOOK_TIMEOUT", "10")
    webhook_max_workers: int = _env_int("WEBHOOK_MAX_WORKERS", "1")
    webhook_user_agent: str = _env("WEBHOOK_USER_AGENT", "formhooks/0.1")

    # Option storage (mappings + delivery log). Unset means in-memory.
    options_dir: Optional[str] = _env_optional("OPTIONS_DIR")

    # Logging
    log_level: str = _env("LOG_LEVEL", "INFO")
    log_json: bool = _env_bool("LOG_JSON", "true")
    log_file: Optional[str] = _env_optional("LOG_FILE")

    # API settings
    api_host: str = _env("API_HOST", "0.0.0.0")
    api_port: int = _env_int("API_PORT", "8000")
    allowed_origins: List[str] = field(
        default_factory=lambda: _split_csv(
            os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:8000")
        )
    )


# Global settings instance
settings = Settings()
