"""
SuperSeller Configuration Module
================================

Runtime settings loaded from environment variables.
Supports both .env files and system environment variables.

Scoring calibration does NOT live here: thresholds are frozen dataclasses in
superseller.scoring.scoring_config so that results never depend on the host.

Environment Variables:
    SUPERSELLER_LOG_LEVEL: Root log level (default: INFO)
    SUPERSELLER_LOG_JSON: Emit JSON log lines (default: false)
    SUPERSELLER_LOG_FILE: Optional rotating log file path (default: unset)
    SUPERSELLER_LOG_MAX_BYTES: Size before rotation (default: 10 MB)
    SUPERSELLER_LOG_BACKUP_COUNT: Rotated files kept (default: 5)

    LOG_SIGNALS: Log the clip tri-state of every built Signals (default: false)
    DEBUG_PSYCHOLOGICAL_PRICING: Trace the pricing hack gates (default: false)

    MERCADOLIVRE_EDIT_URL_TEMPLATE: Edit page template, receives {mlb_id}
        (default: https://www.mercadolivre.com.br/anuncios/{mlb_id}/modificar/bomni)
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv


# Load environment variables from .env file if present
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


DEFAULT_EDIT_URL_TEMPLATE = "https://www.mercadolivre.com.br/anuncios/{mlb_id}/modificar/bomni"

DEFAULT_LOG_MAX_BYTES = 10 * 1024 * 1024

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Read a variable; blank values count as unset so `.env` placeholders fall back."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def get_env_int(key: str, default: int, minimum: int = 0) -> int:
    """Read an integer variable, rejecting values below `minimum`."""
    value = get_env(key)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError as e:
        raise ValueError(f"{key} must be an integer, got: {value!r}") from e
    if parsed < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got: {parsed}")
    return parsed


def get_env_bool(key: str, default: bool) -> bool:
    """Read a flag: true/1/yes/on or false/0/no/off."""
    value = get_env(key)
    if value is None:
        return default
    normalized = value.lower()
    if normalized in ("true", "1", "yes", "on"):
        return True
    if normalized in ("false", "0", "no", "off"):
        return False
    raise ValueError(f"{key} must be a boolean, got: {value!r}")


@dataclass
class LoggingSettings:
    """Logging output configuration."""

    level: str = field(default_factory=lambda: get_env("SUPERSELLER_LOG_LEVEL", "INFO"))
    json_output: bool = field(default_factory=lambda: get_env_bool("SUPERSELLER_LOG_JSON", False))
    log_file: Optional[str] = field(default_factory=lambda: get_env("SUPERSELLER_LOG_FILE"))
    max_bytes: int = field(
        default_factory=lambda: get_env_int("SUPERSELLER_LOG_MAX_BYTES", DEFAULT_LOG_MAX_BYTES, minimum=1)
    )
    backup_count: int = field(default_factory=lambda: get_env_int("SUPERSELLER_LOG_BACKUP_COUNT", 5))

    def __post_init__(self):
        self.level = self.level.upper()
        if self.level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.level}")


@dataclass
class DebugSettings:
    """Opt-in diagnostic traces."""

    log_signals: bool = field(default_factory=lambda: get_env_bool("LOG_SIGNALS", False))
    psychological_pricing: bool = field(
        default_factory=lambda: get_env_bool("DEBUG_PSYCHOLOGICAL_PRICING", False)
    )


@dataclass
class MarketplaceSettings:
    """Mercado Livre links used in hack suggestions."""

    edit_url_template: str = field(
        default_factory=lambda: get_env("MERCADOLIVRE_EDIT_URL_TEMPLATE", DEFAULT_EDIT_URL_TEMPLATE)
    )

    def __post_init__(self):
        if "{mlb_id}" not in self.edit_url_template:
            raise ValueError("MERCADOLIVRE_EDIT_URL_TEMPLATE must contain '{mlb_id}'")


@dataclass
class Settings:
    """Main runtime settings aggregating all sub-configurations."""

    logging: LoggingSettings = field(default_factory=LoggingSettings)
    debug: DebugSettings = field(default_factory=DebugSettings)
    marketplace: MarketplaceSettings = field(default_factory=MarketplaceSettings)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Lazily loads settings on first access.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
