"""
Centralized settings for Vigie.

One validated, cached settings object holds the knobs the core needs:
log level and format, the service name stamped on every log line, the
floating-point tolerance used on the 100% ownership boundary, and whether
the ledger prunes records that a transfer has emptied.

All fields can be set via ``VIGIE_*`` environment variables (for example
``VIGIE_PERCENTAGE_TOLERANCE=1e-6``) or through a ``.env`` file.

Tags:
    vigie, configuration, settings, pydantic, caching, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VigieSettings(BaseSettings):
    """Vigie configuration.

    Fields
    ──────
    log_level            : Structlog log level
    log_format           : ``console`` or ``json``
    service_name         : Service name added to every log line
    percentage_tolerance : Slack allowed on the 100% boundary
    prune_empty_records  : Drop ledger records whose share reaches zero
    """

    model_config = SettingsConfigDict(
        env_prefix="VIGIE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")
    service_name: str = Field(default="vigie")

    # ── Ledger ───────────────────────────────────────────────────
    percentage_tolerance: float = Field(default=1e-9, ge=0.0, lt=1.0)
    prune_empty_records: bool = Field(default=False)

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log level: {value!r}")
        return level

    @field_validator("log_format")
    @classmethod
    def _normalize_format(cls, value: str) -> str:
        fmt = value.lower()
        if fmt not in {"console", "json"}:
            raise ValueError(f"log_format must be 'console' or 'json', got {value!r}")
        return fmt

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, VigieSettings] = {}


def get_settings(*, _force_reload: bool = False) -> VigieSettings:
    """Load, validate, and cache a :class:`VigieSettings` instance.

    Pass ``_force_reload=True`` to re-read the environment (tests use this
    after ``monkeypatch.setenv``).
    """
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = VigieSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Forget the cached settings instance."""
    _settings_cache.clear()


__all__ = ["VigieSettings", "get_settings", "clear_settings_cache"]
