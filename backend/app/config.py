from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = ".hongit"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
PLAN_PROFILES: frozenset[str] = frozenset({"full", "fast"})
_DATA_DIR_RELATIVE_DEFAULTS: tuple[tuple[str, Path], ...] = (("log_dir", Path("logs")),)
_PATH_FIELDS: tuple[str, ...] = (
    "data_dir",
    *(field_name for field_name, _ in _DATA_DIR_RELATIVE_DEFAULTS),
)
_BOOLEAN_COERCION_FIELDS: tuple[str, ...] = ("telemetry_enabled",)


def _default_in_data_dir(relative_path: Path) -> Path:
    return Path(DEFAULT_DATA_DIR) / relative_path


def _data_dir_default_note(relative_path: Path) -> str:
    return f"Defaults to `${{HONGIT_DATA_DIR}}/{relative_path}` when not explicitly set."


def _resolve_path(value: str | Path) -> Path:
    return Path(value).expanduser().resolve()


def _parse_bool_with_default(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
        return default
    if not isinstance(value, str):
        return default

    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


class AppSettings(BaseSettings):
    """
    Canonical runtime configuration.

    Every option is read from `HONGIT_*` environment variables (or `.env`).
    The extraction tunables bound the worst-case latency of a single
    `extract-audio` call: per-attempt socket timeout and yt-dlp retries,
    plus the engine's own inter-attempt backoff.
    """

    model_config = SettingsConfigDict(
        env_prefix="HONGIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Core paths.
    data_dir: Path = Field(
        default=Path(DEFAULT_DATA_DIR),
        description="Root runtime directory for local state and logs.",
    )

    # YouTube audio extraction.
    youtube_extract_plan_profile: Literal["full", "fast"] = Field(
        default="full",
        description=(
            "Attempt plan used for audio extraction. `full` tries five strategies "
            "(client spoofing, auth and compatibility variants); `fast` tries three."
        ),
    )
    youtube_extract_socket_timeout_seconds: int = Field(
        default=12,
        ge=1,
        le=120,
        description="yt-dlp socket timeout applied to every extraction attempt.",
    )
    youtube_extract_backend_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="yt-dlp HTTP retries inside a single attempt.",
    )
    youtube_extract_extractor_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="yt-dlp extractor retries inside a single attempt.",
    )
    youtube_extract_retry_sleep_seconds: int = Field(
        default=1,
        ge=0,
        le=30,
        description="Fixed sleep between yt-dlp internal retries.",
    )
    youtube_extract_backoff_step_ms: int = Field(
        default=120,
        ge=0,
        description="Linear backoff step between fallback attempts (milliseconds).",
    )
    youtube_extract_backoff_cap_ms: int = Field(
        default=300,
        ge=0,
        description="Upper bound for the backoff between fallback attempts (milliseconds).",
    )
    youtube_extract_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent returned with stream headers when yt-dlp does not supply one.",
    )
    youtube_extract_worker_threads: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Worker threads used for background extraction submissions.",
    )

    # Logging.
    log_dir: Path = Field(
        default=_default_in_data_dir(Path("logs")),
        description=f"Directory for backend log files. {_data_dir_default_note(Path('logs'))}",
    )
    log_level: str = Field(
        default="INFO",
        description="Console log level (stdout).",
    )

    # Telemetry.
    telemetry_enabled: bool = Field(
        default=True,
        description="Enable lightweight internal telemetry events.",
    )
    telemetry_sink: Literal["none", "log"] = Field(
        default="log",
        description=(
            "Telemetry sink backend. `log` emits structured telemetry locally; "
            "`none` disables sink output."
        ),
    )

    @field_validator("telemetry_sink", mode="before")
    @classmethod
    def _normalize_telemetry_sink(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("HONGIT_TELEMETRY_SINK must be a string.")
        normalized = value.strip().lower()
        if normalized in {"none", "log"}:
            return normalized
        raise ValueError("HONGIT_TELEMETRY_SINK must be set to: none, log.")

    @field_validator("youtube_extract_plan_profile", mode="before")
    @classmethod
    def _normalize_plan_profile(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("HONGIT_YOUTUBE_EXTRACT_PLAN_PROFILE must be a string.")
        normalized = value.strip().lower()
        if normalized in PLAN_PROFILES:
            return normalized
        raise ValueError("HONGIT_YOUTUBE_EXTRACT_PLAN_PROFILE must be set to: full, fast.")

    @field_validator("youtube_extract_user_agent", mode="before")
    @classmethod
    def _normalize_user_agent(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("HONGIT_YOUTUBE_EXTRACT_USER_AGENT must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("HONGIT_YOUTUBE_EXTRACT_USER_AGENT must not be empty.")
        return normalized

    @field_validator(*_PATH_FIELDS, mode="before")
    @classmethod
    def _normalize_paths(cls, value: Any) -> Any:
        if value is None:
            return None
        return _resolve_path(value)

    @field_validator(*_BOOLEAN_COERCION_FIELDS, mode="before")
    @classmethod
    def _normalize_booleans(cls, value: Any, info: ValidationInfo) -> bool:
        field_name = info.field_name
        assert field_name is not None
        default_value = cls.model_fields[field_name].default
        assert isinstance(default_value, bool)
        return _parse_bool_with_default(value, default=default_value)


def _apply_path_defaults(settings: AppSettings) -> AppSettings:
    updates: dict[str, Path] = {}
    for field_name, relative_default in _DATA_DIR_RELATIVE_DEFAULTS:
        if field_name in settings.model_fields_set:
            continue
        updates[field_name] = settings.data_dir / relative_default
    if not updates:
        return settings
    return settings.model_copy(update=updates)


def _resolve_path_fields(settings: AppSettings) -> AppSettings:
    resolved_updates = {
        field_name: _resolve_path(getattr(settings, field_name))
        for field_name in _PATH_FIELDS
    }
    return settings.model_copy(update=resolved_updates)


def load_settings() -> AppSettings:
    settings = AppSettings()
    settings = _apply_path_defaults(settings)
    return _resolve_path_fields(settings)
