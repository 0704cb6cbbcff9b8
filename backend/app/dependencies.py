from __future__ import annotations

from functools import lru_cache

from backend.app.config import AppSettings, load_settings
from backend.app.services.extractor_bridge import YouTubeExtractorBridge
from backend.app.services.youtube_extractor.backend import YtDlpBackend
from backend.app.services.youtube_extractor.client import ExtractionClient
from backend.app.services.youtube_extractor.engine import YouTubeAudioExtractor
from backend.app.telemetry import TelemetryClient, build_telemetry_client


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()


@lru_cache(maxsize=1)
def get_telemetry() -> TelemetryClient:
    settings = get_settings()
    return build_telemetry_client(
        enabled=settings.telemetry_enabled,
        sink=settings.telemetry_sink,
    )


@lru_cache(maxsize=1)
def get_audio_extractor() -> YouTubeAudioExtractor:
    settings = get_settings()
    client = ExtractionClient(
        YtDlpBackend(),
        socket_timeout_seconds=settings.youtube_extract_socket_timeout_seconds,
        retries=settings.youtube_extract_backend_retries,
        extractor_retries=settings.youtube_extract_extractor_retries,
        retry_sleep_seconds=settings.youtube_extract_retry_sleep_seconds,
        user_agent=settings.youtube_extract_user_agent,
    )
    return YouTubeAudioExtractor(
        client,
        plan_profile=settings.youtube_extract_plan_profile,
        backoff_step_ms=settings.youtube_extract_backoff_step_ms,
        backoff_cap_ms=settings.youtube_extract_backoff_cap_ms,
        telemetry=get_telemetry(),
    )


@lru_cache(maxsize=1)
def get_extractor_bridge() -> YouTubeExtractorBridge:
    settings = get_settings()
    return YouTubeExtractorBridge(
        get_audio_extractor(),
        worker_threads=settings.youtube_extract_worker_threads,
    )


def reset_cached_dependencies() -> None:
    if get_extractor_bridge.cache_info().currsize:
        get_extractor_bridge().shutdown()
    get_extractor_bridge.cache_clear()
    get_audio_extractor.cache_clear()
    get_telemetry.cache_clear()
    get_settings.cache_clear()
