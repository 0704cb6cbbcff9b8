from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Literal

from structlog.contextvars import bind_contextvars, reset_contextvars

from backend.app.services.youtube_extractor.backend import backend_version
from backend.app.services.youtube_extractor.engine import YouTubeAudioExtractor
from backend.app.services.youtube_extractor.failures import (
    ExtractionFailure,
    YouTubeExtractionError,
    to_client_message,
)

LOGGER = logging.getLogger("hongit.youtube.bridge")

BridgeErrorCode = Literal["missing_video_id", "extract_failed"]
MISSING_VIDEO_ID_MESSAGE = "videoId is required"


class ExtractorBridgeError(YouTubeExtractionError):
    def __init__(self, code: BridgeErrorCode, message: str) -> None:
        super().__init__(message)
        self.code: BridgeErrorCode = code
        self.message = message


@dataclass(frozen=True)
class AudioStreamPayload:
    url: str
    headers: dict[str, str]


def coerce_auth_headers(raw_headers: Mapping[str, Any] | None) -> dict[str, str]:
    if not raw_headers:
        return {}
    coerced: dict[str, str] = {}
    for raw_key, raw_value in raw_headers.items():
        if raw_value is None:
            continue
        key = str(raw_key).strip()
        value = str(raw_value).strip()
        if key and value:
            coerced[key] = value
    return coerced


def _require_video_id(video_id: object) -> str:
    normalized = video_id.strip() if isinstance(video_id, str) else ""
    if not normalized:
        raise ExtractorBridgeError("missing_video_id", MISSING_VIDEO_ID_MESSAGE)
    return normalized


class YouTubeExtractorBridge:
    """Caller facing entry points for audio stream extraction."""

    def __init__(self, extractor: YouTubeAudioExtractor, *, worker_threads: int = 4) -> None:
        self._extractor = extractor
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, worker_threads),
            thread_name_prefix="youtube-extract",
        )

    def initialize(self) -> str | None:
        try:
            version = backend_version()
        except Exception as exc:
            LOGGER.warning("yt-dlp version lookup skipped error=%s", exc)
            return None
        LOGGER.info("youtube extractor ready yt_dlp_version=%s", version)
        return version

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def extract_audio(
        self,
        video_id: object,
        *,
        data_saver: bool = False,
        auth_headers: Mapping[str, Any] | None = None,
    ) -> AudioStreamPayload:
        normalized_video_id = _require_video_id(video_id)
        headers = coerce_auth_headers(auth_headers)
        context_tokens = bind_contextvars(youtube_video_id=normalized_video_id)
        try:
            result = self._extractor.resolve(
                normalized_video_id,
                headers,
                data_saver=data_saver,
            )
        except ExtractionFailure as exc:
            raise ExtractorBridgeError("extract_failed", to_client_message(exc)) from exc
        finally:
            reset_contextvars(**context_tokens)
        return AudioStreamPayload(url=result.url, headers=dict(result.headers))

    def extract_audio_url(
        self,
        video_id: object,
        *,
        data_saver: bool = False,
        auth_headers: Mapping[str, Any] | None = None,
    ) -> str:
        payload = self.extract_audio(
            video_id,
            data_saver=data_saver,
            auth_headers=auth_headers,
        )
        return payload.url

    def submit_extract_audio(
        self,
        video_id: object,
        *,
        data_saver: bool = False,
        auth_headers: Mapping[str, Any] | None = None,
    ) -> Future[AudioStreamPayload]:
        normalized_video_id = _require_video_id(video_id)
        return self._executor.submit(
            self.extract_audio,
            normalized_video_id,
            data_saver=data_saver,
            auth_headers=auth_headers,
        )

    def submit_extract_audio_url(
        self,
        video_id: object,
        *,
        data_saver: bool = False,
        auth_headers: Mapping[str, Any] | None = None,
    ) -> Future[str]:
        normalized_video_id = _require_video_id(video_id)
        return self._executor.submit(
            self.extract_audio_url,
            normalized_video_id,
            data_saver=data_saver,
            auth_headers=auth_headers,
        )
