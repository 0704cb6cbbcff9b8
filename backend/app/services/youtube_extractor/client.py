from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from backend.app.config import DEFAULT_USER_AGENT
from backend.app.services.youtube_extractor.backend import (
    ExtractionBackend,
    ExtractionRequest,
)
from backend.app.services.youtube_extractor.failures import (
    NO_AUDIO_URL_MESSAGE,
    UNSUPPORTED_SCHEME_MESSAGE,
    ExtractionFailure,
)
from backend.app.services.youtube_extractor.headers import (
    fill_stream_header_defaults,
    normalize_auth_headers,
    with_default_origin_headers,
)
from backend.app.services.youtube_extractor.planner import ExtractAttempt

LOGGER = logging.getLogger("hongit.youtube.extractor")


@dataclass(frozen=True)
class ExtractionResult:
    url: str
    headers: dict[str, str]


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def upgrade_to_https(url: str) -> str:
    if url.startswith("http://"):
        return url.replace("http://", "https://", 1)
    return url


class ExtractionClient:
    def __init__(
        self,
        backend: ExtractionBackend,
        *,
        socket_timeout_seconds: int = 12,
        retries: int = 2,
        extractor_retries: int = 2,
        retry_sleep_seconds: int = 1,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._backend = backend
        self._socket_timeout_seconds = max(1, socket_timeout_seconds)
        self._retries = max(0, retries)
        self._extractor_retries = max(0, extractor_retries)
        self._retry_sleep_seconds = max(0, retry_sleep_seconds)
        self._user_agent = user_agent

    def build_request(
        self,
        video_id: str,
        auth_headers: Mapping[str, str | None],
        attempt: ExtractAttempt,
    ) -> ExtractionRequest:
        extra_headers: tuple[tuple[str, str], ...] = ()
        if attempt.uses_auth_headers:
            injected = with_default_origin_headers(normalize_auth_headers(auth_headers))
            extra_headers = tuple(injected.items())

        extractor_args = attempt.extractor_args
        if extractor_args is not None and not extractor_args.strip():
            extractor_args = None

        return ExtractionRequest(
            target_url=watch_url(video_id),
            format_selector=attempt.format_selector,
            extractor_args=extractor_args,
            extra_headers=extra_headers,
            socket_timeout_seconds=self._socket_timeout_seconds,
            retries=self._retries,
            extractor_retries=self._extractor_retries,
            retry_sleep_seconds=self._retry_sleep_seconds,
        )

    def execute(
        self,
        video_id: str,
        auth_headers: Mapping[str, str | None],
        attempt: ExtractAttempt,
    ) -> ExtractionResult:
        request = self.build_request(video_id, auth_headers, attempt)
        try:
            info = self._backend.resolve(request)
        except ExtractionFailure:
            raise
        except Exception as exc:
            LOGGER.debug(
                "youtube extract backend_error video_id=%s attempt=%s error_type=%s",
                video_id,
                attempt.label,
                type(exc).__name__,
            )
            raise ExtractionFailure(str(exc)) from exc

        url = (info.url or "").strip()
        if not url:
            raise ExtractionFailure(NO_AUDIO_URL_MESSAGE)

        safe_url = upgrade_to_https(url)
        if not safe_url.startswith("https://"):
            raise ExtractionFailure(UNSUPPORTED_SCHEME_MESSAGE)

        return ExtractionResult(
            url=safe_url,
            headers=fill_stream_header_defaults(info.http_headers, user_agent=self._user_agent),
        )
