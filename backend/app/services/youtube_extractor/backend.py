from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, cast

from yt_dlp import YoutubeDL
from yt_dlp.version import __version__ as YTDLP_VERSION

YTDLP_LOGGER = logging.getLogger("hongit.youtube.ytdlp")


@dataclass(frozen=True)
class ExtractionRequest:
    target_url: str
    format_selector: str
    extractor_args: str | None = None
    extra_headers: tuple[tuple[str, str], ...] = ()
    socket_timeout_seconds: int = 12
    retries: int = 2
    extractor_retries: int = 2
    retry_sleep_seconds: int = 1
    no_playlist: bool = True
    no_warnings: bool = True
    geo_bypass: bool = True


@dataclass(frozen=True)
class MediaInfo:
    url: str | None
    http_headers: dict[str, str] = field(default_factory=dict)


class ExtractionBackend(Protocol):
    def resolve(self, request: ExtractionRequest) -> MediaInfo:
        ...


def parse_extractor_args(raw_value: str | None) -> dict[str, dict[str, list[str]]]:
    """
    Parse the command-line `--extractor-args` grammar into yt-dlp's option shape.

    `youtube:player_client=android;player_skip=webpage,configs` becomes
    `{"youtube": {"player_client": ["android"], "player_skip": ["webpage", "configs"]}}`.
    """
    if raw_value is None or not raw_value.strip():
        return {}

    extractor_key, separator, raw_args = raw_value.strip().partition(":")
    extractor_key = extractor_key.strip().lower()
    if not separator or not extractor_key:
        raise ValueError(f"Invalid extractor args (expected KEY:ARGS): {raw_value!r}")

    parsed: dict[str, list[str]] = {}
    for raw_arg in raw_args.split(";"):
        arg_name, _, raw_values = raw_arg.partition("=")
        arg_name = arg_name.strip().replace("-", "_")
        if not arg_name:
            continue
        values = [value.strip() for value in raw_values.split(",") if value.strip()]
        parsed.setdefault(arg_name, []).extend(values)
    return {extractor_key: parsed}


def build_ytdlp_options(request: ExtractionRequest) -> dict[str, Any]:
    retry_sleep_seconds = max(0, request.retry_sleep_seconds)

    # yt-dlp calls sleep functions with the retry count as the keyword `n`.
    def _retry_sleep(n: int) -> int:
        _ = n
        return retry_sleep_seconds

    options: dict[str, Any] = {
        "quiet": True,
        "noprogress": True,
        "skip_download": True,
        "noplaylist": request.no_playlist,
        "no_warnings": request.no_warnings,
        "geo_bypass": request.geo_bypass,
        "socket_timeout": request.socket_timeout_seconds,
        "retries": request.retries,
        "extractor_retries": request.extractor_retries,
        "retry_sleep_functions": {"http": _retry_sleep, "extractor": _retry_sleep},
        "format": request.format_selector,
        "logger": YTDLP_LOGGER,
    }
    extractor_args = parse_extractor_args(request.extractor_args)
    if extractor_args:
        options["extractor_args"] = extractor_args
    if request.extra_headers:
        options["http_headers"] = dict(request.extra_headers)
    return options


class YtDlpBackend:
    def resolve(self, request: ExtractionRequest) -> MediaInfo:
        options = build_ytdlp_options(request)
        with YoutubeDL(options) as ydl:
            raw_info = ydl.extract_info(request.target_url, download=False)

        info = _as_dict(raw_info)
        raw_url = info.get("url")
        raw_headers = _as_dict(info.get("http_headers"))
        return MediaInfo(
            url=raw_url if isinstance(raw_url, str) else None,
            http_headers={
                key: str(value) for key, value in raw_headers.items() if value is not None
            },
        )


def backend_version() -> str:
    return str(YTDLP_VERSION)


def _as_dict(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        raw_dict = cast(dict[object, object], value)
        return {key: item for key, item in raw_dict.items() if isinstance(key, str)}
    return {}
