from __future__ import annotations

from typing import Any

import pytest

from backend.app.services.youtube_extractor import backend as backend_module
from backend.app.services.youtube_extractor.backend import (
    YTDLP_LOGGER,
    ExtractionRequest,
    YtDlpBackend,
    build_ytdlp_options,
    parse_extractor_args,
)


class _FakeYoutubeDL:
    instances: list[_FakeYoutubeDL] = []
    info: Any = None
    error: Exception | None = None

    def __init__(self, options: dict[str, Any]) -> None:
        self.options = options
        self.extract_calls: list[tuple[str, bool]] = []
        _FakeYoutubeDL.instances.append(self)

    def __enter__(self) -> _FakeYoutubeDL:
        return self

    def __exit__(self, *_args: object) -> None:
        return None

    def extract_info(self, url: str, download: bool = True) -> Any:
        self.extract_calls.append((url, download))
        if _FakeYoutubeDL.error is not None:
            raise _FakeYoutubeDL.error
        return _FakeYoutubeDL.info


@pytest.fixture(autouse=True)
def _fake_youtube_dl(monkeypatch: pytest.MonkeyPatch) -> None:  # pyright: ignore[reportUnusedFunction]
    _FakeYoutubeDL.instances = []
    _FakeYoutubeDL.info = None
    _FakeYoutubeDL.error = None
    monkeypatch.setattr(backend_module, "YoutubeDL", _FakeYoutubeDL)


def test_parse_extractor_args_follows_cli_grammar() -> None:
    assert parse_extractor_args("youtube:player_client=android;player_skip=webpage,configs") == {
        "youtube": {"player_client": ["android"], "player_skip": ["webpage", "configs"]}
    }
    assert parse_extractor_args("YouTube:player-client=android,web") == {
        "youtube": {"player_client": ["android", "web"]}
    }
    assert parse_extractor_args(None) == {}
    assert parse_extractor_args("   ") == {}


def test_parse_extractor_args_rejects_missing_extractor_key() -> None:
    with pytest.raises(ValueError):
        parse_extractor_args("player_client=android")


def test_build_options_maps_request_flags() -> None:
    request = ExtractionRequest(
        target_url="https://www.youtube.com/watch?v=abc123",
        format_selector="bestaudio/best",
        extractor_args="youtube:player_client=android,web",
        extra_headers=(("Cookie", "SID=1"), ("Referer", "https://www.youtube.com/")),
        socket_timeout_seconds=7,
        retries=0,
        extractor_retries=1,
        retry_sleep_seconds=2,
    )

    options = build_ytdlp_options(request)

    assert options["noplaylist"] is True
    assert options["no_warnings"] is True
    assert options["geo_bypass"] is True
    assert options["skip_download"] is True
    assert options["socket_timeout"] == 7
    assert options["retries"] == 0
    assert options["extractor_retries"] == 1
    assert options["retry_sleep_functions"]["http"](n=3) == 2
    assert options["retry_sleep_functions"]["extractor"](n=1) == 2
    assert options["format"] == "bestaudio/best"
    assert options["extractor_args"] == {"youtube": {"player_client": ["android", "web"]}}
    assert options["http_headers"] == {"Cookie": "SID=1", "Referer": "https://www.youtube.com/"}
    assert options["logger"] is YTDLP_LOGGER


def test_build_options_omits_empty_tuning_and_headers() -> None:
    options = build_ytdlp_options(
        ExtractionRequest(target_url="https://www.youtube.com/watch?v=x", format_selector="best")
    )

    assert "extractor_args" not in options
    assert "http_headers" not in options


def test_resolve_reads_url_and_headers_without_downloading() -> None:
    _FakeYoutubeDL.info = {
        "id": "abc123",
        "url": "https://rr1.googlevideo.com/videoplayback",
        "http_headers": {"User-Agent": "ua", "Accept": "*/*", "X-Empty": None},
    }

    info = YtDlpBackend().resolve(
        ExtractionRequest(
            target_url="https://www.youtube.com/watch?v=abc123",
            format_selector="bestaudio",
        )
    )

    assert info.url == "https://rr1.googlevideo.com/videoplayback"
    assert info.http_headers == {"User-Agent": "ua", "Accept": "*/*"}
    instance = _FakeYoutubeDL.instances[0]
    assert instance.extract_calls == [("https://www.youtube.com/watch?v=abc123", False)]
    assert instance.options["format"] == "bestaudio"


def test_resolve_tolerates_missing_info() -> None:
    _FakeYoutubeDL.info = None

    info = YtDlpBackend().resolve(
        ExtractionRequest(target_url="https://www.youtube.com/watch?v=x", format_selector="best")
    )

    assert info.url is None
    assert info.http_headers == {}


def test_resolve_propagates_backend_errors() -> None:
    _FakeYoutubeDL.error = RuntimeError("ERROR: [youtube] x: Video unavailable")

    request = ExtractionRequest(target_url="https://www.youtube.com/watch?v=x", format_selector="best")
    with pytest.raises(RuntimeError, match="Video unavailable"):
        YtDlpBackend().resolve(request)


def test_retry_sleep_functions_accept_ytdlp_keyword_call(monkeypatch: pytest.MonkeyPatch) -> None:
    from yt_dlp.utils import RetryManager

    slept: list[float] = []
    monkeypatch.setattr("time.sleep", slept.append)
    options = build_ytdlp_options(
        ExtractionRequest(
            target_url="https://www.youtube.com/watch?v=x",
            format_selector="best",
            retry_sleep_seconds=2,
        )
    )

    for kind in ("http", "extractor"):
        RetryManager.report_retry(
            RuntimeError("Incomplete data received"),
            1,
            2,
            sleep_func=options["retry_sleep_functions"][kind],
            info=lambda _message: None,
            warn=lambda _message: None,
        )

    assert slept == [2.0, 2.0]
