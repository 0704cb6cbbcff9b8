from __future__ import annotations

from backend.app.services.youtube_extractor.headers import (
    DEFAULT_ORIGIN,
    DEFAULT_REFERER,
    fill_stream_header_defaults,
    normalize_auth_headers,
    with_default_origin_headers,
)


def test_normalize_drops_unrecognized_headers() -> None:
    assert normalize_auth_headers({"X-Random": "x", "user-agent": "UA"}) == {"User-Agent": "UA"}


def test_normalize_canonicalizes_case_and_trims() -> None:
    normalized = normalize_auth_headers(
        {
            "  COOKIE ": "  SID=abc; HSID=def  ",
            "x-goog-authuser": "0",
            "X-YOUTUBE-CLIENT-NAME": "1",
            "x-youtube-client-version": "2.20240101.00.00",
            "X-Youtube-Bootstrap-Logged-In": "true",
            "x-goog-visitor-id": "CgtWaXNpdG9y",
            "x-origin": "https://www.youtube.com",
            "Accept-Language": "ro-RO",
        }
    )

    assert normalized == {
        "Cookie": "SID=abc; HSID=def",
        "X-Goog-AuthUser": "0",
        "X-Youtube-Client-Name": "1",
        "X-Youtube-Client-Version": "2.20240101.00.00",
        "X-Youtube-Bootstrap-Logged-In": "true",
        "X-Goog-Visitor-Id": "CgtWaXNpdG9y",
        "X-Origin": "https://www.youtube.com",
        "Accept-Language": "ro-RO",
    }


def test_normalize_drops_blank_and_none_values() -> None:
    normalized = normalize_auth_headers(
        {
            "Cookie": None,
            "Referer": "   ",
            "": "value",
            "Origin": "https://music.youtube.com",
        }
    )

    assert normalized == {"Origin": "https://music.youtube.com"}
    assert "None" not in normalized.values()


def test_normalize_last_duplicate_lowercase_key_wins() -> None:
    normalized = normalize_auth_headers({"cookie": "first", "Cookie": "second"})
    assert normalized == {"Cookie": "second"}


def test_normalize_empty_inputs_yield_empty_output() -> None:
    assert normalize_auth_headers({}) == {}
    assert normalize_auth_headers(None) == {}
    assert normalize_auth_headers({"X-Unknown": "1", "Authorization": "Bearer x"}) == {}


def test_normalize_is_idempotent() -> None:
    once = normalize_auth_headers(
        {"cookie": "SID=1", "USER-AGENT": "UA", "referer": "https://m.youtube.com/"}
    )
    assert normalize_auth_headers(once) == once


def test_default_origin_headers_only_fill_gaps() -> None:
    assert with_default_origin_headers({}) == {
        "Referer": DEFAULT_REFERER,
        "Origin": DEFAULT_ORIGIN,
    }
    assert with_default_origin_headers({"Referer": "https://music.youtube.com/"}) == {
        "Referer": "https://music.youtube.com/",
        "Origin": DEFAULT_ORIGIN,
    }


def test_stream_header_defaults_never_overwrite_backend_values() -> None:
    merged = fill_stream_header_defaults(
        {"User-Agent": "com.google.android.youtube/19.09.37", "Accept": "audio/*"},
        user_agent="Default UA",
    )

    assert merged == {
        "User-Agent": "com.google.android.youtube/19.09.37",
        "Accept": "audio/*",
        "Accept-Language": "en-US,en;q=0.9",
        "Referer": "https://www.youtube.com/",
        "Origin": "https://www.youtube.com",
    }
