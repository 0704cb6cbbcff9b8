from __future__ import annotations

from collections.abc import Mapping

DEFAULT_REFERER = "https://www.youtube.com/"
DEFAULT_ORIGIN = "https://www.youtube.com"
DEFAULT_ACCEPT = "*/*"
DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.9"

# Lowercase match key -> canonical outbound header name.
FORWARDED_AUTH_HEADERS: tuple[tuple[str, str], ...] = (
    ("cookie", "Cookie"),
    ("user-agent", "User-Agent"),
    ("accept", "Accept"),
    ("accept-language", "Accept-Language"),
    ("x-goog-visitor-id", "X-Goog-Visitor-Id"),
    ("x-goog-authuser", "X-Goog-AuthUser"),
    ("x-youtube-client-name", "X-Youtube-Client-Name"),
    ("x-youtube-client-version", "X-Youtube-Client-Version"),
    ("x-youtube-bootstrap-logged-in", "X-Youtube-Bootstrap-Logged-In"),
    ("x-origin", "X-Origin"),
    ("referer", "Referer"),
    ("origin", "Origin"),
)


def normalize_auth_headers(raw_headers: Mapping[str, str | None] | None) -> dict[str, str]:
    """
    Reduce a caller supplied header bag to the allow-listed YouTube identity headers.

    Keys are matched case-insensitively after trimming; when several raw keys fold
    to the same lowercase name the last one wins. Blank keys, blank values and
    `None` values are dropped, as is anything outside the allow-list.
    """
    if not raw_headers:
        return {}

    by_lower_key: dict[str, str] = {}
    for raw_key, raw_value in raw_headers.items():
        if raw_value is None:
            continue
        key = str(raw_key).strip().lower()
        value = str(raw_value).strip()
        if not key or not value:
            continue
        by_lower_key[key] = value

    normalized: dict[str, str] = {}
    for lower_key, canonical_key in FORWARDED_AUTH_HEADERS:
        value = by_lower_key.get(lower_key)
        if value is not None:
            normalized[canonical_key] = value
    return normalized


def with_default_origin_headers(headers: Mapping[str, str]) -> dict[str, str]:
    merged = dict(headers)
    merged.setdefault("Referer", DEFAULT_REFERER)
    merged.setdefault("Origin", DEFAULT_ORIGIN)
    return merged


def fill_stream_header_defaults(
    headers: Mapping[str, str] | None,
    *,
    user_agent: str,
) -> dict[str, str]:
    # Backend supplied values always win; defaults only fill gaps.
    merged = {str(key): str(value) for key, value in (headers or {}).items() if value is not None}
    merged.setdefault("User-Agent", user_agent)
    merged.setdefault("Accept", DEFAULT_ACCEPT)
    merged.setdefault("Accept-Language", DEFAULT_ACCEPT_LANGUAGE)
    merged.setdefault("Referer", DEFAULT_REFERER)
    merged.setdefault("Origin", DEFAULT_ORIGIN)
    return merged
