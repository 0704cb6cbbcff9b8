from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PlanProfile = Literal["full", "fast"]

DATA_SAVER_FORMAT = (
    "bestaudio[abr<=128][ext=m4a]/bestaudio[abr<=128][ext=webm]/"
    "bestaudio[abr<=128]/bestaudio[ext=m4a]/bestaudio[ext=webm]/bestaudio/best"
)
STANDARD_FORMAT = "bestaudio[ext=m4a]/bestaudio[ext=webm]/bestaudio/best"
DATA_SAVER_COMPAT_FORMAT = "bestaudio[abr<=128]/bestaudio/best"
STANDARD_COMPAT_FORMAT = "bestaudio/best"

ANDROID_FAST_EXTRACTOR_ARGS = "youtube:player_client=android;player_skip=webpage,configs"
ANDROID_WEB_EXTRACTOR_ARGS = "youtube:player_client=android,web"


@dataclass(frozen=True)
class ExtractAttempt:
    label: str
    format_selector: str
    extractor_args: str | None
    uses_auth_headers: bool


def preferred_format(data_saver: bool) -> str:
    return DATA_SAVER_FORMAT if data_saver else STANDARD_FORMAT


def compat_format(data_saver: bool) -> str:
    return DATA_SAVER_COMPAT_FORMAT if data_saver else STANDARD_COMPAT_FORMAT


def _candidate_attempts(data_saver: bool, profile: PlanProfile) -> tuple[ExtractAttempt, ...]:
    preferred = preferred_format(data_saver)
    compat = compat_format(data_saver)
    android_fast = ExtractAttempt(
        label="android-fast",
        format_selector=preferred,
        extractor_args=ANDROID_FAST_EXTRACTOR_ARGS,
        uses_auth_headers=False,
    )
    android_web_auth = ExtractAttempt(
        label="android-web-auth",
        format_selector=preferred,
        extractor_args=ANDROID_WEB_EXTRACTOR_ARGS,
        uses_auth_headers=True,
    )
    compat_auth = ExtractAttempt(
        label="compat-auth",
        format_selector=compat,
        extractor_args=None,
        uses_auth_headers=True,
    )
    if profile == "fast":
        return (android_fast, android_web_auth, compat_auth)

    return (
        android_fast,
        android_web_auth,
        ExtractAttempt(
            label="android-web-noauth",
            format_selector=preferred,
            extractor_args=ANDROID_WEB_EXTRACTOR_ARGS,
            uses_auth_headers=False,
        ),
        compat_auth,
        ExtractAttempt(
            label="compat-noauth",
            format_selector=compat,
            extractor_args=None,
            uses_auth_headers=False,
        ),
    )


def plan_attempts(
    data_saver: bool,
    has_auth_headers: bool,
    *,
    profile: PlanProfile = "full",
) -> tuple[ExtractAttempt, ...]:
    """
    Ordered extraction strategies, cheapest first.

    Later entries trade latency for compatibility: the Android client with
    webpage/config fetches skipped, then Android+web clients, then no extractor
    tuning at all. Auth-only entries are dropped when the caller has no headers;
    the relative order of the rest never changes. Without auth headers the
    `fast` profile reduces to `android-fast` alone.
    """
    return tuple(
        attempt
        for attempt in _candidate_attempts(data_saver, profile)
        if has_auth_headers or not attempt.uses_auth_headers
    )
