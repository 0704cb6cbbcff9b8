from __future__ import annotations

import pytest

from backend.app.services.youtube_extractor.failures import (
    FAILURE_PHRASE_FAMILIES,
    ExtractionFailure,
    is_retryable,
    to_client_message,
)


@pytest.mark.parametrize(
    "message",
    [
        "ERROR: [youtube] abc123: Private video. Sign in if you've been granted access",
        "ERROR: [youtube] abc123: Join this channel to get access to members-only content",
        "ERROR: [youtube] abc123: Sign in to confirm your age. This video may be inappropriate",
        "This video is age-restricted",
        "ERROR: [youtube] abc123: Video unavailable",
        "ERROR: [youtube] abc123: This video is unavailable",
        "The uploader has not made this video available: unavailable in your country",
        "Video is geo restricted",
        "Video is GEO-RESTRICTED",
    ],
)
def test_policy_failures_are_terminal(message: str) -> None:
    assert is_retryable(ExtractionFailure(message)) is False


@pytest.mark.parametrize(
    "message",
    [
        "",
        "   ",
        "ERROR: Unable to download API page: HTTP Error 403: Forbidden",
        "timed out",
        "ERROR: [youtube] abc123: Requested format is not available",
    ],
)
def test_transient_failures_are_retryable(message: str) -> None:
    assert is_retryable(ExtractionFailure(message)) is True


def test_plain_exceptions_are_classified_by_message() -> None:
    assert is_retryable(RuntimeError("Private video")) is False
    assert is_retryable(RuntimeError("connection reset by peer")) is True
    assert is_retryable(None) is True


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        (
            "Sign in to confirm your age",
            "Age-restricted content. Sign-in headers are required.",
        ),
        ("Private video", "Private or members-only content cannot be streamed."),
        ("members-only content", "Private or members-only content cannot be streamed."),
        ("geo restricted", "Geo-restricted content is unavailable in this region."),
        ("Video unavailable", "Video is unavailable."),
        (
            "HTTP Error 403: Forbidden",
            "Access denied by source (403). Try refreshing auth headers.",
        ),
        ("  socket timeout  ", "socket timeout"),
        ("", "No playable audio URL extracted."),
    ],
)
def test_client_messages(message: str, expected: str) -> None:
    assert to_client_message(ExtractionFailure(message)) == expected


def test_age_restriction_takes_precedence_over_unavailability() -> None:
    failure = ExtractionFailure("Video unavailable. Sign in to confirm your age")
    assert to_client_message(failure) == "Age-restricted content. Sign-in headers are required."


def test_client_messages_are_stable_when_reclassified() -> None:
    for family in FAILURE_PHRASE_FAMILIES:
        message = family.client_message
        assert to_client_message(ExtractionFailure(message)) == message


def test_classification_and_messaging_share_phrase_families() -> None:
    for family in FAILURE_PHRASE_FAMILIES:
        for phrase in family.phrases:
            failure = ExtractionFailure(f"ERROR: {phrase.upper()}")
            assert is_retryable(failure) is (not family.terminal)
            assert to_client_message(failure) == family.client_message
