from __future__ import annotations

from dataclasses import dataclass

NO_AUDIO_URL_MESSAGE = "No playable audio URL extracted"
NO_AUDIO_URL_CLIENT_MESSAGE = "No playable audio URL extracted."
UNSUPPORTED_SCHEME_MESSAGE = "Extracted audio URL does not use http(s)"


class YouTubeExtractionError(Exception):
    pass


class ExtractionFailure(YouTubeExtractionError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "")
        self.message = message or ""


class InvalidVideoIdError(YouTubeExtractionError):
    pass


@dataclass(frozen=True)
class FailurePhraseFamily:
    name: str
    phrases: tuple[str, ...]
    terminal: bool
    client_message: str


# Order is the client message precedence when several families match.
FAILURE_PHRASE_FAMILIES: tuple[FailurePhraseFamily, ...] = (
    FailurePhraseFamily(
        name="age_restricted",
        phrases=("age-restricted", "confirm your age"),
        terminal=True,
        client_message="Age-restricted content. Sign-in headers are required.",
    ),
    FailurePhraseFamily(
        name="private",
        phrases=("private video", "members-only"),
        terminal=True,
        client_message="Private or members-only content cannot be streamed.",
    ),
    FailurePhraseFamily(
        name="geo_restricted",
        phrases=("unavailable in your country", "geo restricted", "geo-restricted"),
        terminal=True,
        client_message="Geo-restricted content is unavailable in this region.",
    ),
    FailurePhraseFamily(
        name="unavailable",
        phrases=("video unavailable", "this video is unavailable"),
        terminal=True,
        client_message="Video is unavailable.",
    ),
    FailurePhraseFamily(
        name="forbidden",
        phrases=("forbidden", "http error 403"),
        terminal=False,
        client_message="Access denied by source (403). Try refreshing auth headers.",
    ),
)


def failure_message(exc: BaseException | None) -> str:
    if exc is None:
        return ""
    if isinstance(exc, ExtractionFailure):
        return exc.message
    return str(exc)


def match_failure_family(message: str) -> FailurePhraseFamily | None:
    lowered = message.lower()
    for family in FAILURE_PHRASE_FAMILIES:
        if any(phrase in lowered for phrase in family.phrases):
            return family
    return None


def is_retryable(exc: BaseException | None) -> bool:
    message = failure_message(exc)
    if not message.strip():
        # Blank errors are usually transport level.
        return True
    return not any(
        family.terminal and any(phrase in message.lower() for phrase in family.phrases)
        for family in FAILURE_PHRASE_FAMILIES
    )


def to_client_message(exc: BaseException | None) -> str:
    message = failure_message(exc).strip()
    family = match_failure_family(message)
    if family is not None:
        return family.client_message
    if message:
        return message
    return NO_AUDIO_URL_CLIENT_MESSAGE
