from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from time import perf_counter
from typing import Literal

from backend.app.services.youtube_extractor.client import ExtractionClient, ExtractionResult
from backend.app.services.youtube_extractor.failures import (
    NO_AUDIO_URL_MESSAGE,
    ExtractionFailure,
    InvalidVideoIdError,
    is_retryable,
    match_failure_family,
    to_client_message,
)
from backend.app.services.youtube_extractor.planner import (
    ExtractAttempt,
    PlanProfile,
    plan_attempts,
)
from backend.app.telemetry import TelemetryClient

LOGGER = logging.getLogger("hongit.youtube.extractor")

AttemptOutcome = Literal["success", "retryable_failure", "terminal_failure"]
FallbackDecision = Literal["continue", "stop"]


@dataclass(frozen=True)
class AttemptRecord:
    index: int
    attempt: ExtractAttempt
    outcome: AttemptOutcome
    message: str | None = None


@dataclass(frozen=True)
class ExtractionRun:
    records: tuple[AttemptRecord, ...]
    result: ExtractionResult | None = None
    last_error: ExtractionFailure | None = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None

    @property
    def winning_label(self) -> str | None:
        if not self.records or self.records[-1].outcome != "success":
            return None
        return self.records[-1].attempt.label


def backoff_delay_ms(index: int, *, step_ms: int = 120, cap_ms: int = 300) -> int:
    return min(cap_ms, (index + 1) * step_ms)


def decide_after_failure(
    index: int,
    plan_length: int,
    failure: ExtractionFailure,
) -> FallbackDecision:
    has_next = index < plan_length - 1
    if not has_next or not is_retryable(failure):
        return "stop"
    return "continue"


def has_usable_auth_headers(auth_headers: Mapping[str, str | None] | None) -> bool:
    if not auth_headers:
        return False
    return any(
        value is not None and str(key).strip() and str(value).strip()
        for key, value in auth_headers.items()
    )


class YouTubeAudioExtractor:
    """
    Resolve a playable audio stream for a YouTube video id.

    The attempt plan is scanned strictly in order. A success returns at once;
    a terminal failure (age, privacy, geo or availability policy) stops the
    scan; a transient failure sleeps a short linear backoff and moves on. When
    the scan ends without a result the last recorded failure is surfaced,
    translated to its client facing message.
    """

    def __init__(
        self,
        client: ExtractionClient,
        *,
        plan_profile: PlanProfile = "full",
        backoff_step_ms: int = 120,
        backoff_cap_ms: int = 300,
        sleep: Callable[[float], None] = time.sleep,
        telemetry: TelemetryClient | None = None,
    ) -> None:
        self._client = client
        self._plan_profile: PlanProfile = plan_profile
        self._backoff_step_ms = max(0, backoff_step_ms)
        self._backoff_cap_ms = max(0, backoff_cap_ms)
        self._sleep = sleep
        self._telemetry = telemetry if telemetry is not None else TelemetryClient.disabled()

    def plan(self, data_saver: bool, has_auth_headers: bool) -> tuple[ExtractAttempt, ...]:
        return plan_attempts(data_saver, has_auth_headers, profile=self._plan_profile)

    def run(
        self,
        video_id: str,
        auth_headers: Mapping[str, str | None] | None = None,
        *,
        data_saver: bool = False,
    ) -> ExtractionRun:
        normalized_video_id = video_id.strip() if isinstance(video_id, str) else ""
        if not normalized_video_id:
            raise InvalidVideoIdError("videoId is required")

        headers: Mapping[str, str | None] = auth_headers or {}
        attempts = self.plan(data_saver, has_usable_auth_headers(headers))
        records: list[AttemptRecord] = []
        last_error: ExtractionFailure | None = None
        started_at = perf_counter()

        for index, attempt in enumerate(attempts):
            try:
                result = self._client.execute(normalized_video_id, headers, attempt)
            except ExtractionFailure as exc:
                last_error = exc
                decision = decide_after_failure(index, len(attempts), exc)
                retryable = is_retryable(exc)
                records.append(
                    AttemptRecord(
                        index=index,
                        attempt=attempt,
                        outcome="retryable_failure" if retryable else "terminal_failure",
                        message=exc.message,
                    )
                )
                self._telemetry.emit(
                    "youtube.extract.attempt.failed",
                    video_id=normalized_video_id,
                    attempt_label=attempt.label,
                    attempt_index=index,
                    retryable=retryable,
                    decision=decision,
                    failure_family=_failure_family_name(exc),
                    error_message=exc.message,
                )
                if decision == "stop":
                    if not retryable:
                        LOGGER.info(
                            "youtube extract terminal_failure video_id=%s attempt=%s error=%s",
                            normalized_video_id,
                            attempt.label,
                            exc.message,
                        )
                    break

                LOGGER.debug(
                    "youtube extract fallback video_id=%s after=%s error=%s",
                    normalized_video_id,
                    attempt.label,
                    exc.message,
                )
                delay_ms = backoff_delay_ms(
                    index,
                    step_ms=self._backoff_step_ms,
                    cap_ms=self._backoff_cap_ms,
                )
                self._sleep(delay_ms / 1000)
                continue

            records.append(AttemptRecord(index=index, attempt=attempt, outcome="success"))
            if index > 0:
                LOGGER.info(
                    "youtube extract succeeded via fallback path video_id=%s attempt=%s",
                    normalized_video_id,
                    attempt.label,
                )
            run = ExtractionRun(records=tuple(records), result=result, last_error=last_error)
            self._emit_finish(normalized_video_id, run, started_at)
            return run

        run = ExtractionRun(records=tuple(records), result=None, last_error=last_error)
        LOGGER.warning(
            "youtube extract exhausted video_id=%s attempts_run=%s planned=%s",
            normalized_video_id,
            len(records),
            len(attempts),
        )
        self._emit_finish(normalized_video_id, run, started_at)
        return run

    def resolve(
        self,
        video_id: str,
        auth_headers: Mapping[str, str | None] | None = None,
        *,
        data_saver: bool = False,
    ) -> ExtractionResult:
        run = self.run(video_id, auth_headers, data_saver=data_saver)
        if run.result is not None:
            return run.result
        last_error = run.last_error or ExtractionFailure(NO_AUDIO_URL_MESSAGE)
        raise ExtractionFailure(to_client_message(last_error)) from run.last_error

    def _emit_finish(self, video_id: str, run: ExtractionRun, started_at: float) -> None:
        self._telemetry.emit(
            "youtube.extract.finish",
            video_id=video_id,
            outcome="success" if run.succeeded else "failed",
            attempts_run=len(run.records),
            attempt_label=run.winning_label,
            duration_ms=int((perf_counter() - started_at) * 1000),
        )


def _failure_family_name(failure: ExtractionFailure) -> str:
    family = match_failure_family(failure.message)
    return family.name if family is not None else "unclassified"
