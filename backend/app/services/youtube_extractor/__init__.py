from backend.app.services.youtube_extractor.backend import (
    ExtractionBackend,
    ExtractionRequest,
    MediaInfo,
    YtDlpBackend,
)
from backend.app.services.youtube_extractor.client import ExtractionClient, ExtractionResult
from backend.app.services.youtube_extractor.engine import (
    ExtractionRun,
    YouTubeAudioExtractor,
    backoff_delay_ms,
)
from backend.app.services.youtube_extractor.failures import (
    ExtractionFailure,
    InvalidVideoIdError,
    YouTubeExtractionError,
    is_retryable,
    to_client_message,
)
from backend.app.services.youtube_extractor.headers import normalize_auth_headers
from backend.app.services.youtube_extractor.planner import ExtractAttempt, plan_attempts

__all__ = [
    "ExtractAttempt",
    "ExtractionBackend",
    "ExtractionClient",
    "ExtractionFailure",
    "ExtractionRequest",
    "ExtractionResult",
    "ExtractionRun",
    "InvalidVideoIdError",
    "MediaInfo",
    "YouTubeAudioExtractor",
    "YouTubeExtractionError",
    "YtDlpBackend",
    "backoff_delay_ms",
    "is_retryable",
    "normalize_auth_headers",
    "plan_attempts",
    "to_client_message",
]
