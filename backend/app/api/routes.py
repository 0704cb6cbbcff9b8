from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from backend.app.dependencies import get_extractor_bridge
from backend.app.models.extractor_contracts import (
    ExtractAudioRequest,
    ExtractAudioResponse,
    ExtractAudioUrlResponse,
    ExtractorErrorDetail,
)
from backend.app.services.extractor_bridge import (
    AudioStreamPayload,
    ExtractorBridgeError,
    YouTubeExtractorBridge,
)

router = APIRouter()

_ERROR_STATUS_CODES: dict[str, int] = {
    "missing_video_id": 400,
    "extract_failed": 502,
}


def _bridge_error_to_http(exc: ExtractorBridgeError) -> HTTPException:
    detail = ExtractorErrorDetail(code=exc.code, message=exc.message)
    return HTTPException(
        status_code=_ERROR_STATUS_CODES.get(exc.code, 500),
        detail=detail.model_dump(),
    )


def _extract(
    request: ExtractAudioRequest,
    bridge: YouTubeExtractorBridge,
) -> AudioStreamPayload:
    try:
        return bridge.extract_audio(
            request.video_id,
            data_saver=request.data_saver,
            auth_headers=request.auth_headers,
        )
    except ExtractorBridgeError as exc:
        raise _bridge_error_to_http(exc) from exc


# Sync handlers: FastAPI runs them on its worker threadpool, off the event loop.
@router.post(
    "/youtube/extract-audio",
    response_model=ExtractAudioResponse,
    tags=["youtube"],
    operation_id="youtube_extract_audio",
)
def extract_audio(
    request: ExtractAudioRequest,
    bridge: Annotated[YouTubeExtractorBridge, Depends(get_extractor_bridge)],
) -> ExtractAudioResponse:
    payload = _extract(request, bridge)
    return ExtractAudioResponse(url=payload.url, headers=payload.headers)


@router.post(
    "/youtube/extract-audio-url",
    response_model=ExtractAudioUrlResponse,
    tags=["youtube"],
    operation_id="youtube_extract_audio_url",
)
def extract_audio_url(
    request: ExtractAudioRequest,
    bridge: Annotated[YouTubeExtractorBridge, Depends(get_extractor_bridge)],
) -> ExtractAudioUrlResponse:
    payload = _extract(request, bridge)
    return ExtractAudioUrlResponse(url=payload.url)
