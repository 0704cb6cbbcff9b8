from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExtractAudioRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    # Blank ids are reported as `missing_video_id` by the bridge, not as a schema error.
    video_id: str = Field(default="", alias="videoId", max_length=256)
    data_saver: bool = Field(default=False, alias="dataSaver")
    auth_headers: dict[str, Any] | None = Field(default=None, alias="authHeaders")

    @field_validator("video_id", mode="before")
    @classmethod
    def _coerce_video_id(cls, value: object) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("videoId must be a string")
        return value

    @field_validator("data_saver", mode="before")
    @classmethod
    def _coerce_data_saver(cls, value: object) -> object:
        return False if value is None else value


class ExtractAudioResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str
    headers: dict[str, str]


class ExtractAudioUrlResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str


class ExtractorErrorDetail(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: Literal["missing_video_id", "extract_failed"]
    message: str
