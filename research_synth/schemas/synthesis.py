from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

SourceType = Literal["url", "text"]
Depth = Literal["brief", "detailed"]
Quality = Literal["high", "medium", "low"]

MIN_SOURCES = 2
MAX_SOURCES = 8
MIN_CONTENT_CHARS = 10


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class SourceInput(BaseModel):
    type: SourceType
    content: str
    label: str | None = None

    @field_validator("content")
    @classmethod
    def content_long_enough(cls, value: str) -> str:
        if len(value.strip()) < MIN_CONTENT_CHARS:
            raise ValueError(f"must be at least {MIN_CONTENT_CHARS} chars")
        return value

    @field_validator("label")
    @classmethod
    def blank_label_is_none(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class SynthesizeRequest(BaseModel):
    """
    /synthesize payload. FastAPI binds and validates the body against this
    model; describe_request_errors turns the first failure into the message
    clients see.
    """

    sources: list[SourceInput] = Field(min_length=MIN_SOURCES, max_length=MAX_SOURCES)
    topic: str | None = None
    depth: Depth = "brief"

    @field_validator("sources", mode="before")
    @classmethod
    def source_count_in_range(cls, value: Any) -> Any:
        # Checked before the items so a bad count is reported first
        if isinstance(value, list):
            if len(value) > MAX_SOURCES:
                raise PydanticCustomError(
                    "too_long", "at most {max_sources} sources allowed", {"max_sources": MAX_SOURCES}
                )
            if len(value) < MIN_SOURCES:
                raise PydanticCustomError(
                    "too_short", "at least {min_sources} sources required", {"min_sources": MIN_SOURCES}
                )
        return value

    @field_validator("topic")
    @classmethod
    def blank_topic_is_none(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceSummary(_CamelModel):
    id: int
    label: str
    summary: str = ""
    quality: Quality = "medium"
    url: str | None = None


class SynthesisResult(_CamelModel):
    synthesis: str = Field("", description="Overall synthesis across all sources.")
    key_themes: list[str] = Field(default_factory=list, description="Main themes across sources.")
    consensus: list[str] = Field(default_factory=list, description="Points the sources agree on.")
    contradictions: list[str] = Field(
        default_factory=list, description="Points where sources disagree."
    )
    sources: list[SourceSummary] = Field(default_factory=list)
    confidence: float = Field(0.7, ge=0.0, le=1.0, description="0.0 to 1.0 confidence score.")
    topic: str | None = None
    depth: Depth = "brief"
    source_count: int = 0
    processing_time_ms: int = 0


class HealthResponse(_CamelModel):
    status: Literal["ok", "degraded"]
    service: str
    version: str
    timestamp: str
    model: str
    ollama: Literal["connected", "unreachable"]
    max_sources: int


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
    raw: str | None = None
