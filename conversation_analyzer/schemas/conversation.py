# conversation_analyzer/schemas/conversation.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from conversation_analyzer.config import (
    DEFAULT_ANALYSIS_TYPE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
    config,
)
from conversation_analyzer.schemas.base import CamelModel

AnalysisType = Literal[
    "General Psychological Analysis",
    "Relationship Dynamics",
    "Communication Patterns",
    "Conflict Resolution",
    "Emotional Intelligence",
]
MaxTokens = Literal[250, 500, 1000, 1500]


class ConversationCreate(CamelModel):
    title: Optional[str] = None
    content: str
    analysis_type: AnalysisType = DEFAULT_ANALYSIS_TYPE
    model: str = Field(default_factory=lambda: config.DEFAULT_MODEL)
    temperature: str = DEFAULT_TEMPERATURE
    max_tokens: MaxTokens = DEFAULT_MAX_TOKENS

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be empty")
        return v

    @field_validator("model")
    @classmethod
    def model_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("model must not be empty")
        return v

    @field_validator("temperature", mode="before")
    @classmethod
    def temperature_as_text(cls, v):
        # clients often send a number; the record keeps it as text
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("temperature")
    @classmethod
    def temperature_in_range(cls, v: str) -> str:
        v = v.strip()
        try:
            value = float(v)
        except ValueError:
            raise ValueError("temperature must be a decimal number")
        if not (MIN_TEMPERATURE <= value <= MAX_TEMPERATURE):
            raise ValueError(
                f"temperature must be between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}"
            )
        return v


class ConversationOut(CamelModel):
    id: str
    title: Optional[str] = None
    content: str
    analysis_type: str
    model: str
    temperature: str
    max_tokens: int
    created_at: datetime


class OptionsOut(CamelModel):
    analysis_types: List[str]
    models: List[str]
    max_tokens: List[int]
    default_model: str
    default_temperature: str
    default_max_tokens: int
