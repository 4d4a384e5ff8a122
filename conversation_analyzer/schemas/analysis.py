# conversation_analyzer/schemas/analysis.py
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

from conversation_analyzer.schemas.base import CamelModel
from conversation_analyzer.schemas.conversation import ConversationOut


class AnalysisRequest(BaseModel):
    """Everything the model call needs; built from a stored conversation."""
    conversation: str
    analysis_type: str
    model: str
    temperature: float
    max_tokens: int


class AnalysisCreate(CamelModel):
    conversation_id: str
    emotional_tone: Optional[str] = None
    emotional_tone_description: Optional[str] = None
    power_dynamics: Optional[str] = None
    power_dynamics_description: Optional[str] = None
    communication_patterns: Optional[str] = None
    communication_patterns_description: Optional[str] = None
    relationship_insights: Optional[str] = None
    relationship_insights_description: Optional[str] = None
    recommendations: Optional[str] = None  # JSON text
    emotional_intensity: Optional[str] = None
    resolution_potential: Optional[str] = None
    communication_quality: Optional[str] = None
    power_balance: Optional[str] = None
    raw_analysis: Optional[str] = None


class AnalysisOut(CamelModel):
    id: str
    conversation_id: str
    emotional_tone: Optional[str] = None
    emotional_tone_description: Optional[str] = None
    power_dynamics: Optional[str] = None
    power_dynamics_description: Optional[str] = None
    communication_patterns: Optional[str] = None
    communication_patterns_description: Optional[str] = None
    relationship_insights: Optional[str] = None
    relationship_insights_description: Optional[str] = None
    recommendations: Optional[List[str]] = None
    emotional_intensity: Optional[str] = None
    resolution_potential: Optional[str] = None
    communication_quality: Optional[str] = None
    power_balance: Optional[str] = None
    raw_analysis: Optional[str] = None
    created_at: datetime

    @field_validator("recommendations", mode="before")
    @classmethod
    def decode_recommendations(cls, v):
        """Stored as JSON text; a value that is not a JSON list is kept as one item."""
        if v is None or isinstance(v, list):
            return v
        if isinstance(v, str):
            try:
                decoded = json.loads(v)
            except ValueError:
                return [v]
            if decoded is None:
                return None
            if isinstance(decoded, list):
                return [str(item) for item in decoded]
            return [str(decoded)]
        return v


class AnalysisWithConversation(AnalysisOut):
    conversation: Optional[ConversationOut] = None


class AnalyzeResponse(BaseModel):
    analysis: AnalysisOut
    result: Dict[str, Any]
