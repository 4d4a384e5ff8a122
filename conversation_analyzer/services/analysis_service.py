# conversation_analyzer/services/analysis_service.py
import json
import logging
import math
from typing import Any, Dict, Optional, Tuple

from conversation_analyzer.schemas.analysis import AnalysisCreate, AnalysisOut, AnalysisRequest
from conversation_analyzer.schemas.conversation import ConversationOut
from conversation_analyzer.services import llm_service
from conversation_analyzer.services.llm_service import AnalysisError
from conversation_analyzer.services.storage import Storage

logger = logging.getLogger(__name__)

AnalysisResult = Dict[str, Any]

SCORE_FIELDS = ("emotionalIntensity", "resolutionPotential", "communicationQuality", "powerBalance")
SCORE_MIN = 0.0
SCORE_MAX = 10.0

# result key -> AnalysisCreate attribute, for the fields stored as text
TEXT_FIELDS = {
    "emotionalTone": "emotional_tone",
    "emotionalToneDescription": "emotional_tone_description",
    "powerDynamics": "power_dynamics",
    "powerDynamicsDescription": "power_dynamics_description",
    "communicationPatterns": "communication_patterns",
    "communicationPatternsDescription": "communication_patterns_description",
    "relationshipInsights": "relationship_insights",
    "relationshipInsightsDescription": "relationship_insights_description",
    "rawAnalysis": "raw_analysis",
}
SCORE_COLUMNS = {
    "emotionalIntensity": "emotional_intensity",
    "resolutionPotential": "resolution_potential",
    "communicationQuality": "communication_quality",
    "powerBalance": "power_balance",
}


# ----- Prompt Template -----
SYSTEM_PROMPT = (
    "You are an expert relationship psychologist and communication analyst. "
    "Analyze conversations for psychological dynamics, emotional patterns, and relationship insights. "
    "Always respond with valid JSON in the exact format specified."
)

ANALYSIS_TEMPLATE = """
Analyze the following conversation between two people with focus on: {analysis_type}

Conversation:
{conversation}

Please provide a comprehensive psychological analysis in JSON format with these exact fields:
{{
  "emotionalTone": "brief emotional tone assessment (2-3 words)",
  "emotionalToneDescription": "detailed emotional tone analysis (2-3 sentences)",
  "powerDynamics": "brief power dynamic assessment (2-3 words)",
  "powerDynamicsDescription": "detailed power dynamics analysis (2-3 sentences)",
  "communicationPatterns": "brief communication pattern assessment (2-3 words)",
  "communicationPatternsDescription": "detailed communication patterns analysis (2-3 sentences)",
  "relationshipInsights": "brief relationship insight (2-3 words)",
  "relationshipInsightsDescription": "detailed relationship insights and therapeutic recommendations (3-4 sentences)",
  "recommendations": ["array of 4-6 specific therapeutic recommendations"],
  "emotionalIntensity": numerical_score_0_to_10,
  "resolutionPotential": numerical_score_0_to_10,
  "communicationQuality": numerical_score_0_to_10,
  "powerBalance": numerical_score_0_to_10,
  "rawAnalysis": "comprehensive full analysis text combining all insights (4-6 paragraphs)"
}}

Provide specific, actionable insights suitable for both general users and relationship counselors.
"""


def build_prompt(conversation: str, analysis_type: str) -> str:
    """Injects analysis type + conversation (verbatim) into the template."""
    return ANALYSIS_TEMPLATE.format(analysis_type=analysis_type, conversation=conversation)


def clamp_score(value: Any) -> float:
    """
    Coerce a model-returned score into [0, 10].
    Numbers and numeric strings are kept; anything else (missing, text, NaN, bool) counts as 0.
    """
    if isinstance(value, bool):
        score = 0.0
    elif isinstance(value, (int, float)):
        score = float(value)
    elif isinstance(value, str):
        try:
            score = float(value.strip())
        except ValueError:
            score = 0.0
    else:
        score = 0.0
    if math.isnan(score):
        score = 0.0
    return max(SCORE_MIN, min(SCORE_MAX, score))


def _reject_constant(name: str):
    # json.loads would otherwise accept NaN / Infinity / -Infinity
    raise ValueError(f"{name} is not valid JSON")


def parse_result(text: str) -> AnalysisResult:
    """Parse the model's JSON and clamp the scores. Other fields pass through untouched."""
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise AnalysisError(f"Model returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AnalysisError(f"Model returned JSON {type(data).__name__}, expected an object")

    for field in SCORE_FIELDS:
        data[field] = clamp_score(data.get(field))
    return data


def analyze_conversation(request: AnalysisRequest, client=None) -> AnalysisResult:
    """
    Run one analysis against the model. No retry: any failure surfaces as AnalysisError
      {
         emotionalTone, emotionalToneDescription, ..., recommendations: [...],
         emotionalIntensity, resolutionPotential, communicationQuality, powerBalance (0..10),
         rawAnalysis
      }
    """
    prompt = build_prompt(request.conversation, request.analysis_type)
    logger.info("Requesting %r analysis from %s (max_tokens=%d)",
                request.analysis_type, request.model, request.max_tokens)
    try:
        text = llm_service.generate_json(
            prompt=prompt,
            system_instruction=SYSTEM_PROMPT,
            model=request.model,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            client=client,
        )
        return parse_result(text)
    except AnalysisError as e:
        logger.exception("Analysis failed")
        raise AnalysisError(f"Failed to analyze conversation: {e}") from e


def _format_score(score: float) -> str:
    # 10.0 -> "10", 7.3 -> "7.3"
    return f"{score:g}"


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


def to_analysis_create(conversation_id: str, result: AnalysisResult) -> AnalysisCreate:
    """Flatten a result into the stored record: recommendations to JSON text, scores to text."""
    fields: Dict[str, Any] = {"conversation_id": conversation_id}
    for key, attr in TEXT_FIELDS.items():
        fields[attr] = _as_text(result.get(key))
    for key, attr in SCORE_COLUMNS.items():
        fields[attr] = _format_score(result[key])
    if "recommendations" in result:
        fields["recommendations"] = json.dumps(result["recommendations"])
    return AnalysisCreate(**fields)


def request_for(conversation: ConversationOut) -> AnalysisRequest:
    """Model parameters always come from the stored conversation."""
    return AnalysisRequest(
        conversation=conversation.content,
        analysis_type=conversation.analysis_type,
        model=conversation.model,
        temperature=float(conversation.temperature),
        max_tokens=conversation.max_tokens,
    )


def analyze_and_store(
    storage: Storage, conversation: ConversationOut, client=None
) -> Tuple[AnalysisOut, AnalysisResult]:
    """
    Analyze a stored conversation and persist the result.
    Nothing is stored when the analysis fails.
    """
    result = analyze_conversation(request_for(conversation), client=client)
    analysis = storage.create_analysis(to_analysis_create(conversation.id, result))
    logger.info("Stored analysis %s for conversation %s", analysis.id, conversation.id)
    return analysis, result
