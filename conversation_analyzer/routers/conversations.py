# conversation_analyzer/routers/conversations.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from conversation_analyzer.config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    MAX_TOKEN_CHOICES,
    ANALYSIS_TYPES,
    SUGGESTED_MODELS,
    config,
)
from conversation_analyzer.schemas.analysis import AnalysisOut, AnalyzeResponse
from conversation_analyzer.schemas.conversation import ConversationCreate, ConversationOut, OptionsOut
from conversation_analyzer.services.analysis_service import analyze_and_store
from conversation_analyzer.services.llm_service import AnalysisError
from conversation_analyzer.services.storage import Storage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Conversations"])


@router.get("/options", response_model=OptionsOut)
def get_options():
    """Choices the client offers when creating a conversation."""
    return OptionsOut(
        analysis_types=ANALYSIS_TYPES,
        models=SUGGESTED_MODELS,
        max_tokens=MAX_TOKEN_CHOICES,
        default_model=config.DEFAULT_MODEL,
        default_temperature=DEFAULT_TEMPERATURE,
        default_max_tokens=DEFAULT_MAX_TOKENS,
    )


@router.post("/conversations", response_model=ConversationOut)
def create_conversation(payload: ConversationCreate, storage: Storage = Depends(get_storage)):
    conversation = storage.create_conversation(payload)
    logger.info("Created conversation %s (%s)", conversation.id, conversation.analysis_type)
    return conversation


@router.get("/conversations", response_model=List[ConversationOut])
def list_conversations(storage: Storage = Depends(get_storage)):
    """All conversations, newest first."""
    return storage.get_conversations()


@router.get("/conversations/{conversation_id}", response_model=ConversationOut)
def get_conversation(conversation_id: str, storage: Storage = Depends(get_storage)):
    conversation = storage.get_conversation(conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@router.post("/conversations/{conversation_id}/analyze", response_model=AnalyzeResponse)
def analyze_conversation(conversation_id: str, storage: Storage = Depends(get_storage)):
    """
    Analyze a stored conversation with its own stored parameters.
    404 if the conversation is missing, 500 if the model call fails (nothing is stored then).
    """
    conversation = storage.get_conversation(conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")

    try:
        analysis, result = analyze_and_store(storage, conversation)
    except AnalysisError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return AnalyzeResponse(analysis=analysis, result=result)


@router.get("/conversations/{conversation_id}/analysis", response_model=AnalysisOut)
def get_conversation_analysis(conversation_id: str, storage: Storage = Depends(get_storage)):
    analysis = storage.get_analysis(conversation_id)
    if not analysis:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return analysis
