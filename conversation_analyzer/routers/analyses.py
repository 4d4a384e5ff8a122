# conversation_analyzer/routers/analyses.py
from typing import List

from fastapi import APIRouter, Depends

from conversation_analyzer.schemas.analysis import AnalysisWithConversation
from conversation_analyzer.services.storage import Storage, get_storage

router = APIRouter(prefix="/api", tags=["Analyses"])


@router.get(
    "/analyses",
    response_model=List[AnalysisWithConversation],
    response_model_exclude_unset=True,
)
def list_analyses(storage: Storage = Depends(get_storage)):
    """
    Return every analysis (newest first) with its conversation joined in.
    The join happens here, not in the store; when the conversation is gone the
    `conversation` key is left out of that item.
    """
    conversations = {c.id: c for c in storage.get_conversations()}

    out = []
    for a in storage.get_analyses():
        item = a.model_dump()
        conversation = conversations.get(a.conversation_id)
        if conversation is not None:
            item["conversation"] = conversation
        out.append(AnalysisWithConversation.model_validate(item))
    return out
