"""
Chat API Endpoints

Keyword-matched help assistant. Stateless: no conversation history is kept.

Endpoints:
- POST /chat - Ask the assistant a question
"""

import logging

from fastapi import APIRouter

from app.api.common import short_trace
from app.core.logging import get_trace_id
from app.orchestrator.intent_detector import answer_for, detect_topic
from app.schemas.base import Proofs
from app.schemas.chat import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest):
    result = detect_topic(request.message)
    logger.info(f"[{short_trace()}] Assistant topic: {result.topic} ({result.confidence:.2f})")

    trace_id = get_trace_id()
    return ChatResponse(
        message=answer_for(result.topic),
        topic=result.topic,
        confidence=result.confidence,
        reasoning=result.reasoning,
        proofs=Proofs(
            trace_id=None if trace_id == "-" else trace_id,
            algorithm="keyword_rules"
        ),
    )
