"""
Chat API Endpoint
=================
Runs a message through the intent pipeline:
1. Preprocessing - normalize the message
2. Detection     - pattern-ratio scoring of every intent
3. Routing       - knowledge base or AI fallback
4. Generation    - reply plus explainability
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from intentbot.api.deps import get_knowledge_base
from intentbot.models.knowledge import KnowledgeBase
from intentbot.models.schemas import ChatRequest, ResponseEnvelope
from intentbot.services.message_processor import message_processor

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ResponseEnvelope)
async def chat(
    request: ChatRequest,
    knowledge_base: KnowledgeBase = Depends(get_knowledge_base)
):
    """
    Chat endpoint.

    Request body:
    - message: User's message (required, non-blank)

    Returns the reply with intent, confidence, explainability and routing
    metadata. Collaborator failures still return 200 with a fallback reply.
    """
    if not request.message or not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    logger.info(f"--- New message: '{request.message[:100]}'")

    envelope = await message_processor.process_message(request.message, knowledge_base)

    logger.info(
        f"--- Reply sent: intent={envelope.intent}, "
        f"source={envelope.metadata.response_source}"
    )
    return envelope
