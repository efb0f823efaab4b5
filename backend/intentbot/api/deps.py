"""Shared API dependencies"""

from fastapi import HTTPException

from intentbot.models.knowledge import KnowledgeBase
from intentbot.services.knowledge_service import knowledge_service


def get_knowledge_base() -> KnowledgeBase:
    """Loaded knowledge base (503 if startup did not load it)"""
    if not knowledge_service.is_loaded:
        raise HTTPException(status_code=503, detail="Knowledge base not loaded")
    return knowledge_service.knowledge_base
