"""
Pydantic Schemas for API Request/Response
==========================================
Responses are serialized with camelCase keys (allScores, responseSource, ...).
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model emitting camelCase JSON while accepting snake_case names"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================
# Chat Schemas
# ============================================

class ChatRequest(BaseModel):
    """Request for chat endpoint
    - message: user utterance; missing/blank messages are rejected by the endpoint with 400
    """
    message: Optional[str] = Field(default=None, max_length=4000)


class ResponseMetadata(CamelModel):
    """Decision metadata attached to every reply
    strategy: knowledge_base|ai_fallback (None when the pipeline itself failed)
    response_source: where the reply text came from
    ai: collaborator metadata (model, tokens, finish reason, timing) when the AI was called
    """
    strategy: Optional[str] = None
    response_source: str = Field(
        ..., pattern="^(knowledge_base|ai|ai_error_fallback|error_fallback|error)$"
    )
    should_use_ai: bool = Field(default=False, alias="shouldUseAI")
    is_safe_intent: bool = False
    all_scores: Dict[str, float] = {}
    timestamp: str
    ai: Optional[Dict[str, Any]] = None
    detection_explanation: Optional[str] = None
    routing_explanation: Optional[str] = None
    error: Optional[str] = None


class ResponseEnvelope(CamelModel):
    """Response from chat endpoint"""
    reply: str
    intent: str
    confidence: float
    confidence_level: str = Field(..., pattern="^(high|medium|low)$")
    explainability: str
    matched_patterns: List[str] = []
    metadata: ResponseMetadata


# ============================================
# Intent Schemas
# ============================================

class IntentSummary(CamelModel):
    """Single knowledge base intent"""
    name: str
    pattern_count: int
    response_count: int
    is_safe_intent: bool


class IntentList(CamelModel):
    """Knowledge base intents in file order"""
    intents: List[IntentSummary]
    total: int


class ClassifyRequest(BaseModel):
    """Request for classification without reply generation"""
    message: str = Field(..., min_length=1, max_length=4000)


class ClassifyResponse(CamelModel):
    """Detection and routing outcome for a message"""
    original: str
    normalized: str
    intent: str
    confidence: float
    confidence_level: str
    matched_patterns: List[str]
    all_scores: Dict[str, float]
    strategy: str
    is_safe_intent: bool
    should_use_ai: bool = Field(..., alias="shouldUseAI")
    detection_explanation: str
    routing_explanation: str
