"""Models package"""
from intentbot.models.knowledge import Intent, FallbackResponses, KnowledgeBase
from intentbot.models.schemas import (
    ChatRequest, ResponseMetadata, ResponseEnvelope,
    IntentSummary, IntentList, ClassifyRequest, ClassifyResponse
)
