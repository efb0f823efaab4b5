"""
Intents API Endpoints
=====================
Inspect the knowledge base and dry-run classification (no reply generation,
no AI call).
"""

from fastapi import APIRouter, Depends

from intentbot.api.deps import get_knowledge_base
from intentbot.models.knowledge import KnowledgeBase
from intentbot.models.schemas import ClassifyRequest, ClassifyResponse, IntentList, IntentSummary
from intentbot.services.intent_detector import intent_detector
from intentbot.services.intent_router import intent_router, is_safe_intent
from intentbot.services.preprocess import normalize

router = APIRouter()


@router.get("/intents", response_model=IntentList)
async def list_intents(knowledge_base: KnowledgeBase = Depends(get_knowledge_base)):
    """List knowledge base intents in file order"""
    intents = [
        IntentSummary(
            name=intent.name,
            pattern_count=len(intent.patterns),
            response_count=len(intent.responses),
            is_safe_intent=is_safe_intent(intent.name),
        )
        for intent in knowledge_base.intents
    ]
    return IntentList(intents=intents, total=len(intents))


@router.post("/intents/classify", response_model=ClassifyResponse)
async def classify(
    request: ClassifyRequest,
    knowledge_base: KnowledgeBase = Depends(get_knowledge_base)
):
    """Detect and route a message without generating a reply"""
    preprocessed = normalize(request.message)
    detection = intent_detector.detect(preprocessed.normalized, knowledge_base)
    decision = intent_router.route(detection)

    return ClassifyResponse(
        original=preprocessed.original,
        normalized=preprocessed.normalized,
        intent=decision.intent,
        confidence=decision.confidence,
        confidence_level=decision.confidence_level.value,
        matched_patterns=decision.matched_patterns,
        all_scores=decision.all_scores,
        strategy=decision.strategy.value,
        is_safe_intent=decision.is_safe_intent,
        should_use_ai=decision.should_use_ai,
        detection_explanation=decision.detection_explanation,
        routing_explanation=decision.routing_explanation,
    )
