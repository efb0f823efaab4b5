"""
Response Generator Service
==========================
Execute the routing decision and package the reply with full metadata.

Strategy handling:
- knowledge_base → random reply from the intent's responses
- ai_fallback    → AIService.call(...)

Every path yields a ResponseEnvelope; collaborator failures degrade to a
fallback reply instead of raising.
"""

import random
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from intentbot.models.knowledge import KnowledgeBase
from intentbot.models.schemas import ResponseEnvelope, ResponseMetadata
from intentbot.services.ai_service import ai_service as default_ai_service
from intentbot.services.intent_detector import UNKNOWN_INTENT
from intentbot.services.intent_router import ConfidenceLevel, RoutingDecision, Strategy

logger = logging.getLogger(__name__)


class ResponseSource(str, Enum):
    """Where the reply text came from"""
    KNOWLEDGE_BASE = "knowledge_base"
    AI = "ai"
    AI_ERROR_FALLBACK = "ai_error_fallback"
    ERROR_FALLBACK = "error_fallback"
    ERROR = "error"


NO_RESPONSES_REPLY = "I understand what you're asking, but I don't have a response prepared for that yet."
AI_EXCEPTION_REPLY = "I'm having trouble processing that right now. Could you try asking in a different way?"
UNKNOWN_STRATEGY_REPLY = "I encountered an error processing your message. Please try again."


def _value(member: Any) -> Any:
    return member.value if isinstance(member, Enum) else member


def _label(member: Any) -> Optional[str]:
    """Text form of an enum member or arbitrary value, for the envelope"""
    value = _value(member)
    return None if value is None else str(value)


class ResponseGenerator:
    """
    Turns a RoutingDecision into a ResponseEnvelope.

    Args:
        ai_service: Collaborator exposing `async call(message, context) -> AIResult`
        rng: Random source used to pick knowledge base replies
    """

    def __init__(self, ai_service=None, rng: Optional[random.Random] = None):
        self.ai_service = ai_service or default_ai_service
        self.rng = rng or random.Random()

    def select_random_response(self, responses: Sequence[str]) -> str:
        return self.rng.choice(list(responses))

    async def generate(
        self,
        decision: RoutingDecision,
        knowledge_base: KnowledgeBase,
        original_message: str = ""
    ) -> ResponseEnvelope:
        """
        Generate the final response.

        Args:
            decision: Output of IntentRouter.route
            knowledge_base: Loaded knowledge base
            original_message: User's untouched message (sent to the AI)

        Returns:
            ResponseEnvelope (never raises for collaborator failures)
        """
        ai_metadata: Optional[Dict[str, Any]] = None

        if decision.strategy == Strategy.KNOWLEDGE_BASE:
            logger.info(f"  [Generation] Using knowledge base for: {decision.intent}")
            intent = knowledge_base.get_intent(decision.intent)

            if intent is not None and intent.responses:
                reply = self.select_random_response(intent.responses)
                response_source = ResponseSource.KNOWLEDGE_BASE
            elif intent is None and knowledge_base.fallback.responses:
                logger.warning(f"  [Generation] Intent not in knowledge base: {decision.intent}")
                reply = self.select_random_response(knowledge_base.fallback.responses)
                response_source = ResponseSource.ERROR_FALLBACK
            else:
                logger.warning(f"  [Generation] No responses defined for intent: {decision.intent}")
                reply = NO_RESPONSES_REPLY
                response_source = ResponseSource.ERROR_FALLBACK

        elif decision.strategy == Strategy.AI_FALLBACK:
            logger.info("  [Generation] Using AI fallback")
            context = {
                "intent": decision.intent,
                "confidence": decision.confidence,
                "confidence_level": _value(decision.confidence_level),
            }

            try:
                ai_result = await self.ai_service.call(original_message, context)
            except Exception as e:
                logger.error(f"  [Generation] Unexpected error calling AI: {e}")
                reply = AI_EXCEPTION_REPLY
                response_source = ResponseSource.ERROR_FALLBACK
            else:
                reply = ai_result.reply
                ai_metadata = ai_result.metadata
                if ai_result.success:
                    response_source = ResponseSource.AI
                else:
                    logger.warning(f"  [Generation] AI call failed, using its fallback: {ai_result.error}")
                    response_source = ResponseSource.AI_ERROR_FALLBACK

        else:
            logger.error(f"  [Generation] Unknown strategy: {decision.strategy}")
            reply = UNKNOWN_STRATEGY_REPLY
            response_source = ResponseSource.ERROR

        explainability = build_explainability_message(
            intent=decision.intent,
            confidence=decision.confidence,
            confidence_level=_value(decision.confidence_level),
            matched_patterns=decision.matched_patterns,
            response_source=response_source.value,
            is_safe_intent=decision.is_safe_intent,
        )

        logger.info(f"  [Generation] Reply ({response_source.value}): {reply[:50]}")

        return ResponseEnvelope(
            reply=reply,
            intent=decision.intent,
            confidence=decision.confidence,
            confidence_level=_value(decision.confidence_level),
            explainability=explainability,
            matched_patterns=list(decision.matched_patterns or []),
            metadata=ResponseMetadata(
                strategy=_label(decision.strategy),
                response_source=response_source.value,
                should_use_ai=decision.should_use_ai,
                is_safe_intent=decision.is_safe_intent,
                all_scores=dict(decision.all_scores),
                timestamp=datetime.now(timezone.utc).isoformat(),
                ai=ai_metadata,
                detection_explanation=decision.detection_explanation,
                routing_explanation=decision.routing_explanation,
            ),
        )


def build_explainability_message(
    intent: str,
    confidence: float,
    confidence_level: str,
    matched_patterns: Optional[List[str]],
    response_source: str,
    is_safe_intent: bool
) -> str:
    """
    Explain why a reply was produced.

    Parts: detection, confidence, safe-intent note (low confidence only),
    response source.
    """
    parts = []

    if intent and intent != UNKNOWN_INTENT:
        detection = f"Detected intent '{intent}'"
        if matched_patterns:
            detection += f" (matched: {', '.join(matched_patterns)})"
        parts.append(detection + ".")
    else:
        parts.append("No specific intent detected.")

    confidence_part = f"Confidence: {round(confidence * 100)}% ({confidence_level})"
    if is_safe_intent and confidence_level == ConfidenceLevel.LOW.value:
        confidence_part += " - safe intent, answered with rules regardless of low confidence"
    parts.append(confidence_part + ".")

    if response_source == ResponseSource.KNOWLEDGE_BASE.value:
        parts.append("Using rule-based response from knowledge base.")
    elif response_source == ResponseSource.AI.value:
        parts.append("Using AI-generated response (intent unknown or low confidence).")
    elif response_source == ResponseSource.AI_ERROR_FALLBACK.value:
        parts.append("AI service unavailable - using fallback response.")
    elif response_source == ResponseSource.ERROR_FALLBACK.value:
        parts.append("Using fallback response due to error.")
    else:
        parts.append(f"Response source: {response_source}.")

    return " ".join(parts)


# Singleton instance
response_generator = ResponseGenerator()
