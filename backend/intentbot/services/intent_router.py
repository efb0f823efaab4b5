"""
Intent Router Service
=====================
Decide how to answer a detected intent.

Routing policy, evaluated in order:
1. Unknown intent → AI fallback
2. Safe intent (greeting, identity, help, ...) → knowledge base, ALWAYS,
   whatever the confidence
3. Any other intent → knowledge base if confidence >= MEDIUM, else AI fallback

Safe intents are never sent to the AI.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from intentbot.services.intent_detector import DetectionResult, UNKNOWN_INTENT

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    """Response generation path"""
    KNOWLEDGE_BASE = "knowledge_base"
    AI_FALLBACK = "ai_fallback"


class ConfidenceLevel(str, Enum):
    """Bucketed confidence, informational only"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Answered from the knowledge base regardless of confidence
SAFE_INTENTS = frozenset({
    "greeting",
    "bot_identity",
    "bot_purpose",
    "farewell",
    "help",
    "capabilities",
})

# Only escalation-capable intents are routed by these
CONFIDENCE_THRESHOLDS = {
    "HIGH": 0.7,
    "MEDIUM": 0.4,
}


@dataclass(frozen=True)
class RoutingDecision:
    """
    Chosen strategy plus the detection data it was based on.

    Attributes:
        strategy: Strategy.KNOWLEDGE_BASE or Strategy.AI_FALLBACK
        intent: Detected intent name (or "unknown")
        confidence: Detection confidence (0.0-1.0)
        confidence_level: Bucketed confidence
        is_safe_intent: Whether the intent is in SAFE_INTENTS
        should_use_ai: True when the AI collaborator must be called
        routing_explanation: Why this strategy was chosen
        matched_patterns: Carried from detection
        all_scores: Carried from detection
        detection_explanation: Carried from detection
    """
    strategy: Strategy
    intent: str
    confidence: float
    confidence_level: ConfidenceLevel
    is_safe_intent: bool
    should_use_ai: bool
    routing_explanation: str
    matched_patterns: List[str]
    all_scores: Dict[str, float]
    detection_explanation: str


def is_safe_intent(intent: str) -> bool:
    return intent in SAFE_INTENTS


def determine_confidence_level(confidence: float) -> ConfidenceLevel:
    """Map a numeric confidence to high / medium / low"""
    if confidence >= CONFIDENCE_THRESHOLDS["HIGH"]:
        return ConfidenceLevel.HIGH
    if confidence >= CONFIDENCE_THRESHOLDS["MEDIUM"]:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def should_escalate_to_ai(decision: RoutingDecision) -> bool:
    return decision.should_use_ai


class IntentRouter:
    """Maps a DetectionResult to a RoutingDecision; every detection is routable"""

    def route(self, detection: DetectionResult) -> RoutingDecision:
        intent = detection.intent
        confidence = detection.confidence
        confidence_level = determine_confidence_level(confidence)
        safe = is_safe_intent(intent)
        percent = f"{confidence * 100:.0f}%"

        if not intent or intent == UNKNOWN_INTENT:
            strategy = Strategy.AI_FALLBACK
            explanation = "No specific intent detected - using AI assistance"
            logger.info("  [Routing] Unknown intent → AI fallback")

        elif safe:
            strategy = Strategy.KNOWLEDGE_BASE
            if confidence_level == ConfidenceLevel.LOW:
                explanation = (
                    f"Safe intent '{intent}' detected with low confidence ({percent}), "
                    f"but answering anyway (safe intent, no AI needed)"
                )
            else:
                explanation = (
                    f"Safe intent '{intent}' detected with {confidence_level.value} "
                    f"confidence ({percent}) - using knowledge base"
                )
            logger.info(f"  [Routing] Safe intent '{intent}' ({percent}) → knowledge base")

        elif confidence >= CONFIDENCE_THRESHOLDS["MEDIUM"]:
            strategy = Strategy.KNOWLEDGE_BASE
            explanation = f"Intent '{intent}' with sufficient confidence ({percent}) - using knowledge base"
            logger.info(f"  [Routing] Escalation intent '{intent}' ({percent}) → knowledge base")

        else:
            strategy = Strategy.AI_FALLBACK
            explanation = f"Intent '{intent}' with low confidence ({percent}) - using AI assistance"
            logger.info(f"  [Routing] Escalation intent '{intent}' ({percent}) → AI fallback")

        return RoutingDecision(
            strategy=strategy,
            intent=intent,
            confidence=confidence,
            confidence_level=confidence_level,
            is_safe_intent=safe,
            should_use_ai=strategy == Strategy.AI_FALLBACK,
            routing_explanation=explanation,
            matched_patterns=list(detection.matched_patterns),
            all_scores=dict(detection.all_scores),
            detection_explanation=detection.explanation,
        )


# Singleton instance
intent_router = IntentRouter()
