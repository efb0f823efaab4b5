"""
Message Processor
=================
Runs the four-stage pipeline behind a single call:

1. Preprocessing   - normalize the raw message
2. Detection       - score every intent
3. Routing         - knowledge base or AI fallback
4. Generation      - build the reply and its explanation

Any unexpected failure is converted into a safe reply, so callers always
receive a ResponseEnvelope.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from intentbot.models.knowledge import KnowledgeBase
from intentbot.models.schemas import ResponseEnvelope, ResponseMetadata
from intentbot.services.intent_detector import intent_detector, UNKNOWN_INTENT
from intentbot.services.intent_router import intent_router, ConfidenceLevel
from intentbot.services.preprocess import normalize
from intentbot.services.response_generator import response_generator, ResponseSource

logger = logging.getLogger(__name__)

PIPELINE_ERROR_REPLY = (
    "I encountered an issue processing your request. "
    "A human agent will assist you shortly."
)


class MessageProcessor:
    """Wires the pipeline stages together"""

    def __init__(self, detector=None, router=None, generator=None):
        self.detector = detector or intent_detector
        self.router = router or intent_router
        self.generator = generator or response_generator

    async def process_message(self, message: Any, knowledge_base: KnowledgeBase) -> ResponseEnvelope:
        """
        Process a message through the complete pipeline.

        Args:
            message: User's raw message
            knowledge_base: Loaded knowledge base

        Returns:
            ResponseEnvelope (never raises)
        """
        try:
            preprocessed = normalize(message)
            logger.info(f"  [Stage 1] Input processed: '{preprocessed.normalized[:100]}'")

            detection = self.detector.detect(preprocessed.normalized, knowledge_base)
            logger.info(
                f"  [Stage 2] Intent detected: {detection.intent} "
                f"(confidence: {detection.confidence:.2f})"
            )

            decision = self.router.route(detection)
            logger.info(f"  [Stage 3] Strategy: {decision.strategy.value}")

            envelope = await self.generator.generate(decision, knowledge_base, preprocessed.original)
            logger.info(f"  [Stage 4] Response source: {envelope.metadata.response_source}")
            return envelope

        except Exception as e:
            logger.exception("Error in process_message")
            return self.build_error_envelope(str(e))

    def build_error_envelope(self, error: str) -> ResponseEnvelope:
        """Safe reply used when the pipeline itself fails"""
        return ResponseEnvelope(
            reply=PIPELINE_ERROR_REPLY,
            intent=UNKNOWN_INTENT,
            confidence=0.0,
            confidence_level=ConfidenceLevel.LOW.value,
            explainability="Using fallback response due to error.",
            matched_patterns=[],
            metadata=ResponseMetadata(
                strategy=None,
                response_source=ResponseSource.ERROR_FALLBACK.value,
                should_use_ai=False,
                is_safe_intent=False,
                all_scores={},
                timestamp=datetime.now(timezone.utc).isoformat(),
                error=error,
            ),
        )


# Singleton instance
message_processor = MessageProcessor()
