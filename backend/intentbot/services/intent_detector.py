"""
Intent Detector Service
=======================
Pattern-ratio scoring of every knowledge base intent.

For each intent:
    confidence = (patterns found as substrings of the message) / (total patterns)

The intent with the strictly highest confidence wins; on a tie the intent
that appears first in the knowledge base wins. If nothing matches, the
result is the "unknown" sentinel with confidence 0.

Patterns are plain substring checks, not word-boundary checks, so "hi"
also matches inside "this".
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from intentbot.models.knowledge import Intent, KnowledgeBase

logger = logging.getLogger(__name__)

UNKNOWN_INTENT = "unknown"


@dataclass(frozen=True)
class ScoreResult:
    """Score of a single intent against a message"""
    name: str
    confidence: float
    matched_patterns: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of scoring all intents.

    Attributes:
        intent: Best intent name, or UNKNOWN_INTENT when nothing matched
        confidence: Confidence of the best intent (0.0-1.0)
        matched_patterns: Patterns of the best intent found in the message
        all_scores: Confidence of every intent, in knowledge base order
        explanation: Short human-readable summary of the match
    """
    intent: str
    confidence: float
    matched_patterns: List[str]
    all_scores: Dict[str, float]
    explanation: str


class IntentDetector:
    """
    Scores every intent and selects the best one.

    Stateless: results depend only on (message, knowledge base).
    """

    def score_intent(self, message: str, intent: Intent) -> ScoreResult:
        """
        Score a single intent.

        An intent without patterns scores 0.0.
        """
        matched = [pattern for pattern in intent.patterns if pattern in message]
        total = len(intent.patterns)
        confidence = len(matched) / total if total > 0 else 0.0
        return ScoreResult(name=intent.name, confidence=confidence, matched_patterns=matched)

    def find_best(self, scores: List[ScoreResult]) -> Optional[ScoreResult]:
        """
        Return the score with the strictly highest confidence.

        Strict comparison keeps the first of equally scored intents.
        Returns None if every score is 0.
        """
        best = None
        highest = 0.0
        for score in scores:
            if score.confidence > highest:
                highest = score.confidence
                best = score
        return best

    def detect(self, normalized_text: str, knowledge_base: KnowledgeBase) -> DetectionResult:
        """
        Detect the intent of a normalized message.

        Args:
            normalized_text: Output of preprocess.normalize(...).normalized
            knowledge_base: Loaded knowledge base

        Returns:
            DetectionResult (never raises; no match yields UNKNOWN_INTENT)
        """
        scores = [self.score_intent(normalized_text, intent) for intent in knowledge_base.intents]

        for score in scores:
            logger.debug(
                f"    - {score.name}: {score.confidence:.2f} "
                f"(matched: {len(score.matched_patterns)})"
            )

        best = self.find_best(scores)
        all_scores = {score.name: score.confidence for score in scores}

        if best is None:
            return DetectionResult(
                intent=UNKNOWN_INTENT,
                confidence=0.0,
                matched_patterns=[],
                all_scores=all_scores,
                explanation="No patterns matched"
            )

        return DetectionResult(
            intent=best.name,
            confidence=best.confidence,
            matched_patterns=list(best.matched_patterns),
            all_scores=all_scores,
            explanation=f"Matched patterns: {', '.join(best.matched_patterns)}"
        )


# Singleton instance
intent_detector = IntentDetector()
