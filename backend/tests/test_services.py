"""
Unit Tests for Services
=======================
Tests for preprocessing, intent detection, routing and the knowledge service
"""

import json
import logging

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from conftest import SAMPLE_KNOWLEDGE


class TestPreprocess:
    """Tests for normalize()"""

    def test_lowercase_trim_collapse(self):
        """Test the three normalization steps"""
        from intentbot.services.preprocess import normalize

        result = normalize("  HELLO   There!  ")

        assert result.normalized == "hello there!"
        assert result.original == "  HELLO   There!  "

    def test_collapses_tabs_and_newlines(self):
        """Test any whitespace run becomes one space"""
        from intentbot.services.preprocess import normalize

        assert normalize("good\t\tmorning\n\nfriend").normalized == "good morning friend"

    def test_non_string_is_stringified(self):
        """Test non-text input is coerced rather than rejected"""
        from intentbot.services.preprocess import normalize

        assert normalize(42).normalized == "42"
        assert normalize(None).normalized == "none"

    def test_empty_input(self):
        """Test empty and blank input normalize to empty string"""
        from intentbot.services.preprocess import normalize

        assert normalize("").normalized == ""
        assert normalize("   \t ").normalized == ""

    @pytest.mark.parametrize("raw", [
        "Hello",
        "  MIXED   case\tText \n",
        "already normal",
        " Non breaking ",
        "",
    ])
    def test_idempotent(self, raw):
        """Test normalizing a normalized string changes nothing"""
        from intentbot.services.preprocess import normalize

        once = normalize(raw).normalized
        assert normalize(once).normalized == once


class TestIntentDetector:
    """Tests for IntentDetector"""

    def test_hello_there_scenario(self, knowledge_base):
        """Test 'Hello there' matches one of three greeting patterns"""
        from intentbot.services.intent_detector import IntentDetector

        result = IntentDetector().detect("hello there", knowledge_base)

        assert result.intent == "greeting"
        assert result.matched_patterns == ["hello"]
        assert result.confidence == pytest.approx(1 / 3)
        assert result.explanation == "Matched patterns: hello"

    def test_no_match_is_unknown(self, knowledge_base):
        """Test gibberish yields the unknown sentinel"""
        from intentbot.services.intent_detector import IntentDetector, UNKNOWN_INTENT

        result = IntentDetector().detect("asdkjasd", knowledge_base)

        assert result.intent == UNKNOWN_INTENT
        assert result.confidence == 0.0
        assert result.matched_patterns == []
        assert result.explanation == "No patterns matched"

    def test_empty_text_is_unknown(self, knowledge_base):
        """Test empty text matches nothing"""
        from intentbot.services.intent_detector import IntentDetector

        result = IntentDetector().detect("", knowledge_base)

        assert result.intent == "unknown"
        assert all(score == 0.0 for score in result.all_scores.values())

    def test_all_scores_in_knowledge_base_order(self, knowledge_base):
        """Test every intent is scored and order is preserved"""
        from intentbot.services.intent_detector import IntentDetector

        result = IntentDetector().detect("hello", knowledge_base)

        assert list(result.all_scores) == list(knowledge_base.intent_names)

    def test_intent_without_patterns_scores_zero(self, knowledge_base):
        """Test an intent with no patterns does not divide by zero"""
        from intentbot.services.intent_detector import IntentDetector

        draft = knowledge_base.get_intent("draft")
        score = IntentDetector().score_intent("anything at all", draft)

        assert score.confidence == 0.0
        assert score.matched_patterns == []

    def test_all_patterns_give_full_confidence(self, knowledge_base):
        """Test a message containing every pattern of an intent scores 1.0"""
        from intentbot.services.intent_detector import IntentDetector

        detector = IntentDetector()
        for intent in knowledge_base.intents:
            if not intent.patterns:
                continue
            message = " ".join(intent.patterns)
            result = detector.detect(message, knowledge_base)
            assert result.all_scores[intent.name] == 1.0

    @pytest.mark.parametrize("message", [
        "hello hi hey who are you",
        "open on monday and the weekend",
        "random words",
        "",
        "bye bye goodbye",
    ])
    def test_confidences_within_bounds(self, knowledge_base, message):
        """Test every confidence lies in [0, 1]"""
        from intentbot.services.intent_detector import IntentDetector

        result = IntentDetector().detect(message, knowledge_base)

        assert all(0.0 <= score <= 1.0 for score in result.all_scores.values())
        assert 0.0 <= result.confidence <= 1.0

    def test_tie_goes_to_first_intent(self):
        """Test equal maximal scores select the earliest intent, every time"""
        from intentbot.models.knowledge import KnowledgeBase
        from intentbot.services.intent_detector import IntentDetector

        kb = KnowledgeBase.model_validate({
            "intents": [
                {"intent": "first", "patterns": ["foo", "bar"], "responses": ["1"]},
                {"intent": "second", "patterns": ["foo"], "responses": ["2"]},
                {"intent": "third", "patterns": ["foo", "baz"], "responses": ["3"]},
            ]
        })
        detector = IntentDetector()

        # first: 0.5, second: 1.0, third: 0.5
        assert detector.detect("foo", kb).intent == "second"

        # all three at 1.0 → first in order
        for _ in range(5):
            assert detector.detect("foo bar baz", kb).intent == "first"

    def test_substring_matching_not_word_boundary(self, knowledge_base):
        """Test 'hi' matches inside 'this' (known limitation, preserved)"""
        from intentbot.services.intent_detector import IntentDetector

        result = IntentDetector().detect("this", knowledge_base)

        assert result.intent == "greeting"
        assert result.matched_patterns == ["hi"]


class TestIntentRouter:
    """Tests for IntentRouter"""

    @staticmethod
    def _detection(intent, confidence):
        from intentbot.services.intent_detector import DetectionResult

        return DetectionResult(
            intent=intent,
            confidence=confidence,
            matched_patterns=[],
            all_scores={intent: confidence},
            explanation="test"
        )

    def test_unknown_goes_to_ai(self):
        """Test unknown intent is always escalated"""
        from intentbot.services.intent_router import IntentRouter, Strategy

        decision = IntentRouter().route(self._detection("unknown", 0.0))

        assert decision.strategy == Strategy.AI_FALLBACK
        assert decision.should_use_ai is True
        assert decision.is_safe_intent is False

    @pytest.mark.parametrize("intent", [
        "greeting", "bot_identity", "bot_purpose", "farewell", "help", "capabilities"
    ])
    @pytest.mark.parametrize("confidence", [0.0, 0.1, 0.39, 0.5, 1.0])
    def test_safe_intents_never_escalate(self, intent, confidence):
        """Test safe intents use the knowledge base regardless of confidence"""
        from intentbot.services.intent_router import IntentRouter, Strategy

        decision = IntentRouter().route(self._detection(intent, confidence))

        assert decision.strategy == Strategy.KNOWLEDGE_BASE
        assert decision.should_use_ai is False
        assert decision.is_safe_intent is True

    def test_escalation_intent_medium_confidence(self):
        """Test 0.5 >= MEDIUM uses the knowledge base"""
        from intentbot.services.intent_router import IntentRouter, Strategy, ConfidenceLevel

        decision = IntentRouter().route(self._detection("opening_hours", 0.5))

        assert decision.strategy == Strategy.KNOWLEDGE_BASE
        assert decision.confidence_level == ConfidenceLevel.MEDIUM
        assert "sufficient confidence (50%)" in decision.routing_explanation

    def test_escalation_intent_low_confidence(self):
        """Test 0.3 < MEDIUM escalates to AI"""
        from intentbot.services.intent_router import IntentRouter, Strategy

        decision = IntentRouter().route(self._detection("opening_hours", 0.3))

        assert decision.strategy == Strategy.AI_FALLBACK
        assert decision.should_use_ai is True
        assert "low confidence (30%)" in decision.routing_explanation

    def test_medium_threshold_is_inclusive(self):
        """Test exactly 0.4 stays in the knowledge base"""
        from intentbot.services.intent_router import IntentRouter, Strategy

        decision = IntentRouter().route(self._detection("opening_hours", 0.4))

        assert decision.strategy == Strategy.KNOWLEDGE_BASE

    @pytest.mark.parametrize("confidence,level", [
        (1.0, "high"), (0.7, "high"), (0.69, "medium"), (0.4, "medium"), (0.39, "low"), (0.0, "low")
    ])
    def test_confidence_levels(self, confidence, level):
        """Test confidence bucketing"""
        from intentbot.services.intent_router import determine_confidence_level

        assert determine_confidence_level(confidence).value == level

    def test_low_confidence_safe_intent_explanation(self):
        """Test the routing explanation mentions answering anyway"""
        from intentbot.services.intent_router import IntentRouter

        decision = IntentRouter().route(self._detection("greeting", 0.2))

        assert "answering anyway" in decision.routing_explanation
        assert "'greeting'" in decision.routing_explanation

    def test_carries_detection_fields(self):
        """Test detection data flows through to the decision"""
        from intentbot.services.intent_detector import DetectionResult
        from intentbot.services.intent_router import IntentRouter, should_escalate_to_ai

        detection = DetectionResult(
            intent="farewell",
            confidence=0.5,
            matched_patterns=["bye"],
            all_scores={"farewell": 0.5, "greeting": 0.0},
            explanation="Matched patterns: bye"
        )
        decision = IntentRouter().route(detection)

        assert decision.matched_patterns == ["bye"]
        assert decision.all_scores == {"farewell": 0.5, "greeting": 0.0}
        assert decision.detection_explanation == "Matched patterns: bye"
        assert should_escalate_to_ai(decision) is False


class TestKnowledgeService:
    """Tests for knowledge base loading"""

    def test_load_packaged_knowledge_base(self):
        """Test the shipped knowledge base loads and contains the safe intents"""
        from intentbot.config import DEFAULT_KNOWLEDGE_BASE_PATH
        from intentbot.services.knowledge_service import load_knowledge_base
        from intentbot.services.intent_router import SAFE_INTENTS

        kb = load_knowledge_base(DEFAULT_KNOWLEDGE_BASE_PATH)

        assert SAFE_INTENTS <= set(kb.intent_names)
        assert kb.fallback.responses

    def test_missing_file_is_fatal(self, tmp_path):
        """Test a missing file raises KnowledgeBaseError"""
        from intentbot.services.knowledge_service import load_knowledge_base, KnowledgeBaseError

        with pytest.raises(KnowledgeBaseError):
            load_knowledge_base(tmp_path / "nope.json")

    def test_invalid_json_is_fatal(self, tmp_path):
        """Test unparseable JSON raises KnowledgeBaseError"""
        from intentbot.services.knowledge_service import load_knowledge_base, KnowledgeBaseError

        path = tmp_path / "kb.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(KnowledgeBaseError):
            load_knowledge_base(path)

    def test_duplicate_names_are_fatal(self, tmp_path):
        """Test duplicate intent names raise KnowledgeBaseError"""
        from intentbot.services.knowledge_service import load_knowledge_base, KnowledgeBaseError

        path = tmp_path / "kb.json"
        path.write_text(json.dumps({
            "intents": [
                {"intent": "greeting", "patterns": ["hi"], "responses": ["a"]},
                {"intent": "greeting", "patterns": ["hey"], "responses": ["b"]},
            ]
        }), encoding="utf-8")

        with pytest.raises(KnowledgeBaseError, match="Duplicate"):
            load_knowledge_base(path)

    def test_empty_pattern_is_fatal(self, tmp_path):
        """Test an empty pattern string is rejected instead of matching every message"""
        from intentbot.services.knowledge_service import load_knowledge_base, KnowledgeBaseError

        path = tmp_path / "kb.json"
        path.write_text(json.dumps({
            "intents": [{"intent": "greeting", "patterns": ["", "hello"], "responses": ["Hi!"]}]
        }), encoding="utf-8")

        with pytest.raises(KnowledgeBaseError):
            load_knowledge_base(path)

    def test_mixed_case_pattern_is_detected(self, tmp_path):
        """Test patterns written with capitals or extra spaces still match"""
        from intentbot.services.knowledge_service import load_knowledge_base
        from intentbot.services.intent_detector import IntentDetector
        from intentbot.services.preprocess import normalize

        path = tmp_path / "kb.json"
        path.write_text(json.dumps({
            "intents": [{"intent": "greeting", "patterns": ["Good   MORNING"], "responses": ["Morning!"]}]
        }), encoding="utf-8")

        kb = load_knowledge_base(path)
        result = IntentDetector().detect(normalize("good morning to you").normalized, kb)

        assert result.intent == "greeting"
        assert result.confidence == 1.0
        assert result.matched_patterns == ["good morning"]

    def test_authoring_defects_are_logged(self, tmp_path, caplog):
        """Test empty patterns/responses load with warnings"""
        from intentbot.services.knowledge_service import load_knowledge_base

        path = tmp_path / "kb.json"
        path.write_text(json.dumps(SAMPLE_KNOWLEDGE), encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            kb = load_knowledge_base(path)

        assert kb.get_intent("draft") is not None
        assert "'draft' has no patterns" in caplog.text
        assert "'no_replies' has no responses" in caplog.text

    def test_service_initialize_once(self, tmp_path, monkeypatch):
        """Test the singleton loads once and then serves the same object"""
        from intentbot.services.knowledge_service import KnowledgeService

        path = tmp_path / "kb.json"
        path.write_text(json.dumps(SAMPLE_KNOWLEDGE), encoding="utf-8")

        service = KnowledgeService()
        monkeypatch.setattr(service, "_knowledge_base", None)

        first = service.initialize(str(path))
        path.unlink()
        second = service.initialize(str(path))

        assert first is second
        assert service.is_loaded
        assert service.knowledge_base is first

    def test_unloaded_access_raises(self, monkeypatch):
        """Test reading before loading raises KnowledgeBaseError"""
        from intentbot.services.knowledge_service import KnowledgeService, KnowledgeBaseError

        service = KnowledgeService()
        monkeypatch.setattr(service, "_knowledge_base", None)

        assert service.is_loaded is False
        with pytest.raises(KnowledgeBaseError):
            service.knowledge_base


class TestLogging:
    """Tests for setup_logging"""

    def test_file_handler_created(self, tmp_path):
        """Test a log file is written when log_dir is given"""
        from intentbot.logging_config import setup_logging

        logger = setup_logging(level="INFO", log_dir=str(tmp_path), name="intentbot_test")
        logger.info("hello log")
        for handler in logger.handlers:
            handler.flush()

        files = list(tmp_path.glob("intentbot_test_*.log"))
        assert len(files) == 1
        assert "hello log" in files[0].read_text(encoding="utf-8")

        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    def test_console_only(self):
        """Test only a console handler is added without log_dir"""
        from intentbot.logging_config import setup_logging

        logger = setup_logging(level="WARNING", name="intentbot_console_test")

        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING
        logger.handlers.clear()
