"""
AI Service
==========
Groq API integration used as the AI fallback.

Called ONLY when the knowledge base is not enough:
- Unknown intents
- Low-confidence escalation intents
- NEVER for safe intents (greeting, identity, ...)

Every call returns an AIResult. API errors, missing credentials and empty
generations come back as success=False with a friendly reply text.
"""

import re
import time
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import groq
from groq import AsyncGroq

from intentbot.config import settings

logger = logging.getLogger(__name__)

ERROR_FALLBACK_REPLY = (
    "I'm having trouble connecting to my AI assistant right now. "
    "Could you try rephrasing your question, or ask something else?"
)


@dataclass
class AIResult:
    """
    Result of an AI call.

    Attributes:
        success: Whether a usable reply was generated
        reply: Generated text, or a friendly apology on failure (never empty)
        source: "ai" on success, "error_fallback" on failure
        metadata: model, tokensUsed, finishReason, responseTime (ms), timestamp
        error: Error description on failure
    """
    success: bool
    reply: str
    source: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


class AIService:
    """
    Service for interacting with the Groq chat completions API
    """

    _instance: Optional['AIService'] = None
    _async_client: Optional[AsyncGroq] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def async_client(self) -> AsyncGroq:
        """Get async Groq client (single attempt, bounded by ai_timeout_seconds)"""
        if self._async_client is None:
            self._async_client = AsyncGroq(
                api_key=settings.groq_api_key,
                timeout=settings.ai_timeout_seconds,
                max_retries=0,
            )
        return self._async_client

    def build_system_prompt(self) -> str:
        """Persona and safety constraints for the assistant"""
        name = settings.assistant_name
        return f"""You are {name}, a helpful and friendly chatbot assistant.

STRICT RULES:
1. Be concise - keep responses under 2-3 sentences
2. If you don't know something, say "I don't know" - never guess or make up facts
3. Don't provide medical, legal, or financial advice
4. Be friendly and professional
5. Stay on topic - if asked about unrelated things, politely decline
6. Don't mention that you're an AI or language model - just be helpful

Your goal: Provide accurate, helpful information in a conversational way."""

    def build_prompt(self, message: str, context: Optional[Dict[str, Any]] = None) -> str:
        """
        Build the user prompt with optional routing context.

        Args:
            message: User's original message
            context: {intent, confidence, confidence_level} from routing
        """
        context = context or {}
        prompt = ""

        intent = context.get("intent")
        if intent and intent != "unknown":
            prompt += f'Context: The user seems to be asking about "{intent}".\n\n'

        confidence = context.get("confidence")
        if confidence is not None and confidence < 0.5:
            prompt += "Note: I'm not very confident about understanding this query, so please be helpful.\n\n"

        prompt += f"User: {message}"
        return prompt

    def validate_response(self, text: str) -> str:
        """Collapse whitespace and truncate overly long replies"""
        sanitized = re.sub(r"\s+", " ", text.strip())

        limit = settings.ai_max_response_chars
        if len(sanitized) > limit:
            sanitized = sanitized[:limit - 3] + "..."
            logger.info("  [AI Service] Response truncated (too long)")

        return sanitized

    def create_error_response(self, error_message: str, start_time: float) -> AIResult:
        """Failure result carrying the friendly fallback reply"""
        return AIResult(
            success=False,
            reply=ERROR_FALLBACK_REPLY,
            source="error_fallback",
            metadata={
                "model": None,
                "tokensUsed": None,
                "finishReason": "ERROR",
                "responseTime": int((time.monotonic() - start_time) * 1000),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            error=error_message,
        )

    async def call(self, message: str, context: Optional[Dict[str, Any]] = None) -> AIResult:
        """
        Generate a reply for a message the knowledge base cannot answer.

        Args:
            message: User's original message
            context: {intent, confidence, confidence_level} from routing

        Returns:
            AIResult (success=False on any API failure)
        """
        start_time = time.monotonic()

        if not settings.groq_api_key:
            logger.error("  [AI Service] GROQ_API_KEY not configured")
            return self.create_error_response("API key not configured", start_time)

        if not isinstance(message, str) or not message.strip():
            logger.error("  [AI Service] Invalid user message")
            return self.create_error_response("Invalid user message", start_time)

        logger.info(f"  [AI Service] Calling Groq ({settings.llm_model}): '{message[:50]}'")

        try:
            response = await self.async_client.chat.completions.create(
                model=settings.llm_model,
                messages=[
                    {"role": "system", "content": self.build_system_prompt()},
                    {"role": "user", "content": self.build_prompt(message, context)},
                ],
                max_tokens=settings.ai_max_tokens,
                temperature=settings.ai_temperature,
                top_p=settings.ai_top_p,
            )
        except groq.APITimeoutError:
            logger.warning(f"  [AI Service] Timed out after {settings.ai_timeout_seconds}s")
            return self.create_error_response("AI request timed out", start_time)
        except groq.RateLimitError as e:
            logger.warning(f"  [AI Service] Rate limit exceeded: {e}")
            return self.create_error_response(str(e), start_time)
        except groq.AuthenticationError as e:
            logger.error(f"  [AI Service] Invalid API key: {e}")
            return self.create_error_response(str(e), start_time)
        except groq.APIError as e:
            logger.error(f"  [AI Service] Error calling Groq: {e}")
            return self.create_error_response(str(e), start_time)

        choice = response.choices[0] if response.choices else None
        text = choice.message.content if choice and choice.message else None

        if not text or not text.strip():
            logger.error("  [AI Service] Empty response from Groq")
            return self.create_error_response("Empty response from AI", start_time)

        response_time_ms = int((time.monotonic() - start_time) * 1000)
        tokens_used = response.usage.total_tokens if response.usage else None
        finish_reason = choice.finish_reason or "unknown"

        logger.info(f"  [AI Service] Success in {response_time_ms}ms (tokens: {tokens_used})")

        return AIResult(
            success=True,
            reply=self.validate_response(text),
            source="ai",
            metadata={
                "model": settings.llm_model,
                "tokensUsed": tokens_used,
                "finishReason": finish_reason,
                "responseTime": response_time_ms,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            error=None,
        )


# Singleton instance
ai_service = AIService()
