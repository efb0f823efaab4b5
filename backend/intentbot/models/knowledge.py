"""
Knowledge Base Models
=====================
Pydantic models for the knowledge base file.

File format:
    {
        "intents": [
            {"intent": "greeting", "patterns": ["hello", "hi"], "responses": ["Hi there!"]}
        ],
        "fallback": {"responses": ["Sorry, I didn't get that."]}
    }

Models are frozen: the knowledge base is loaded once and shared read-only
by every request.
"""

import re
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_WHITESPACE = re.compile(r"\s+")


class Intent(BaseModel):
    """A named category of user request with its patterns and canned replies"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., alias="intent", min_length=1)
    patterns: Tuple[str, ...] = ()
    responses: Tuple[str, ...] = ()

    @field_validator("patterns")
    @classmethod
    def _normalize_patterns(cls, patterns: Tuple[str, ...]) -> Tuple[str, ...]:
        """Patterns are matched against normalized text: lowercase, single spaces"""
        normalized = []
        for pattern in patterns:
            if not pattern.strip():
                raise ValueError("Patterns must not be empty or whitespace-only")
            normalized.append(_WHITESPACE.sub(" ", pattern.lower()))
        return tuple(normalized)


class FallbackResponses(BaseModel):
    """Replies used when no knowledge base lookup is possible"""
    model_config = ConfigDict(frozen=True)

    responses: Tuple[str, ...] = ()


class KnowledgeBase(BaseModel):
    """Ordered set of intents; order is significant for tie-breaking"""
    model_config = ConfigDict(frozen=True)

    intents: Tuple[Intent, ...] = ()
    fallback: FallbackResponses = FallbackResponses()

    @model_validator(mode="after")
    def _check_unique_names(self) -> "KnowledgeBase":
        seen = set()
        for intent in self.intents:
            if intent.name in seen:
                raise ValueError(f"Duplicate intent name: '{intent.name}'")
            seen.add(intent.name)
        return self

    @property
    def intent_names(self) -> Tuple[str, ...]:
        return tuple(intent.name for intent in self.intents)

    def get_intent(self, name: Optional[str]) -> Optional[Intent]:
        """Find an intent by name (None if absent)"""
        if not name:
            return None
        for intent in self.intents:
            if intent.name == name:
                return intent
        return None
