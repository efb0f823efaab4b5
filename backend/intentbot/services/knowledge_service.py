"""
Knowledge Service
=================
Loads the knowledge base JSON once at startup and shares it read-only.

A missing or invalid file is fatal: no request can be served without it.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from intentbot.config import settings
from intentbot.models.knowledge import KnowledgeBase

logger = logging.getLogger(__name__)


class KnowledgeBaseError(Exception):
    """Raised when the knowledge base cannot be loaded"""


def load_knowledge_base(path: Union[str, Path]) -> KnowledgeBase:
    """
    Read and validate a knowledge base file.

    Intents without patterns or responses are accepted but logged:
    they never match, or answer with a fallback reply.

    Raises:
        KnowledgeBaseError: file missing, not JSON, or schema invalid
    """
    path = Path(path)

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise KnowledgeBaseError(f"Knowledge base not found: {path}") from e
    except json.JSONDecodeError as e:
        raise KnowledgeBaseError(f"Knowledge base is not valid JSON ({path}): {e}") from e

    try:
        knowledge_base = KnowledgeBase.model_validate(raw)
    except ValidationError as e:
        raise KnowledgeBaseError(f"Knowledge base is invalid ({path}): {e}") from e

    for intent in knowledge_base.intents:
        if not intent.patterns:
            logger.warning(f"Intent '{intent.name}' has no patterns and will never be detected")
        if not intent.responses:
            logger.warning(f"Intent '{intent.name}' has no responses")

    return knowledge_base


class KnowledgeService:
    """
    Singleton holder for the loaded knowledge base.
    """

    _instance: Optional['KnowledgeService'] = None
    _knowledge_base: Optional[KnowledgeBase] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def initialize(self, path: Optional[str] = None) -> KnowledgeBase:
        """Load the knowledge base (settings.knowledge_base_path by default)"""
        if self._knowledge_base is None:
            path = path or settings.knowledge_base_path
            self._knowledge_base = load_knowledge_base(path)
            logger.info(
                f"✓ Knowledge base loaded: {len(self._knowledge_base.intents)} intents ({path})"
            )
        return self._knowledge_base

    @property
    def is_loaded(self) -> bool:
        return self._knowledge_base is not None

    @property
    def knowledge_base(self) -> KnowledgeBase:
        if self._knowledge_base is None:
            raise KnowledgeBaseError("Knowledge base has not been loaded")
        return self._knowledge_base

    def reset(self):
        """Forget the loaded knowledge base (tests only)"""
        self._knowledge_base = None


# Singleton instance
knowledge_service = KnowledgeService()
