"""Intent Bot - rule-based intent routing with AI fallback"""

__version__ = "1.0.0"
