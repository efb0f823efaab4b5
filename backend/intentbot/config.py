from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic import Field


DEFAULT_KNOWLEDGE_BASE_PATH = str(Path(__file__).parent / "data" / "knowledge.json")


class Settings(BaseSettings):
    # ════════════════════════════════════════
    # AI Collaborator (Groq)
    # ════════════════════════════════════════
    groq_api_key: str = Field(
        default="",
        description="Groq API key for AI fallback responses"
    )
    llm_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Groq model to use"
    )
    ai_temperature: float = Field(
        default=0.7,
        description="Sampling temperature (0 = deterministic, 1 = creative)"
    )
    ai_max_tokens: int = Field(
        default=150,
        description="Maximum tokens generated per AI reply"
    )
    ai_top_p: float = Field(
        default=0.9,
        description="Nucleus sampling"
    )
    ai_timeout_seconds: float = Field(
        default=15.0,
        description="Time budget for a single AI call; a timeout is reported as an AI failure"
    )
    ai_max_response_chars: int = Field(
        default=500,
        description="AI replies longer than this are truncated"
    )
    assistant_name: str = Field(
        default="Bingo",
        description="Assistant persona used in the AI system prompt"
    )

    # ════════════════════════════════════════
    # Knowledge Base
    # ════════════════════════════════════════
    knowledge_base_path: str = Field(
        default=DEFAULT_KNOWLEDGE_BASE_PATH,
        description="Path to the knowledge base JSON file"
    )

    # ════════════════════════════════════════
    # API Configuration
    # ════════════════════════════════════════
    api_secret_key: str = Field(
        default="",
        description="Shared secret between frontend and backend (empty disables the check)"
    )
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="CORS origins"
    )

    # ════════════════════════════════════════
    # Debug and Logging
    # ════════════════════════════════════════
    debug_mode: bool = Field(
        default=False,
        description="Enable debug logging"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_dir: str = Field(
        default="",
        description="Directory for log files (empty = console only)"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origins_list(self) -> list:
        """Convert comma-separated CORS origins to list"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
