"""
Intent Bot - FastAPI Application
================================
Main entry point configuring:
- uvloop for high-performance async (non-Windows)
- Application lifespan to configure logging and load the knowledge base
- CORS, API key middleware, and API routers (/api Chat, Intents)
- Health check endpoints (/, /health)
- Generic 500 handler for uncaught errors
"""

import sys
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from intentbot import __version__
from intentbot.config import settings
from intentbot.api import chat, intents
from intentbot.logging_config import setup_logging
from intentbot.middleware.auth import APIKeyMiddleware
from intentbot.services.knowledge_service import knowledge_service

logger = logging.getLogger(__name__)

# Use uvloop for better async performance (Linux/macOS)
# On Windows, uvloop is not supported, so we fall back to default
if sys.platform != "win32":
    try:
        import uvloop
        asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
        logger.info("✅ Using uvloop for enhanced async performance")
    except ImportError:
        logger.warning("⚠️ uvloop not available, using default event loop")
else:
    logger.info("ℹ️ Running on Windows - using default event loop (uvloop not supported)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - On startup: configure logging and load the knowledge base. A missing or
      invalid knowledge base raises KnowledgeBaseError and aborts startup.
    - On shutdown: log a shutdown message.
    """
    setup_logging(
        level="DEBUG" if settings.debug_mode else settings.log_level,
        log_dir=settings.log_dir or None,
    )
    logger.info("🚀 Starting Intent Bot...")

    knowledge_base = knowledge_service.initialize()
    logger.info(f"✅ Ready: {len(knowledge_base.intents)} intents, AI model {settings.llm_model}")

    yield  # Application runs here

    logger.info("👋 Shutting down Intent Bot...")


app = FastAPI(
    title="Intent Bot API",
    description="Rule-based intent detection with safe routing and AI fallback",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Protects all /api/* routes by enforcing X-API-Key header (when configured).
app.add_middleware(APIKeyMiddleware)

app.include_router(chat.router, prefix="/api", tags=["Chat"])
app.include_router(intents.router, prefix="/api", tags=["Intents"])


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Map uncaught failures to a generic error"""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "Intent Bot",
        "version": __version__
    }


@app.get("/health")
async def health_check():
    """Detailed health check"""
    return {
        "status": "healthy" if knowledge_service.is_loaded else "degraded",
        "knowledge_base_loaded": knowledge_service.is_loaded,
        "intent_count": len(knowledge_service.knowledge_base.intents) if knowledge_service.is_loaded else 0,
        "knowledge_base_path": settings.knowledge_base_path,
        "llm_model": settings.llm_model,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "intentbot.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
