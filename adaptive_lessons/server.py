import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adaptive_lessons.config import settings
from adaptive_lessons.db.database import init_db

logger = logging.getLogger(__name__)

_DEV_ORIGINS = [
    "http://localhost:8000",
    "http://127.0.0.1:8000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def _cors_origins() -> list[str]:
    """CORS_ORIGINS (comma-separated) when set, local dev servers otherwise."""
    configured = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    return configured or _DEV_ORIGINS


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.has_api_key:
        logger.error("No API key configured for model %s", settings.lesson_model or settings.model_name)
        raise RuntimeError("Set API_KEY (or ANTHROPIC_API_KEY for Claude models) in your .env file.")
    await init_db()
    logger.info("Adaptive lessons ready (env=%s)", settings.env)
    yield


app = FastAPI(title="Adaptive Lessons", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# Import and register routes
from adaptive_lessons.routes.lessons import router as lessons_router
from adaptive_lessons.routes.performance import router as performance_router

app.include_router(lessons_router)
app.include_router(performance_router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "model": settings.lesson_model or settings.model_name}
