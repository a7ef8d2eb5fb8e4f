"""FastAPI application entry point for the Ella booking assistant."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ella.api.chat import create_chat_router
from ella.booking import InMemoryBookingCreator
from ella.core.config import get_settings
from ella.core.errors import unhandled_exception_handler
from ella.core.logging import configure_logging, request_id_middleware
from ella.core.metrics import MetricsCollector
from ella.dialogue.machine import DialogueMachine
from ella.memory.store import SQLiteTranscriptStore
from ella.session import SessionRegistry

settings = get_settings()
logger = logging.getLogger("ella.app")

transcript_store = SQLiteTranscriptStore(settings.sqlite_path)
booking_creator = InMemoryBookingCreator()
metrics = MetricsCollector()
machine = DialogueMachine(
    business_name=settings.business_name,
    specific_date_placeholder=settings.specific_date_placeholder,
)
registry = SessionRegistry(
    machine,
    booking_creator=booking_creator,
    store=transcript_store,
    metrics=metrics,
    typing_delay=(settings.typing_delay_min_seconds, settings.typing_delay_max_seconds),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, settings.environment)
    logger.info("%s serving bookings for %s", settings.app_name, settings.business_name)
    try:
        yield
    finally:
        for session in registry:
            registry.remove(session.session_id)
            await session.close()
        logger.info("Application shutdown completed")


app = FastAPI(title=settings.app_name, version="0.1.0", docs_url="/docs", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_id_middleware)

app.include_router(create_chat_router(registry))


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Return basic service status for monitoring."""

    return {"status": "ok"}


def get_transcript_store() -> SQLiteTranscriptStore:
    """Dependency injector for the transcript store."""

    return transcript_store


@app.get("/conversations", tags=["conversations"])
async def list_conversations(
    store: SQLiteTranscriptStore = Depends(get_transcript_store),
) -> list[str]:
    """List conversation ids with a stored transcript (development helper)."""

    return list(store.iter_conversations())


app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get("/metrics", tags=["metrics"])
async def metrics_endpoint() -> dict:
    snapshot = metrics.snapshot()
    return {
        "total_turns": snapshot.total_turns,
        "steps": snapshot.steps,
        "intents": snapshot.intents,
        "bookings_confirmed": snapshot.bookings_confirmed,
        "handoff_failures": snapshot.handoff_failures,
        "active_sessions": len(registry),
    }
