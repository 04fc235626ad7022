"""careercoach FastAPI application assembly.

Wires the users router, the SSE event stream, CORS, and lifespan management.
Run: uvicorn careercoach.main:app --reload
"""

import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from careercoach.events import event_bus
from careercoach.users.router import register_exception_handlers, users_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings up front so misconfiguration fails at startup.

    Disposes the engine pool on shutdown.
    """
    from careercoach.config import get_settings
    from careercoach.db.engine import get_engine

    settings = get_settings()
    if settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    if settings.openai_api_key is None:
        logger.warning("CAREERCOACH_OPENAI_API_KEY not set; new industries cannot be onboarded")

    yield

    get_engine().dispose()


app = FastAPI(title="careercoach", version="0.1.0", lifespan=lifespan)

# CORS for frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(users_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/events")
async def event_stream():
    """SSE endpoint for page revalidation events.

    Frontend clients connect here and re-render a path when they receive a
    `revalidate` event for it.
    """
    from sse_starlette.sse import EventSourceResponse

    async def generate():
        async for event in event_bus.subscribe():
            yield {
                "event": event["type"],
                "data": json.dumps(event["data"]),
                "retry": 5000,
            }

    return EventSourceResponse(generate())
