# mentordesk/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mentordesk.api.routes import (
    health,
    questions,
    public,
    contacts,
    mentor,
    mentors,
)
from mentordesk.core.config import settings
from mentordesk.core.errors import MentorDeskError, PersistenceError
from mentordesk.core.logging import RequestIdMiddleware, log_extra, setup_logging
from mentordesk.repositories.factory import build_store
from mentordesk.services.email import EmailSender
from mentordesk.services.mentors import seed_demo_mentors
from mentordesk.services.notifications import build_notifier

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = build_store(settings)
    app.state.store = store
    app.state.notifier = build_notifier(settings, store, EmailSender(settings))
    if settings.seed_demo_mentors:
        await seed_demo_mentors(store)
    logger.info("startup", extra={
        "storage": settings.storage_backend,
        "notifications": settings.notification_backend,
    })
    try:
        yield
    finally:
        # let in-process deliveries finish before the store goes away
        await app.state.notifier.drain()
        await store.close()


app = FastAPI(
    title="MentorDesk",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url=None,
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# ==== Middlewares ====
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestIdMiddleware)


# ==== Domain errors -> HTTP ====
@app.exception_handler(MentorDeskError)
async def mentordesk_error_handler(request: Request, exc: MentorDeskError):
    if isinstance(exc, PersistenceError):
        logger.error("persistence_error", extra={**log_extra(request), "error": exc.message})
        return JSONResponse(status_code=exc.status_code, content={"detail": "Failed to save changes"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ==== API under /api ====
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(questions.router, prefix="/api")
app.include_router(public.router, prefix="/api")
app.include_router(contacts.router, prefix="/api")
app.include_router(mentor.router, prefix="/api")
app.include_router(mentors.router, prefix="/api")
