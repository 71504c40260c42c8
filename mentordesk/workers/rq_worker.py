# mentordesk/workers/rq_worker.py
import asyncio
import logging
import os
from typing import Any, Awaitable, Callable, Mapping

import redis
from rq import Queue, Worker

from mentordesk.core.config import settings
from mentordesk.core.logging import setup_logging
from mentordesk.repositories.base import QuestionStore
from mentordesk.repositories.factory import build_store
from mentordesk.services.email import EmailSender
from mentordesk.services.notifications import (
    ANSWERED_EVENT,
    AnswerNotification,
    deliver_answer_notification,
)

logger = logging.getLogger("worker.notifications")

Handler = Callable[[QuestionStore, EmailSender, Mapping[str, Any]], Awaitable[None]]


async def on_question_answered(store: QuestionStore, sender: EmailSender, payload: Mapping[str, Any]) -> None:
    notification = AnswerNotification.from_payload(payload)
    status = await deliver_answer_notification(store, sender, notification)
    logger.info("question_answered_handled", extra={
        "question_id": notification.question_id,
        "sent": status.sent,
    })


EVENT_HANDLERS: dict[str, Handler] = {
    ANSWERED_EVENT: on_question_answered,
}


async def run_event(
    event_type: str,
    payload: Mapping[str, Any],
    store: QuestionStore,
    sender: EmailSender,
) -> bool:
    handler = EVENT_HANDLERS.get(event_type)
    if not handler:
        logger.warning("unknown_event", extra={"event_type": event_type})
        return False
    await handler(store, sender, payload)
    return True


async def _run_with_own_store(event_type: str, payload: Mapping[str, Any]) -> None:
    store = build_store(settings)
    try:
        await run_event(event_type, payload, store, EmailSender(settings))
    finally:
        await store.close()


def handle_event(event_type: str, payload: Mapping[str, Any] | None = None) -> None:
    """RQ entry point; one job = one delivery attempt."""
    asyncio.run(_run_with_own_store(event_type, payload or {}))


def main() -> None:
    setup_logging(settings.log_level)
    queue_name = settings.notifications_queue
    logger.info("worker_starting", extra={"queue": queue_name, "redis": settings.redis_url})
    conn = redis.from_url(settings.redis_url)
    queue = Queue(queue_name, connection=conn)
    worker = Worker([queue], connection=conn, name=os.getenv("WORKER_NAME", "notifications-worker"))
    worker.work(logging_level=logging.INFO)


if __name__ == "__main__":
    main()
