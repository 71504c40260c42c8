# mentordesk/services/notifications.py
"""
Answer notifications: single attempt, no retry, never blocks the caller.

A notifier takes an AnswerNotification after the answer is persisted and
delivers it in the background:
  - BackgroundNotifier: asyncio task in the API process;
  - RQNotifier: Redis queue, handled by ``mentordesk.workers.rq_worker``.

Either way ``deliver_answer_notification`` does the work: one send, then one
best-effort write of the outcome to the question's notification sub-record.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Mapping

import redis
from rq import Queue

from mentordesk.core.config import Settings
from mentordesk.core.errors import NotificationError
from mentordesk.repositories.base import QuestionStore, utcnow
from mentordesk.schemas.questions import NotificationStatus
from mentordesk.services.email import AnswerEmail, EmailSender, SendResult

log = logging.getLogger(__name__)

ANSWERED_EVENT = "question.answered"


@dataclass(frozen=True)
class AnswerNotification:
    question_id: str
    email: AnswerEmail

    def to_payload(self) -> dict[str, Any]:
        return {"question_id": self.question_id, "email": asdict(self.email)}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AnswerNotification":
        return cls(question_id=payload["question_id"], email=AnswerEmail(**payload["email"]))


async def deliver_answer_notification(
    store: QuestionStore,
    sender: EmailSender,
    notification: AnswerNotification,
) -> NotificationStatus:
    qid = notification.question_id
    try:
        result = await sender.send(notification.email)
    except Exception as e:
        err = NotificationError(f"Email service error: {e}")
        log.exception("notification_sender_crashed", extra={"question_id": qid})
        result = SendResult(False, err.message)

    status = NotificationStatus(
        sent=result.success,
        sent_at=utcnow() if result.success else None,
        error=None if result.success else result.message,
    )

    # the answer is already persisted; losing this write only loses tracking
    try:
        await store.update_by_id(qid, {"notification": status})
    except Exception:
        log.exception("notification_status_write_failed", extra={"question_id": qid})
        return status

    if result.success:
        log.info("notification_sent", extra={"question_id": qid})
    else:
        log.warning("notification_failed", extra={"question_id": qid, "error": result.message})
    return status


class Notifier(ABC):
    @abstractmethod
    def dispatch(self, notification: AnswerNotification) -> None:
        """Schedule delivery and return at once. Must not raise."""

    async def drain(self) -> None:
        """Wait for deliveries still in flight in this process."""
        return None


class BackgroundNotifier(Notifier):
    def __init__(self, store: QuestionStore, sender: EmailSender):
        self.store = store
        self.sender = sender
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, notification: AnswerNotification) -> None:
        task = asyncio.create_task(
            deliver_answer_notification(self.store, self.sender, notification),
            name=f"notify-{notification.question_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class RQNotifier(Notifier):
    def __init__(self, queue_name: str, redis_url: str):
        self.queue_name = queue_name
        self.redis_url = redis_url
        self._queue: Queue | None = None

    def _get_queue(self) -> Queue:
        if self._queue is None:
            self._queue = Queue(self.queue_name, connection=redis.from_url(self.redis_url))
        return self._queue

    def dispatch(self, notification: AnswerNotification) -> None:
        self.enqueue(ANSWERED_EVENT, notification.to_payload())

    def enqueue(self, event_type: str, payload: Mapping[str, Any]) -> str | None:
        """
        Put the event on the queue for ``handle_event`` in the worker.
        No Retry: delivery is a single attempt.
        Returns job.id, or None on failure (the HTTP request must not fail).
        """
        try:
            job = self._get_queue().enqueue(
                "mentordesk.workers.rq_worker.handle_event",
                event_type,
                dict(payload),
                job_timeout=60,
            )
            return getattr(job, "id", None)
        except Exception:
            log.exception("enqueue_failed", extra={"event_type": event_type, "queue": self.queue_name})
            return None


def build_notifier(cfg: Settings, store: QuestionStore, sender: EmailSender) -> Notifier:
    if cfg.notification_backend == "rq":
        return RQNotifier(cfg.notifications_queue, cfg.redis_url)
    return BackgroundNotifier(store, sender)
