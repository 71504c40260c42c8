"""
Answer submission workflow.

    New / Assigned / In Progress --(valid answer + valid contact)--> Resolved
    Resolved --(notification attempt)--> Resolved (notification.sent true|false)

``submit_answer`` returns once the Resolved answer is persisted. The email to
the student is handed to a Notifier and is never awaited here.
"""

from __future__ import annotations

import logging
from typing import Optional

from mentordesk.core.errors import ConflictError, NotFoundError, ValidationError
from mentordesk.repositories.base import QuestionStore, utcnow
from mentordesk.schemas.questions import (
    NotificationStatus,
    QuestionDoc,
    QuestionPublic,
    QuestionStatusEnum,
)
from mentordesk.services.contacts import validate_student_contact
from mentordesk.services.email import AnswerEmail
from mentordesk.services.notifications import AnswerNotification, Notifier

log = logging.getLogger(__name__)

MIN_ANSWER_LENGTH = 10
DEFAULT_MENTOR_NAME = "A Mentor"
DEFAULT_MENTOR_SUBJECT = "General"


def _check_answer_text(answer_text: Optional[str]) -> str:
    text = (answer_text or "").strip()
    if not text:
        raise ValidationError("Answer text is required")
    if len(text) < MIN_ANSWER_LENGTH:
        raise ValidationError(f"Answer must be at least {MIN_ANSWER_LENGTH} characters long")
    return text


async def submit_answer(
    store: QuestionStore,
    notifier: Notifier,
    question_id: str,
    answer_text: Optional[str],
    mentor_id: Optional[str] = None,
    *,
    allow_reanswer: bool = True,
) -> QuestionPublic:
    """
    Accept a mentor's answer, persist the question as Resolved and schedule the
    answer email.

    ``mentor_id`` falls back to the question's assigned mentor (staff answering
    on a mentor's behalf). With ``allow_reanswer`` off an already Resolved
    question raises ConflictError instead of being overwritten.

    Raises ValidationError, NotFoundError, ConflictError or PersistenceError.
    Delivery problems are never raised; they end up in ``notification.error``.
    """
    if not store.is_valid_id(question_id):
        raise ValidationError("Invalid question ID")
    text = _check_answer_text(answer_text)

    question = await store.find_by_id(question_id)
    if question is None:
        raise NotFoundError("Question not found")

    contact = validate_student_contact(question.student_email, question.student_phone)
    if not contact.has_valid_contact:
        raise ValidationError(f"Cannot submit answer: {contact.error}")

    if not allow_reanswer and question.status == QuestionStatusEnum.resolved:
        raise ConflictError("Question is already resolved")

    mentor_id = mentor_id or question.assigned_mentor_id
    mentor = await store.find_mentor(mentor_id) if mentor_id else None

    updated = await store.update_by_id(
        question_id,
        {
            "answer_text": text,
            "status": QuestionStatusEnum.resolved,
            "answered_by_mentor_id": mentor_id,
            "answered_at": utcnow(),
            "notification": NotificationStatus(),
        },
        unless_status=None if allow_reanswer else QuestionStatusEnum.resolved,
    )
    if updated is None:
        if allow_reanswer:
            raise NotFoundError("Question not found")
        # another submission resolved it between our read and write
        raise ConflictError("Question is already resolved")

    log.info("answer_submitted", extra={
        "question_id": question_id,
        "mentor_id": mentor_id,
        "reanswer": question.status == QuestionStatusEnum.resolved,
    })

    if contact.normalized_email:
        notifier.dispatch(AnswerNotification(
            question_id=question_id,
            email=_answer_email(updated, contact.normalized_email, text, mentor),
        ))

    return QuestionPublic.from_doc(updated)


def _answer_email(question: QuestionDoc, to_email: str, answer: str, mentor) -> AnswerEmail:
    return AnswerEmail(
        to_email=to_email,
        student_name=question.student_name,
        mentor_name=mentor.name if mentor else DEFAULT_MENTOR_NAME,
        subject=question.subject,
        question=question.question,
        answer=answer,
        mentor_subject=mentor.subject if mentor else DEFAULT_MENTOR_SUBJECT,
    )
