"""
Question intake and plain (non-answer) updates.
"""

from __future__ import annotations

import logging
from typing import Any

from mentordesk.core.errors import ConflictError, NotFoundError, ValidationError
from mentordesk.repositories.base import QuestionStore
from mentordesk.schemas.questions import (
    NotificationStatus,
    QuestionCreate,
    QuestionDoc,
    QuestionStatusEnum,
    QuestionUpdate,
)
from mentordesk.services.contacts import (
    ContactKind,
    classify_and_validate,
    validate_student_contact,
)

log = logging.getLogger(__name__)


def _normalized_contact(body: QuestionCreate) -> dict[str, Any]:
    """
    Free-form ``contact`` wins when given; otherwise the two explicit fields
    are checked with the dual-field rules. At least one valid contact is required.
    """
    if body.contact is not None and body.contact.strip():
        check = classify_and_validate(body.contact)
        if not check.is_valid:
            raise ValidationError(check.reason)
        if check.kind is ContactKind.email:
            return {"student_email": check.value, "student_phone": None}
        return {"student_email": None, "student_phone": check.value}

    result = validate_student_contact(body.student_email, body.student_phone)
    if not result.has_valid_contact:
        raise ValidationError(result.error)
    return {"student_email": result.normalized_email, "student_phone": result.normalized_phone}


async def create_question(store: QuestionStore, body: QuestionCreate) -> QuestionDoc:
    contact = _normalized_contact(body)

    mentor_id = body.assigned_mentor_id or None
    if mentor_id and await store.find_mentor(mentor_id) is None:
        raise ValidationError("Assigned mentor does not exist")

    doc = await store.create({
        "student_name": body.student_name.strip(),
        **contact,
        "subject": body.subject.strip(),
        "question": body.question.strip(),
        "status": QuestionStatusEnum.assigned if mentor_id else QuestionStatusEnum.new,
        "assigned_mentor_id": mentor_id,
        "notification": NotificationStatus(),
    })
    log.info("question_created", extra={
        "question_id": doc.id,
        "contact_type": "email" if doc.student_email else "phone",
        "subject": doc.subject,
    })
    return doc


async def update_question(store: QuestionStore, question_id: str, body: QuestionUpdate) -> QuestionDoc:
    """Status / assignment changes. Answers go through ``answers.submit_answer``."""
    if not store.is_valid_id(question_id):
        raise ValidationError("Invalid question ID")

    fields: dict[str, Any] = {}
    if body.assigned_mentor_id is not None:
        if await store.find_mentor(body.assigned_mentor_id) is None:
            raise ValidationError("Assigned mentor does not exist")
        fields["assigned_mentor_id"] = body.assigned_mentor_id
    if body.status is not None:
        if body.status == QuestionStatusEnum.resolved:
            raise ValidationError("A question becomes Resolved only by submitting an answer")
        fields["status"] = body.status

    if not fields:
        raise ValidationError("Nothing to update")

    # nothing leaves Resolved
    guard = QuestionStatusEnum.resolved if "status" in fields else None
    updated = await store.update_by_id(question_id, fields, unless_status=guard)
    if updated is None:
        if await store.find_by_id(question_id) is None:
            raise NotFoundError("Question not found")
        raise ConflictError("Resolved questions cannot change status")
    return updated
