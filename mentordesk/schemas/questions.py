from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class QuestionStatusEnum(str, enum.Enum):
    new = "New"
    assigned = "Assigned"
    in_progress = "In Progress"
    resolved = "Resolved"


class NotificationStatus(BaseModel):
    sent: bool = False
    sent_at: Optional[datetime] = None
    error: Optional[str] = None


class QuestionDoc(BaseModel):
    """Full question record as held by storage. Contains private student contact."""

    id: str
    student_name: str
    student_email: Optional[str] = None
    student_phone: Optional[str] = None
    subject: str
    question: str
    status: QuestionStatusEnum = QuestionStatusEnum.new
    assigned_mentor_id: Optional[str] = None
    answer_text: Optional[str] = None
    answered_by_mentor_id: Optional[str] = None
    answered_at: Optional[datetime] = None
    notification: NotificationStatus = Field(default_factory=NotificationStatus)
    created_at: datetime
    updated_at: datetime


# ==== inbound ====

class QuestionCreate(BaseModel):
    student_name: str = Field(min_length=1, max_length=255)
    subject: str = Field(min_length=1, max_length=255)
    question: str = Field(min_length=1)

    # either one free-form contact...
    contact: Optional[str] = Field(default=None, max_length=255)
    # ...or the two explicit fields
    student_email: Optional[str] = Field(default=None, max_length=255)
    student_phone: Optional[str] = Field(default=None, max_length=32)

    assigned_mentor_id: Optional[str] = None


class QuestionUpdate(BaseModel):
    # answer_text present => answer submission; otherwise a plain update
    answer_text: Optional[str] = None
    status: Optional[QuestionStatusEnum] = None
    assigned_mentor_id: Optional[str] = None


# ==== outbound ====

class NotificationOut(BaseModel):
    sent: bool
    sent_at: Optional[datetime] = None


class QuestionPublic(BaseModel):
    """What leaves the service for anyone but staff: no contact, no delivery error."""

    id: str
    subject: str
    question: str
    status: QuestionStatusEnum
    assigned_mentor_id: Optional[str] = None
    answer_text: Optional[str] = None
    answered_by_mentor_id: Optional[str] = None
    answered_at: Optional[datetime] = None
    notification: NotificationOut
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_doc(cls, doc: QuestionDoc) -> "QuestionPublic":
        return cls(
            **doc.model_dump(include={
                "id", "subject", "question", "status", "assigned_mentor_id",
                "answer_text", "answered_by_mentor_id", "answered_at",
                "created_at", "updated_at",
            }),
            notification=NotificationOut(
                sent=doc.notification.sent,
                sent_at=doc.notification.sent_at,
            ),
        )


class QuestionOut(QuestionDoc):
    """Staff view: the full record."""


class ResolvedAnswerOut(BaseModel):
    id: str
    subject: str
    question: str
    answer_text: Optional[str] = None
    answered_at: Optional[datetime] = None
    mentor_name: Optional[str] = None
    mentor_subject: Optional[str] = None


class PublicQuestionOut(ResolvedAnswerOut):
    status: QuestionStatusEnum
    created_at: datetime
