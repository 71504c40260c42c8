# mentordesk/db/models.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    String,
    Text,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    func,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mentordesk.db.base import Base
from mentordesk.repositories.base import new_id
from mentordesk.schemas.mentors import MentorStatusEnum
from mentordesk.schemas.questions import QuestionStatusEnum


# ==== Mixins ====


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


# ==== Models ====


class Mentor(TimestampMixin, Base):
    __tablename__ = "mentors"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    subject: Mapped[str] = mapped_column(String(255))
    university: Mapped[str] = mapped_column(String(255), default="Not specified")
    status: Mapped[MentorStatusEnum] = mapped_column(
        Enum(MentorStatusEnum, name="mentor_status_enum", values_callable=lambda e: [m.value for m in e]),
        default=MentorStatusEnum.available,
        nullable=False,
    )

    assigned_questions: Mapped[List["Question"]] = relationship(
        back_populates="assigned_mentor",
        foreign_keys="Question.assigned_mentor_id",
    )

    def __repr__(self) -> str:
        return f"<Mentor id={self.id} email={self.email} subject={self.subject}>"


class Question(TimestampMixin, Base):
    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    # student (private: never serialized outside staff views)
    student_name: Mapped[str] = mapped_column(String(255))
    student_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    student_phone: Mapped[Optional[str]] = mapped_column(String(10), nullable=True, index=True)

    subject: Mapped[str] = mapped_column(String(255), index=True)
    question: Mapped[str] = mapped_column(Text)

    status: Mapped[QuestionStatusEnum] = mapped_column(
        Enum(QuestionStatusEnum, name="question_status_enum", values_callable=lambda e: [m.value for m in e]),
        default=QuestionStatusEnum.new,
        nullable=False,
    )
    assigned_mentor_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("mentors.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    answer_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    answered_by_mentor_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("mentors.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    answered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # answer email delivery
    notification_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notification_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notification_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    assigned_mentor: Mapped[Optional["Mentor"]] = relationship(
        back_populates="assigned_questions",
        foreign_keys=[assigned_mentor_id],
    )

    __table_args__ = (
        Index("ix_questions_status_answered_at", "status", "answered_at"),
        Index("ix_questions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Question id={self.id} status={self.status}>"
