from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional

from pydantic import BaseModel
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mentordesk.core.errors import PersistenceError
from mentordesk.db.base import Base
from mentordesk.db.models import Mentor, Question
from mentordesk.db.session import make_engine, make_sessionmaker
from mentordesk.repositories.base import QuestionStore, utcnow
from mentordesk.schemas.mentors import MentorDoc
from mentordesk.schemas.questions import NotificationStatus, QuestionDoc, QuestionStatusEnum

log = logging.getLogger(__name__)


def _columns(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Record fields -> table columns (the notification sub-record is flattened)."""
    out = dict(fields)
    notification = out.pop("notification", None)
    if notification is not None:
        if isinstance(notification, BaseModel):
            notification = notification.model_dump()
        out["notification_sent"] = bool(notification.get("sent", False))
        out["notification_sent_at"] = notification.get("sent_at")
        out["notification_error"] = notification.get("error")
    return out


def _question_doc(row: Question) -> QuestionDoc:
    return QuestionDoc(
        id=row.id,
        student_name=row.student_name,
        student_email=row.student_email,
        student_phone=row.student_phone,
        subject=row.subject,
        question=row.question,
        status=row.status,
        assigned_mentor_id=row.assigned_mentor_id,
        answer_text=row.answer_text,
        answered_by_mentor_id=row.answered_by_mentor_id,
        answered_at=row.answered_at,
        notification=NotificationStatus(
            sent=row.notification_sent,
            sent_at=row.notification_sent_at,
            error=row.notification_error,
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _mentor_doc(row: Mentor) -> MentorDoc:
    return MentorDoc(
        id=row.id,
        name=row.name,
        email=row.email,
        subject=row.subject,
        university=row.university,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlQuestionStore(QuestionStore):
    def __init__(self, sessions: async_sessionmaker[AsyncSession], engine: AsyncEngine | None = None):
        self._sessions = sessions
        self._engine = engine

    @classmethod
    def from_url(cls, url: str) -> "SqlQuestionStore":
        engine = make_engine(url)
        return cls(make_sessionmaker(engine), engine)

    async def create_all(self) -> None:
        """Create tables directly (tests / local dev). Production uses Alembic."""
        if self._engine is None:
            raise RuntimeError("create_all needs the store to own its engine")
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    @asynccontextmanager
    async def _session(self, op: str) -> AsyncIterator[AsyncSession]:
        async with self._sessions() as db:
            try:
                yield db
            except SQLAlchemyError as e:
                log.exception("storage_error", extra={"op": op})
                raise PersistenceError(f"Storage operation '{op}' failed") from e

    # ---- questions ----

    async def find_by_id(self, question_id: str) -> Optional[QuestionDoc]:
        async with self._session("find_question") as db:
            row = await db.get(Question, question_id)
            return _question_doc(row) if row else None

    async def create(self, fields: Mapping[str, Any]) -> QuestionDoc:
        async with self._session("create_question") as db:
            row = Question(**_columns(fields))
            db.add(row)
            await db.commit()
            await db.refresh(row)
            return _question_doc(row)

    async def update_by_id(
        self,
        question_id: str,
        fields: Mapping[str, Any],
        *,
        unless_status: Optional[QuestionStatusEnum] = None,
    ) -> Optional[QuestionDoc]:
        stmt = (
            update(Question)
            .where(Question.id == question_id)
            .values(**_columns(fields), updated_at=utcnow())
        )
        if unless_status is not None:
            stmt = stmt.where(Question.status != unless_status)

        async with self._session("update_question") as db:
            res = await db.execute(stmt.execution_options(synchronize_session=False))
            await db.commit()
            if res.rowcount == 0:
                return None
            row = await db.get(Question, question_id, populate_existing=True)
            return _question_doc(row) if row else None

    async def list_questions(
        self,
        *,
        status: Optional[QuestionStatusEnum] = None,
        subject: Optional[str] = None,
        assigned_mentor_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[QuestionDoc]:
        stmt = select(Question)
        if status is not None:
            stmt = stmt.where(Question.status == status)
        if subject:
            stmt = stmt.where(Question.subject.icontains(subject, autoescape=True))
        if assigned_mentor_id is not None:
            stmt = stmt.where(Question.assigned_mentor_id == assigned_mentor_id)
        stmt = stmt.order_by(Question.created_at.desc()).limit(limit)

        async with self._session("list_questions") as db:
            rows = (await db.execute(stmt)).scalars().all()
            return [_question_doc(r) for r in rows]

    async def list_resolved(self, limit: int = 20) -> list[QuestionDoc]:
        stmt = (
            select(Question)
            .where(Question.status == QuestionStatusEnum.resolved)
            .order_by(Question.answered_at.desc())
            .limit(limit)
        )
        async with self._session("list_resolved") as db:
            rows = (await db.execute(stmt)).scalars().all()
            return [_question_doc(r) for r in rows]

    # ---- mentors ----

    async def find_mentor(self, mentor_id: str) -> Optional[MentorDoc]:
        async with self._session("find_mentor") as db:
            row = await db.get(Mentor, mentor_id)
            return _mentor_doc(row) if row else None

    async def find_mentor_by_email(self, email: str) -> Optional[MentorDoc]:
        async with self._session("find_mentor_by_email") as db:
            row = (
                await db.execute(select(Mentor).where(Mentor.email == email.strip().lower()))
            ).scalar_one_or_none()
            return _mentor_doc(row) if row else None

    async def create_mentor(self, fields: Mapping[str, Any]) -> MentorDoc:
        data = dict(fields)
        data["email"] = str(data["email"]).strip().lower()
        async with self._session("create_mentor") as db:
            row = Mentor(**data)
            db.add(row)
            await db.commit()
            await db.refresh(row)
            return _mentor_doc(row)

    async def update_mentor(self, mentor_id: str, fields: Mapping[str, Any]) -> Optional[MentorDoc]:
        async with self._session("update_mentor") as db:
            row = await db.get(Mentor, mentor_id)
            if row is None:
                return None
            for key, value in fields.items():
                setattr(row, key, value)
            row.updated_at = utcnow()
            await db.commit()
            await db.refresh(row)
            return _mentor_doc(row)

    async def list_mentors(self) -> list[MentorDoc]:
        async with self._session("list_mentors") as db:
            rows = (await db.execute(select(Mentor).order_by(Mentor.name.asc()))).scalars().all()
            return [_mentor_doc(r) for r in rows]

    async def delete_mentor(self, mentor_id: str) -> bool:
        async with self._session("delete_mentor") as db:
            row = await db.get(Mentor, mentor_id)
            if row is None:
                return False
            # same as ON DELETE SET NULL; SQLite does not enforce it unless asked
            await db.execute(
                update(Question)
                .where(Question.assigned_mentor_id == mentor_id)
                .values(assigned_mentor_id=None)
                .execution_options(synchronize_session=False)
            )
            await db.execute(
                update(Question)
                .where(Question.answered_by_mentor_id == mentor_id)
                .values(answered_by_mentor_id=None)
                .execution_options(synchronize_session=False)
            )
            await db.execute(delete(Mentor).where(Mentor.id == mentor_id))
            await db.commit()
            return True
