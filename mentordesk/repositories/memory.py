from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from mentordesk.repositories.base import QuestionStore, new_id, utcnow
from mentordesk.schemas.mentors import MentorDoc
from mentordesk.schemas.questions import QuestionDoc, QuestionStatusEnum

log = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _plain(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {k: (v.model_dump() if isinstance(v, BaseModel) else v) for k, v in fields.items()}


class MemoryQuestionStore(QuestionStore):
    """
    In-process store for development and tests. Data lives as long as the
    process; every read hands out a copy, so callers never alias stored state.
    """

    def __init__(self) -> None:
        self._questions: dict[str, QuestionDoc] = {}
        self._mentors: dict[str, MentorDoc] = {}

    # ---- questions ----

    async def find_by_id(self, question_id: str) -> Optional[QuestionDoc]:
        doc = self._questions.get(question_id)
        return doc.model_copy(deep=True) if doc else None

    async def create(self, fields: Mapping[str, Any]) -> QuestionDoc:
        now = utcnow()
        doc = QuestionDoc.model_validate({**_plain(fields), "id": new_id(), "created_at": now, "updated_at": now})
        self._questions[doc.id] = doc
        log.debug("memory_question_created", extra={"question_id": doc.id})
        return doc.model_copy(deep=True)

    async def update_by_id(
        self,
        question_id: str,
        fields: Mapping[str, Any],
        *,
        unless_status: Optional[QuestionStatusEnum] = None,
    ) -> Optional[QuestionDoc]:
        current = self._questions.get(question_id)
        if current is None:
            return None
        if unless_status is not None and current.status == unless_status:
            return None
        updated = QuestionDoc.model_validate({
            **current.model_dump(),
            **_plain(fields),
            "id": current.id,
            "updated_at": utcnow(),
        })
        self._questions[question_id] = updated
        return updated.model_copy(deep=True)

    async def list_questions(
        self,
        *,
        status: Optional[QuestionStatusEnum] = None,
        subject: Optional[str] = None,
        assigned_mentor_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[QuestionDoc]:
        rows = list(self._questions.values())
        if status is not None:
            rows = [q for q in rows if q.status == status]
        if subject:
            needle = subject.lower()
            rows = [q for q in rows if needle in q.subject.lower()]
        if assigned_mentor_id is not None:
            rows = [q for q in rows if q.assigned_mentor_id == assigned_mentor_id]
        rows.sort(key=lambda q: q.created_at, reverse=True)
        return [q.model_copy(deep=True) for q in rows[:limit]]

    async def list_resolved(self, limit: int = 20) -> list[QuestionDoc]:
        rows = [q for q in self._questions.values() if q.status == QuestionStatusEnum.resolved]
        rows.sort(key=lambda q: q.answered_at or _EPOCH, reverse=True)
        return [q.model_copy(deep=True) for q in rows[:limit]]

    # ---- mentors ----

    async def find_mentor(self, mentor_id: str) -> Optional[MentorDoc]:
        m = self._mentors.get(mentor_id)
        return m.model_copy() if m else None

    async def find_mentor_by_email(self, email: str) -> Optional[MentorDoc]:
        email = email.strip().lower()
        for m in self._mentors.values():
            if m.email == email:
                return m.model_copy()
        return None

    async def create_mentor(self, fields: Mapping[str, Any]) -> MentorDoc:
        now = utcnow()
        data = {**_plain(fields), "id": new_id(), "created_at": now, "updated_at": now}
        data["email"] = str(data["email"]).strip().lower()
        m = MentorDoc.model_validate(data)
        self._mentors[m.id] = m
        return m.model_copy()

    async def update_mentor(self, mentor_id: str, fields: Mapping[str, Any]) -> Optional[MentorDoc]:
        current = self._mentors.get(mentor_id)
        if current is None:
            return None
        m = MentorDoc.model_validate({**current.model_dump(), **_plain(fields), "id": current.id, "updated_at": utcnow()})
        self._mentors[mentor_id] = m
        return m.model_copy()

    async def list_mentors(self) -> list[MentorDoc]:
        return sorted((m.model_copy() for m in self._mentors.values()), key=lambda m: m.name)

    async def delete_mentor(self, mentor_id: str) -> bool:
        if self._mentors.pop(mentor_id, None) is None:
            return False
        for qid, q in self._questions.items():
            detach = {}
            if q.assigned_mentor_id == mentor_id:
                detach["assigned_mentor_id"] = None
            if q.answered_by_mentor_id == mentor_id:
                detach["answered_by_mentor_id"] = None
            if detach:
                self._questions[qid] = q.model_copy(update=detach)
        return True
