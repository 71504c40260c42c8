"""
Storage interface for questions and mentors.

Two interchangeable backends implement it: ``SqlQuestionStore`` (durable) and
``MemoryQuestionStore`` (ephemeral, in-process). The backend is picked once at
startup by ``repositories.factory.build_store``; nothing above this interface
knows which one is in use.
"""

from __future__ import annotations

import re
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from mentordesk.schemas.mentors import MentorDoc
from mentordesk.schemas.questions import QuestionDoc, QuestionStatusEnum

_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuestionStore(ABC):

    def is_valid_id(self, value: str) -> bool:
        return isinstance(value, str) and bool(_ID_RE.match(value))

    # ---- questions ----

    @abstractmethod
    async def find_by_id(self, question_id: str) -> Optional[QuestionDoc]: ...

    @abstractmethod
    async def create(self, fields: Mapping[str, Any]) -> QuestionDoc: ...

    @abstractmethod
    async def update_by_id(
        self,
        question_id: str,
        fields: Mapping[str, Any],
        *,
        unless_status: Optional[QuestionStatusEnum] = None,
    ) -> Optional[QuestionDoc]:
        """
        Apply ``fields`` and return the updated record.

        Returns None when the question does not exist or, if ``unless_status``
        is given, when its current status equals it. The status check and the
        write happen in one step.
        """

    @abstractmethod
    async def list_questions(
        self,
        *,
        status: Optional[QuestionStatusEnum] = None,
        subject: Optional[str] = None,
        assigned_mentor_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[QuestionDoc]:
        """Newest first. ``subject`` is a case-insensitive substring match."""

    @abstractmethod
    async def list_resolved(self, limit: int = 20) -> list[QuestionDoc]:
        """Resolved questions, most recently answered first."""

    # ---- mentors ----

    @abstractmethod
    async def find_mentor(self, mentor_id: str) -> Optional[MentorDoc]: ...

    @abstractmethod
    async def find_mentor_by_email(self, email: str) -> Optional[MentorDoc]: ...

    @abstractmethod
    async def create_mentor(self, fields: Mapping[str, Any]) -> MentorDoc: ...

    @abstractmethod
    async def update_mentor(self, mentor_id: str, fields: Mapping[str, Any]) -> Optional[MentorDoc]: ...

    @abstractmethod
    async def delete_mentor(self, mentor_id: str) -> bool:
        """
        Remove the mentor. Questions that pointed at it keep their history but
        lose the reference (assigned / answered-by become None).
        Returns False when there was no such mentor.
        """

    @abstractmethod
    async def list_mentors(self) -> list[MentorDoc]: ...

    async def close(self) -> None:
        return None
