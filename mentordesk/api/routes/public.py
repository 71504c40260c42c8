# mentordesk/api/routes/public.py
"""
Knowledge base. Student name, email, phone and delivery errors never leave
through these endpoints.
"""
from __future__ import annotations

from typing import Iterable, Optional

from fastapi import APIRouter, Query

from mentordesk.api.deps import StoreDep
from mentordesk.repositories.base import QuestionStore
from mentordesk.schemas.mentors import MentorDoc, MentorOut
from mentordesk.schemas.questions import PublicQuestionOut, ResolvedAnswerOut

router = APIRouter(prefix="/public", tags=["public"])


async def _mentors_by_id(store: QuestionStore, ids: Iterable[Optional[str]]) -> dict[str, MentorDoc]:
    out: dict[str, MentorDoc] = {}
    for mid in {i for i in ids if i}:
        m = await store.find_mentor(mid)
        if m:
            out[mid] = m
    return out


@router.get("/resolved", response_model=list[ResolvedAnswerOut])
async def resolved(store: StoreDep):
    rows = await store.list_resolved(limit=20)
    mentors = await _mentors_by_id(store, (q.answered_by_mentor_id for q in rows))

    result = []
    for q in rows:
        m = mentors.get(q.answered_by_mentor_id or "")
        result.append(ResolvedAnswerOut(
            id=q.id,
            subject=q.subject,
            question=q.question,
            answer_text=q.answer_text,
            answered_at=q.answered_at,
            mentor_name=m.name if m else None,
            mentor_subject=m.subject if m else None,
        ))
    return result


@router.get("/questions", response_model=list[PublicQuestionOut])
async def public_questions(
    store: StoreDep,
    subject: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
):
    rows = await store.list_questions(subject=subject, limit=limit)
    mentors = await _mentors_by_id(store, (q.assigned_mentor_id for q in rows))

    result = []
    for q in rows:
        m = mentors.get(q.assigned_mentor_id or "")
        result.append(PublicQuestionOut(
            id=q.id,
            subject=q.subject,
            question=q.question,
            status=q.status,
            answer_text=q.answer_text,
            answered_at=q.answered_at,
            mentor_name=m.name if m else None,
            mentor_subject=m.subject if m else None,
            created_at=q.created_at,
        ))
    return result


@router.get("/mentors", response_model=list[MentorOut])
async def public_mentors(store: StoreDep):
    """Directory students pick a mentor from, sorted by name."""
    return [MentorOut.from_doc(m) for m in await store.list_mentors()]
