# mentordesk/api/routes/mentor.py
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from mentordesk.api.deps import Actor, StoreDep, require_role
from mentordesk.schemas.mentors import MentorOut
from mentordesk.schemas.questions import QuestionPublic

router = APIRouter(prefix="/mentor", tags=["mentor"])

MENTOR_QUEUE_LIMIT = 500

MentorDep = Annotated[Actor, Depends(require_role("mentor"))]


@router.get("/questions", response_model=list[QuestionPublic])
async def my_questions(
    store: StoreDep,
    current: MentorDep,
    limit: int = Query(default=MENTOR_QUEUE_LIMIT, ge=1, le=MENTOR_QUEUE_LIMIT),
):
    """Questions assigned to the calling mentor, newest first, at most ``limit``."""
    rows = await store.list_questions(assigned_mentor_id=current.mentor_id, limit=limit)
    return [QuestionPublic.from_doc(q) for q in rows]


@router.get("/profile", response_model=MentorOut)
async def my_profile(current: MentorDep):
    return MentorOut.from_doc(current.mentor)
