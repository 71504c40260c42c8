# mentordesk/api/routes/questions.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request, status

from mentordesk.api.deps import ActorDep, NotifierDep, StoreDep, require_role
from mentordesk.core.config import settings
from mentordesk.core.logging import log_extra
from mentordesk.schemas.questions import (
    QuestionCreate,
    QuestionOut,
    QuestionPublic,
    QuestionStatusEnum,
    QuestionUpdate,
)
from mentordesk.services.answers import submit_answer
from mentordesk.services.questions import create_question, update_question

router = APIRouter(prefix="/questions", tags=["questions"])
logger = logging.getLogger(__name__)


@router.post("", response_model=QuestionPublic, status_code=status.HTTP_201_CREATED)
async def create(body: QuestionCreate, store: StoreDep, request: Request):
    """Public: a student submits a question with an email or a phone number."""
    doc = await create_question(store, body)
    logger.info("question_received", extra={**log_extra(request), "question_id": doc.id})
    return QuestionPublic.from_doc(doc)


@router.get(
    "",
    response_model=list[QuestionOut],
    dependencies=[Depends(require_role("admin"))],
)
async def list_all(
    store: StoreDep,
    status_: QuestionStatusEnum | None = Query(default=None, alias="status"),
    subject: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
):
    """Staff: full records, student contact included."""
    return await store.list_questions(status=status_, subject=subject, limit=limit)


@router.patch("/{qid}", response_model=QuestionPublic)
async def patch_question(
    qid: str,
    body: QuestionUpdate,
    store: StoreDep,
    notifier: NotifierDep,
    current: ActorDep,
    request: Request,
):
    # answer_text present -> answer submission (+ email); otherwise plain update
    if body.answer_text is not None:
        result = await submit_answer(
            store,
            notifier,
            qid,
            body.answer_text,
            current.mentor_id,
            allow_reanswer=settings.allow_reanswer,
        )
        logger.info("answer_accepted", extra={**log_extra(request), "question_id": qid, "actor": current.role})
        return result

    doc = await update_question(store, qid, body)
    return QuestionPublic.from_doc(doc)
