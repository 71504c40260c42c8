# mentordesk/api/routes/mentors.py
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from mentordesk.api.deps import StoreDep, require_role
from mentordesk.schemas.mentors import MentorAdminOut, MentorCreate, MentorUpdate
from mentordesk.services import mentors as mentor_service

# staff-only mentor directory; students get /public/mentors
router = APIRouter(
    prefix="/mentors",
    tags=["mentors"],
    dependencies=[Depends(require_role("admin"))],
)


@router.get("", response_model=list[MentorAdminOut])
async def list_mentors(store: StoreDep):
    return [MentorAdminOut.from_doc(m) for m in await store.list_mentors()]


@router.post("", response_model=MentorAdminOut, status_code=status.HTTP_201_CREATED)
async def create_mentor(body: MentorCreate, store: StoreDep):
    return MentorAdminOut.from_doc(await mentor_service.create_mentor(store, body))


@router.patch("/{mentor_id}", response_model=MentorAdminOut)
async def update_mentor(mentor_id: str, body: MentorUpdate, store: StoreDep):
    return MentorAdminOut.from_doc(await mentor_service.update_mentor(store, mentor_id, body))


@router.delete("/{mentor_id}")
async def delete_mentor(mentor_id: str, store: StoreDep):
    await mentor_service.delete_mentor(store, mentor_id)
    return {"ok": True}
