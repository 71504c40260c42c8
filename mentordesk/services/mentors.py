from __future__ import annotations

import logging
from typing import Literal

from mentordesk.core.errors import ConflictError, NotFoundError, ValidationError
from mentordesk.repositories.base import QuestionStore
from mentordesk.schemas.mentors import MentorCreate, MentorDoc, MentorUpdate

log = logging.getLogger(__name__)

DEMO_MENTORS: list[MentorCreate] = [
    MentorCreate(name="Dr. Sarah Chen", email="sarah@stanford.edu", subject="Computer Science", university="Stanford University"),
    MentorCreate(name="Prof. Michael Rodriguez", email="michael@mit.edu", subject="Mathematics", university="MIT"),
    MentorCreate(name="Dr. Emily Thompson", email="emily@harvard.edu", subject="Physics", university="Harvard University"),
    MentorCreate(name="Prof. David Kim", email="david@caltech.edu", subject="Chemistry", university="Caltech"),
    MentorCreate(name="Dr. Lisa Anderson", email="lisa@yale.edu", subject="Biology", university="Yale University"),
    MentorCreate(name="Prof. James Wilson", email="james@berkeley.edu", subject="Engineering", university="UC Berkeley"),
]


async def ensure_mentor(
    store: QuestionStore,
    body: MentorCreate,
) -> tuple[MentorDoc, Literal["created", "updated", "unchanged"]]:
    """
    Creates the mentor when the email is unknown; otherwise brings name,
    subject, university and status in line with ``body``.
    """
    existing = await store.find_mentor_by_email(body.email)
    if existing is None:
        return await store.create_mentor(body.model_dump()), "created"

    wanted = body.model_dump(exclude={"email"})
    changes = {k: v for k, v in wanted.items() if getattr(existing, k) != v}
    if not changes:
        return existing, "unchanged"
    updated = await store.update_mentor(existing.id, changes)
    return updated or existing, "updated"


async def seed_demo_mentors(store: QuestionStore) -> int:
    """Seeds the demo mentors into an empty store. Returns how many were created."""
    if await store.list_mentors():
        return 0
    for body in DEMO_MENTORS:
        await store.create_mentor(body.model_dump())
    log.info("demo_mentors_seeded", extra={"count": len(DEMO_MENTORS)})
    return len(DEMO_MENTORS)


# ---------- staff CRUD ----------

def _check_id(store: QuestionStore, mentor_id: str) -> None:
    if not store.is_valid_id(mentor_id):
        raise ValidationError("Invalid mentor ID")


async def create_mentor(store: QuestionStore, body: MentorCreate) -> MentorDoc:
    if await store.find_mentor_by_email(body.email):
        raise ConflictError("A mentor with this email already exists")
    mentor = await store.create_mentor(body.model_dump())
    log.info("mentor_created", extra={"mentor_id": mentor.id, "subject": mentor.subject})
    return mentor


async def update_mentor(store: QuestionStore, mentor_id: str, body: MentorUpdate) -> MentorDoc:
    _check_id(store, mentor_id)
    fields = body.model_dump(exclude_none=True)
    if not fields:
        raise ValidationError("Nothing to update")

    if "email" in fields:
        fields["email"] = fields["email"].strip().lower()
        other = await store.find_mentor_by_email(fields["email"])
        if other and other.id != mentor_id:
            raise ConflictError("A mentor with this email already exists")

    mentor = await store.update_mentor(mentor_id, fields)
    if mentor is None:
        raise NotFoundError("Mentor not found")
    return mentor


async def delete_mentor(store: QuestionStore, mentor_id: str) -> None:
    _check_id(store, mentor_id)
    if not await store.delete_mentor(mentor_id):
        raise NotFoundError("Mentor not found")
    log.info("mentor_deleted", extra={"mentor_id": mentor_id})
