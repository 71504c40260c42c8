from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MentorStatusEnum(str, enum.Enum):
    available = "Available"
    unavailable = "Unavailable"
    on_leave = "On Leave"


class MentorDoc(BaseModel):
    id: str
    name: str
    email: str
    subject: str
    university: str = "Not specified"
    status: MentorStatusEnum = MentorStatusEnum.available
    created_at: datetime
    updated_at: datetime

    @property
    def initials(self) -> str:
        return "".join(w[0] for w in self.name.split() if w).upper()


class MentorCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    subject: str = Field(min_length=1, max_length=255)
    university: str = "Not specified"
    status: MentorStatusEnum = MentorStatusEnum.available


class MentorOut(BaseModel):
    id: str
    name: str
    initials: str
    subject: str
    university: str
    status: MentorStatusEnum

    @classmethod
    def from_doc(cls, m: MentorDoc) -> "MentorOut":
        return cls(
            id=m.id,
            name=m.name,
            initials=m.initials,
            subject=m.subject,
            university=m.university,
            status=m.status,
        )


class MentorUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    subject: Optional[str] = Field(default=None, min_length=1, max_length=255)
    university: Optional[str] = Field(default=None, max_length=255)
    status: Optional[MentorStatusEnum] = None


class MentorAdminOut(MentorOut):
    """Staff view: adds the mentor's email and timestamps."""

    email: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_doc(cls, m: MentorDoc) -> "MentorAdminOut":
        return cls(
            **MentorOut.from_doc(m).model_dump(),
            email=m.email,
            created_at=m.created_at,
            updated_at=m.updated_at,
        )
