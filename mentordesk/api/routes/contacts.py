from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from mentordesk.services.contacts import (
    ContactValidation,
    StudentContactValidation,
    validate_contact,
    validate_student_contact,
)

router = APIRouter(prefix="/contacts", tags=["contacts"])


class ContactIn(BaseModel):
    contact: str = Field(default="", max_length=255)


class StudentContactIn(BaseModel):
    student_email: Optional[str] = Field(default=None, max_length=255)
    student_phone: Optional[str] = Field(default=None, max_length=32)


@router.post("/validate", response_model=ContactValidation)
async def validate(body: ContactIn):
    """Live check for the question form: one free-form email-or-phone field."""
    return validate_contact(body.contact)


@router.post("/validate-student", response_model=StudentContactValidation)
async def validate_student(body: StudentContactIn):
    return validate_student_contact(body.student_email, body.student_phone)
