"""
Contact classifier & validator.

One canonical rule set for student contacts:
  - anything containing "@" is an email candidate, and only an email candidate;
  - everything else is a phone candidate: non-digits are stripped and exactly
    10 digits must remain, which then must pass the fake-number heuristic.

Malformed input never raises: every check returns a structured result with a
reason that can be shown to the student as is. Only non-string input
(a programming error) raises TypeError.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

PHONE_LENGTH = 10

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NON_DIGIT_RE = re.compile(r"\D")
_REPEATED_PAIR_RE = re.compile(r"^(\d{2})\1{4}$")
# 3 digits repeated 4 times is 12 characters, so this never matches a 10-digit
# string. Kept as is until product decides which numbers it should reject.
_REPEATED_TRIPLE_RE = re.compile(r"^(\d{3})\1{3}$")

COMMON_TEST_NUMBERS = frozenset({
    "1234567890",
    "0123456789",
    "9999999999",
    "0000000000",
    "5555555555",
    "4444444444",
    "1111111111",
    "2222222222",
    "3333333333",
    "6666666666",
    "7777777777",
    "8888888888",
})

MISSING_CONTACT = "Contact information is required"
INVALID_EMAIL = "Invalid email format."
NO_VALID_CONTACT = (
    "At least one valid contact method (email or phone) is required "
    "to send the answer to the student."
)


class ContactKind(str, enum.Enum):
    email = "email"
    phone = "phone"
    invalid = "invalid"


@dataclass(frozen=True)
class ContactCheck:
    kind: ContactKind
    value: Optional[str] = None
    reason: Optional[str] = None
    # which rule was applied; stays set when kind is invalid
    candidate: Optional[ContactKind] = None

    @property
    def is_valid(self) -> bool:
        return self.kind is not ContactKind.invalid


class ContactValidation(BaseModel):
    is_valid: bool
    type: ContactKind
    value: Optional[str] = None
    error: Optional[str] = None


class StudentContactValidation(BaseModel):
    has_valid_contact: bool
    normalized_email: Optional[str] = None
    normalized_phone: Optional[str] = None
    error: Optional[str] = None


# ---------- fake-number heuristic ----------

def _is_cyclic_sequence(digits: str, step: int) -> bool:
    return all(
        int(nxt) == (int(cur) + step) % 10
        for cur, nxt in zip(digits, digits[1:])
    )


_FAKE_PATTERNS = (
    ("all digits are the same", lambda d: len(set(d)) == 1),
    ("ascending sequence", lambda d: _is_cyclic_sequence(d, 1)),
    ("descending sequence", lambda d: _is_cyclic_sequence(d, -1)),
    ("repeating pair of digits", lambda d: bool(_REPEATED_PAIR_RE.match(d))),
    ("repeating group of three digits", lambda d: bool(_REPEATED_TRIPLE_RE.match(d))),
    ("common test number", lambda d: d in COMMON_TEST_NUMBERS),
)


def fake_number_pattern(digits: str) -> Optional[str]:
    """Description of the first fake pattern ``digits`` matches, or None."""
    for description, matches in _FAKE_PATTERNS:
        if matches(digits):
            return description
    return None


def is_fake_number(digits: str) -> bool:
    return fake_number_pattern(digits) is not None


# ---------- single rules ----------

def _fake_reason(pattern: str) -> str:
    return (
        f"Phone number appears to be fake or invalid ({pattern}): "
        "sequential, repeated, or test numbers are not accepted."
    )


def check_email(raw: str) -> ContactCheck:
    candidate = raw.strip()
    if not _EMAIL_RE.match(candidate):
        return ContactCheck(ContactKind.invalid, reason=INVALID_EMAIL, candidate=ContactKind.email)
    return ContactCheck(ContactKind.email, value=candidate.lower(), candidate=ContactKind.email)


def check_phone(raw: str) -> ContactCheck:
    digits = _NON_DIGIT_RE.sub("", raw)
    if len(digits) != PHONE_LENGTH:
        return ContactCheck(
            ContactKind.invalid,
            reason=f"Phone number must be exactly {PHONE_LENGTH} digits (you entered {len(digits)}).",
            candidate=ContactKind.phone,
        )
    pattern = fake_number_pattern(digits)
    if pattern:
        return ContactCheck(ContactKind.invalid, reason=_fake_reason(pattern), candidate=ContactKind.phone)
    return ContactCheck(ContactKind.phone, value=digits, candidate=ContactKind.phone)


def _require_str(value, name: str) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be str, got {type(value).__name__}")


# ---------- public API ----------

def classify_and_validate(raw: str) -> ContactCheck:
    """Classify a free-form contact string as email or phone and validate it."""
    _require_str(raw, "contact")
    if not raw.strip():
        return ContactCheck(ContactKind.invalid, reason=MISSING_CONTACT)
    if "@" in raw:
        return check_email(raw)
    return check_phone(raw)


def validate_contact(raw: str) -> ContactValidation:
    check = classify_and_validate(raw)
    return ContactValidation(
        is_valid=check.is_valid,
        type=check.kind if check.is_valid else (check.candidate or ContactKind.invalid),
        value=check.value,
        error=check.reason,
    )


def validate_student_contact(
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> StudentContactValidation:
    """
    Dual-field variant: every non-empty field is checked with its own rule.

    Any supplied field that fails rejects the whole contact with that field's
    reason (email is reported first when both fail), even if the other passes.
    """
    if email is not None:
        _require_str(email, "email")
    if phone is not None:
        _require_str(phone, "phone")

    results: list[ContactCheck] = []
    if email and email.strip():
        results.append(check_email(email))
    if phone and phone.strip():
        results.append(check_phone(phone))

    for check in results:
        if not check.is_valid:
            return StudentContactValidation(has_valid_contact=False, error=check.reason)
    if not results:
        return StudentContactValidation(has_valid_contact=False, error=NO_VALID_CONTACT)

    out = StudentContactValidation(has_valid_contact=True)
    for check in results:
        if check.kind is ContactKind.email:
            out.normalized_email = check.value
        else:
            out.normalized_phone = check.value
    return out
