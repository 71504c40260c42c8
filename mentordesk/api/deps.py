from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Annotated, Literal, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mentordesk.core.config import settings
from mentordesk.repositories.base import QuestionStore
from mentordesk.schemas.mentors import MentorDoc
from mentordesk.services.notifications import Notifier

MENTOR_TOKEN_PREFIX = "mentor-"

Role = Literal["admin", "mentor"]

# Static bearer stubs, not real sessions:
#   settings.admin_token -> staff
#   "mentor-<id>"        -> that mentor
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    role: Role
    mentor: Optional[MentorDoc] = None

    @property
    def mentor_id(self) -> Optional[str]:
        return self.mentor.id if self.mentor else None


def get_store(request: Request) -> QuestionStore:
    return request.app.state.store


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


StoreDep = Annotated[QuestionStore, Depends(get_store)]
NotifierDep = Annotated[Notifier, Depends(get_notifier)]


async def get_current_actor(
    store: StoreDep,
    creds: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Actor:
    """
    Resolves the bearer token to staff or an existing mentor.
    """
    if creds is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    token = creds.credentials
    if secrets.compare_digest(token.encode(), settings.admin_token.encode()):
        return Actor(role="admin")

    if token.startswith(MENTOR_TOKEN_PREFIX):
        mentor_id = token[len(MENTOR_TOKEN_PREFIX):]
        mentor = await store.find_mentor(mentor_id) if store.is_valid_id(mentor_id) else None
        if mentor:
            return Actor(role="mentor", mentor=mentor)

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")


ActorDep = Annotated[Actor, Depends(get_current_actor)]


def require_role(*allowed: Role):
    """
    Lets through only actors whose role is in ``allowed``.
    Example: @router.get(..., dependencies=[Depends(require_role("admin"))])
    """
    allowed_set = set(allowed)

    async def _guard(current: ActorDep) -> Actor:
        if current.role not in allowed_set:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return current

    return _guard
