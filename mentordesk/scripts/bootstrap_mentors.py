from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

from mentordesk.core.config import settings
from mentordesk.core.logging import setup_logging
from mentordesk.repositories.factory import build_store
from mentordesk.schemas.mentors import MentorCreate
from mentordesk.services.mentors import DEMO_MENTORS, ensure_mentor


def parse_mentor(raw: str) -> MentorCreate:
    """'Name,email,subject[,university]' -> MentorCreate"""
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) not in (3, 4) or not all(parts):
        raise argparse.ArgumentTypeError(
            f"expected 'Name,email,subject[,university]', got {raw!r}"
        )
    name, email, subject = parts[:3]
    university = parts[3] if len(parts) == 4 else "Not specified"
    return MentorCreate(name=name, email=email, subject=subject, university=university)


async def _run(mentors: Sequence[MentorCreate]) -> None:
    store = build_store(settings)
    try:
        for body in mentors:
            mentor, action = await ensure_mentor(store, body)
            print(f"[bootstrap] {action}: {mentor.email} ({mentor.subject}) token=mentor-{mentor.id}")
    finally:
        await store.close()
    print("[bootstrap] done")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create or update mentors")
    p.add_argument(
        "-m", "--mentor",
        dest="mentors",
        action="append",
        type=parse_mentor,
        default=[],
        help="Mentor as 'Name,email,subject[,university]' (repeatable)",
    )
    p.add_argument("--demo", dest="demo", action="store_true", help="Also create the demo mentors")
    p.add_argument("--no-demo", dest="demo", action="store_false", help="Skip the demo mentors")
    p.set_defaults(demo=False)
    return p.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    mentors = list(args.mentors) + (list(DEMO_MENTORS) if args.demo else [])
    if not mentors:
        raise SystemExit("Nothing to do: pass --mentor 'Name,email,subject' or --demo")
    if settings.storage_backend == "memory":
        raise SystemExit("storage_backend=memory: mentors would vanish with this process")

    setup_logging(settings.log_level)
    asyncio.run(_run(mentors))


if __name__ == "__main__":
    main()
