"""
MentorDesk - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient

# Set testing environment before settings are loaded
os.environ['STORAGE_BACKEND'] = 'memory'
os.environ['NOTIFICATION_BACKEND'] = 'background'
os.environ['EMAIL_PROVIDER'] = 'console'
os.environ['ADMIN_TOKEN'] = 'test-admin-token'
os.environ['ALLOW_REANSWER'] = 'true'

from mentordesk.api.deps import get_notifier, get_store
from mentordesk.main import app
from mentordesk.repositories.memory import MemoryQuestionStore
from mentordesk.repositories.sql import SqlQuestionStore
from mentordesk.schemas.mentors import MentorDoc
from mentordesk.schemas.questions import NotificationStatus, QuestionDoc, QuestionStatusEnum
from mentordesk.services.email import AnswerEmail, SendResult
from mentordesk.services.notifications import BackgroundNotifier

fake = Faker()

ADMIN_TOKEN = 'test-admin-token'


class FakeSender:
    """Records every email and answers with a preset result."""

    def __init__(self, result: SendResult | None = None, exc: Exception | None = None):
        self.result = result or SendResult(True, 'Email logged (development mode)')
        self.exc = exc
        self.sent: list[AnswerEmail] = []

    async def send(self, email: AnswerEmail) -> SendResult:
        self.sent.append(email)
        if self.exc is not None:
            raise self.exc
        return self.result


@pytest.fixture
def store() -> MemoryQuestionStore:
    """Fresh in-memory store for each test"""
    return MemoryQuestionStore()


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def notifier(store: MemoryQuestionStore, sender: FakeSender) -> BackgroundNotifier:
    return BackgroundNotifier(store, sender)


@pytest.fixture
async def sql_store(tmp_path) -> AsyncGenerator[SqlQuestionStore, None]:
    """SQL store on a throwaway SQLite file"""
    store = SqlQuestionStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await store.create_all()
    yield store
    await store.close()


@pytest.fixture
async def mentor(store: MemoryQuestionStore) -> MentorDoc:
    """Create a test mentor"""
    return await store.create_mentor({
        'name': 'Dr. Sarah Chen',
        'email': fake.unique.email(),
        'subject': 'Computer Science',
        'university': 'Stanford University',
    })


async def _make_question(store, **overrides) -> QuestionDoc:
    fields = {
        'student_name': fake.name(),
        'student_email': fake.unique.email().lower(),
        'student_phone': None,
        'subject': 'Computer Science',
        'question': fake.sentence(nb_words=12),
        'status': QuestionStatusEnum.new,
        'assigned_mentor_id': None,
        'notification': NotificationStatus(),
    }
    fields.update(overrides)
    return await store.create(fields)


@pytest.fixture
def make_question():
    """Insert a question straight into storage, bypassing intake validation"""
    return _make_question


@pytest.fixture
async def question(store: MemoryQuestionStore, mentor: MentorDoc) -> QuestionDoc:
    """Assigned question with a valid email contact"""
    return await _make_question(
        store,
        status=QuestionStatusEnum.assigned,
        assigned_mentor_id=mentor.id,
    )


@pytest.fixture
async def client(store: MemoryQuestionStore, notifier: BackgroundNotifier) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with storage and notifier overrides"""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    await notifier.drain()
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return {'Authorization': f'Bearer {ADMIN_TOKEN}'}


@pytest.fixture
def mentor_headers(mentor: MentorDoc) -> dict:
    return {'Authorization': f'Bearer mentor-{mentor.id}'}
