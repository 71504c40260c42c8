"""
Unit tests for the SQL store (SQLite via aiosqlite)
"""
from datetime import datetime, timedelta, timezone

import pytest

from mentordesk.repositories.base import new_id
from mentordesk.schemas.mentors import MentorStatusEnum
from mentordesk.schemas.questions import NotificationStatus, QuestionStatusEnum


async def _mentor(store, email='Chen@Stanford.edu'):
    return await store.create_mentor({
        'name': 'Dr. Sarah Chen',
        'email': email,
        'subject': 'Computer Science',
        'university': 'Stanford University',
    })


class TestSqlMentors:
    """Mentor persistence"""

    async def test_create_and_find(self, sql_store):
        mentor = await _mentor(sql_store)

        assert sql_store.is_valid_id(mentor.id)
        assert mentor.email == 'chen@stanford.edu'
        assert mentor.status == MentorStatusEnum.available
        assert (await sql_store.find_mentor(mentor.id)).name == 'Dr. Sarah Chen'
        assert (await sql_store.find_mentor_by_email(' CHEN@stanford.edu ')).id == mentor.id

    async def test_update_mentor(self, sql_store):
        mentor = await _mentor(sql_store)

        updated = await sql_store.update_mentor(mentor.id, {'status': MentorStatusEnum.on_leave})

        assert updated.status == MentorStatusEnum.on_leave
        assert await sql_store.update_mentor(new_id(), {'name': 'x'}) is None


class TestSqlQuestions:
    """Question persistence"""

    async def test_create_round_trips_notification(self, sql_store, make_question):
        question = await make_question(sql_store, student_email='ana@mail.com')

        stored = await sql_store.find_by_id(question.id)
        assert stored.student_email == 'ana@mail.com'
        assert stored.status == QuestionStatusEnum.new
        assert stored.notification == NotificationStatus()
        assert stored.created_at is not None

    async def test_update_flattens_notification(self, sql_store, make_question):
        question = await make_question(sql_store)

        updated = await sql_store.update_by_id(
            question.id,
            {'notification': NotificationStatus(sent=False, error='SMTP_HOST is not configured')},
        )

        assert updated.notification.sent is False
        assert updated.notification.error == 'SMTP_HOST is not configured'

    async def test_update_missing_question(self, sql_store):
        assert await sql_store.update_by_id(new_id(), {'answer_text': 'x' * 20}) is None

    async def test_unless_status_guard(self, sql_store, make_question):
        question = await make_question(sql_store, status=QuestionStatusEnum.resolved)

        blocked = await sql_store.update_by_id(
            question.id,
            {'status': QuestionStatusEnum.in_progress},
            unless_status=QuestionStatusEnum.resolved,
        )

        assert blocked is None
        assert (await sql_store.find_by_id(question.id)).status == QuestionStatusEnum.resolved

    async def test_list_filters(self, sql_store, make_question):
        mentor = await _mentor(sql_store)
        await make_question(sql_store, subject='Physics')
        mine = await make_question(sql_store, subject='Computer Science', assigned_mentor_id=mentor.id)

        physics = await sql_store.list_questions(subject='phys')
        assigned = await sql_store.list_questions(assigned_mentor_id=mentor.id)

        assert [q.subject for q in physics] == ['Physics']
        assert [q.id for q in assigned] == [mine.id]

    async def test_list_resolved_most_recent_first(self, sql_store, make_question):
        now = datetime.now(timezone.utc)
        older = await make_question(sql_store, status=QuestionStatusEnum.resolved, answered_at=now - timedelta(days=1))
        newer = await make_question(sql_store, status=QuestionStatusEnum.resolved, answered_at=now)
        await make_question(sql_store)

        rows = await sql_store.list_resolved(limit=20)

        assert [q.id for q in rows] == [newer.id, older.id]

    @pytest.mark.parametrize('limit', [1, 2])
    async def test_list_resolved_limit(self, sql_store, make_question, limit):
        for _ in range(3):
            await make_question(sql_store, status=QuestionStatusEnum.resolved, answered_at=datetime.now(timezone.utc))
        assert len(await sql_store.list_resolved(limit=limit)) == limit

    @pytest.mark.parametrize('needle', ['_', '%', 'Phys_cs', 'Ph%'])
    async def test_subject_search_is_literal(self, sql_store, make_question, needle):
        """LIKE wildcards in the search text match only themselves"""
        await make_question(sql_store, subject='Physics')
        assert await sql_store.list_questions(subject=needle) == []

    async def test_subject_search_matches_literal_underscore(self, sql_store, make_question):
        wanted = await make_question(sql_store, subject='CS_101')
        await make_question(sql_store, subject='CS2101')

        rows = await sql_store.list_questions(subject='s_1')

        assert [q.id for q in rows] == [wanted.id]


class TestSqlDeleteMentor:
    async def test_delete_detaches_questions(self, sql_store, make_question):
        mentor = await _mentor(sql_store)
        question = await make_question(
            sql_store,
            status=QuestionStatusEnum.resolved,
            assigned_mentor_id=mentor.id,
            answered_by_mentor_id=mentor.id,
        )

        assert await sql_store.delete_mentor(mentor.id) is True

        assert await sql_store.find_mentor(mentor.id) is None
        stored = await sql_store.find_by_id(question.id)
        assert stored.assigned_mentor_id is None
        assert stored.answered_by_mentor_id is None
        assert stored.status == QuestionStatusEnum.resolved

    async def test_delete_missing(self, sql_store):
        assert await sql_store.delete_mentor(new_id()) is False
