"""
Unit tests for the answer submission workflow
"""
import pytest

from mentordesk.core.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from mentordesk.repositories.base import new_id
from mentordesk.schemas.questions import QuestionStatusEnum
from mentordesk.services.answers import DEFAULT_MENTOR_NAME, submit_answer
from mentordesk.services.email import SendResult
from mentordesk.services.notifications import Notifier

ANSWER = 'Use a hash map keyed by the running prefix sum.'


class RecordingNotifier(Notifier):
    """Keeps dispatched notifications instead of delivering them."""

    def __init__(self):
        self.dispatched = []

    def dispatch(self, notification):
        self.dispatched.append(notification)


class TestSubmitAnswerValidation:
    """Rejections happen before anything is written"""

    async def test_invalid_question_id(self, store, notifier):
        with pytest.raises(ValidationError, match='Invalid question ID'):
            await submit_answer(store, notifier, 'not-an-id', ANSWER)

    @pytest.mark.parametrize('text', [None, '', '     '])
    async def test_answer_required(self, store, notifier, question, text):
        with pytest.raises(ValidationError, match='Answer text is required'):
            await submit_answer(store, notifier, question.id, text)

    async def test_nine_characters_is_too_short(self, store, notifier, question):
        with pytest.raises(ValidationError, match='at least 10 characters'):
            await submit_answer(store, notifier, question.id, '123456789')

    async def test_ten_characters_is_enough(self, store, notifier, question):
        result = await submit_answer(store, notifier, question.id, '1234567890')
        assert result.status == QuestionStatusEnum.resolved
        await notifier.drain()

    async def test_answer_length_counts_after_trimming(self, store, notifier, question):
        with pytest.raises(ValidationError):
            await submit_answer(store, notifier, question.id, '   short    ')

    async def test_question_not_found(self, store, notifier):
        with pytest.raises(NotFoundError, match='Question not found'):
            await submit_answer(store, notifier, new_id(), ANSWER)

    async def test_fake_phone_blocks_answer(self, store, notifier, make_question):
        question = await make_question(store, student_email=None, student_phone='1234567890')

        with pytest.raises(ValidationError) as exc:
            await submit_answer(store, notifier, question.id, ANSWER)

        assert exc.value.message.startswith('Cannot submit answer: ')
        assert 'sequential, repeated, or test number' in exc.value.message
        stored = await store.find_by_id(question.id)
        assert stored.status == QuestionStatusEnum.new
        assert stored.answer_text is None

    async def test_no_contact_blocks_answer(self, store, notifier, make_question):
        question = await make_question(store, student_email=None, student_phone=None)
        with pytest.raises(ValidationError, match='At least one valid contact method'):
            await submit_answer(store, notifier, question.id, ANSWER)


class TestSubmitAnswer:
    """Successful submissions"""

    async def test_resolves_and_records_answer(self, store, notifier, question, mentor):
        result = await submit_answer(store, notifier, question.id, f'  {ANSWER}  ', mentor.id)

        assert result.status == QuestionStatusEnum.resolved
        assert result.answer_text == ANSWER
        assert result.answered_by_mentor_id == mentor.id
        assert result.answered_at is not None
        assert result.notification.sent is False
        await notifier.drain()

    async def test_response_has_no_private_fields(self, store, notifier, question):
        result = await submit_answer(store, notifier, question.id, ANSWER)
        data = result.model_dump()

        for key in ('student_email', 'student_phone', 'student_name'):
            assert key not in data
        assert 'error' not in data['notification']
        await notifier.drain()

    async def test_mentor_falls_back_to_assigned(self, store, notifier, question, mentor):
        result = await submit_answer(store, notifier, question.id, ANSWER)
        assert result.answered_by_mentor_id == mentor.id
        await notifier.drain()

    async def test_notification_success_is_recorded(self, store, notifier, sender, question, mentor):
        await submit_answer(store, notifier, question.id, ANSWER, mentor.id)
        await notifier.drain()

        stored = await store.find_by_id(question.id)
        assert stored.notification.sent is True
        assert stored.notification.sent_at is not None
        assert stored.notification.error is None

        email = sender.sent[0]
        assert email.to_email == question.student_email
        assert email.mentor_name == mentor.name
        assert email.mentor_subject == mentor.subject
        assert email.answer == ANSWER

    async def test_notification_failure_is_recorded(self, store, notifier, sender, question):
        sender.result = SendResult(False, 'Email sending failed: connection refused')

        result = await submit_answer(store, notifier, question.id, ANSWER)
        await notifier.drain()

        assert result.status == QuestionStatusEnum.resolved
        stored = await store.find_by_id(question.id)
        assert stored.status == QuestionStatusEnum.resolved
        assert stored.notification.sent is False
        assert stored.notification.sent_at is None
        assert stored.notification.error == 'Email sending failed: connection refused'

    async def test_sender_crash_is_recorded(self, store, notifier, sender, question):
        sender.exc = RuntimeError('boom')

        await submit_answer(store, notifier, question.id, ANSWER)
        await notifier.drain()

        stored = await store.find_by_id(question.id)
        assert stored.notification.sent is False
        assert 'boom' in stored.notification.error

    async def test_tracking_write_failure_is_swallowed(self, store, notifier, question, monkeypatch):
        result = await submit_answer(store, notifier, question.id, ANSWER)

        async def broken_update(*args, **kwargs):
            raise PersistenceError('database went away')

        monkeypatch.setattr(store, 'update_by_id', broken_update)
        await notifier.drain()

        assert result.status == QuestionStatusEnum.resolved
        monkeypatch.undo()
        stored = await store.find_by_id(question.id)
        assert stored.status == QuestionStatusEnum.resolved
        assert stored.notification.sent is False

    async def test_phone_only_contact_sends_nothing(self, store, sender, make_question):
        notifier = RecordingNotifier()
        question = await make_question(store, student_email=None, student_phone='8294617350')

        result = await submit_answer(store, notifier, question.id, ANSWER)

        assert result.status == QuestionStatusEnum.resolved
        assert notifier.dispatched == []
        assert sender.sent == []

    async def test_unknown_mentor_uses_default_name(self, store, make_question):
        notifier = RecordingNotifier()
        question = await make_question(store)

        await submit_answer(store, notifier, question.id, ANSWER)

        (notification,) = notifier.dispatched
        assert notification.question_id == question.id
        assert notification.email.mentor_name == DEFAULT_MENTOR_NAME


class TestReanswer:
    """Answering a question that is already Resolved"""

    async def test_overwrites_by_default(self, store, notifier, question):
        await submit_answer(store, notifier, question.id, ANSWER)
        await notifier.drain()

        result = await submit_answer(store, notifier, question.id, 'A better answer, with details.')
        assert result.answer_text == 'A better answer, with details.'
        assert result.notification.sent is False
        await notifier.drain()

    async def test_conflict_when_disabled(self, store, notifier, question):
        await submit_answer(store, notifier, question.id, ANSWER, allow_reanswer=False)
        await notifier.drain()

        with pytest.raises(ConflictError):
            await submit_answer(store, notifier, question.id, 'A second answer here.', allow_reanswer=False)

        stored = await store.find_by_id(question.id)
        assert stored.answer_text == ANSWER
