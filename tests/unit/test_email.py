"""
Unit tests for the answer email sender
"""
import logging

import aiosmtplib
import pytest

from mentordesk.core.config import Settings
from mentordesk.services.email import (
    AnswerEmail,
    EmailSender,
    answer_email_subject,
    render_answer_email,
)


def _email(**overrides) -> AnswerEmail:
    data = dict(
        to_email='ana@mail.com',
        student_name='Ana',
        mentor_name='Dr. Sarah Chen',
        subject='Algorithms',
        question='How do I find a subarray\nwith a given sum?',
        answer='Keep a running prefix sum in a hash map.',
        mentor_subject='Computer Science',
    )
    data.update(overrides)
    return AnswerEmail(**data)


def _sender(**overrides) -> EmailSender:
    return EmailSender(Settings(storage_backend='memory', **overrides))


class TestRendering:
    """Tests for the HTML template"""

    def test_subject_line(self):
        assert answer_email_subject(_email()) == 'Answer from Dr. Sarah Chen to your "Algorithms" question'

    def test_user_text_is_escaped(self):
        html = render_answer_email(_email(answer='<script>alert(1)</script>'))
        assert '<script>' not in html
        assert '&lt;script&gt;' in html

    def test_newlines_become_breaks(self):
        html = render_answer_email(_email())
        assert 'How do I find a subarray<br>with a given sum?' in html


class TestEmailSender:
    """Tests for provider dispatch; send never raises"""

    async def test_console_provider(self):
        result = await _sender(email_provider='console').send(_email())
        assert result.success
        assert 'development mode' in result.message

    @pytest.mark.parametrize('field', ['to_email', 'student_name', 'mentor_name', 'subject', 'answer'])
    async def test_missing_required_data(self, field):
        result = await _sender().send(_email(**{field: ''}))
        assert not result.success
        assert result.message == 'Missing required email data'

    async def test_smtp_without_host(self):
        result = await _sender(email_provider='smtp', smtp_host=None).send(_email())
        assert not result.success
        assert 'SMTP_HOST is not configured' in result.message

    async def test_smtp_failure_is_reported(self, monkeypatch):
        async def refuse(*args, **kwargs):
            raise aiosmtplib.SMTPConnectError('connection refused')

        monkeypatch.setattr(aiosmtplib, 'send', refuse)
        result = await _sender(email_provider='smtp', smtp_host='smtp.test').send(_email())

        assert not result.success
        assert result.message.startswith('Email sending failed: ')

    async def test_smtp_success(self, monkeypatch):
        calls = []

        async def accept(message, **kwargs):
            calls.append((message, kwargs))

        monkeypatch.setattr(aiosmtplib, 'send', accept)
        result = await _sender(email_provider='smtp', smtp_host='smtp.test', smtp_port=2525).send(_email())

        assert result.success
        message, kwargs = calls[0]
        assert message['To'] == 'ana@mail.com'
        assert kwargs['hostname'] == 'smtp.test'
        assert kwargs['port'] == 2525

    async def test_sendgrid_without_key(self):
        result = await _sender(email_provider='sendgrid').send(_email())
        assert not result.success
        assert 'SENDGRID_API_KEY' in result.message


class TestEmailLogging:
    async def test_console_log_omits_recipient(self, caplog):
        caplog.set_level(logging.INFO, logger='mentordesk.services.email')

        await _sender(email_provider='console').send(_email(to_email='private.student@mail.com'))

        records = [r for r in caplog.records if r.name == 'mentordesk.services.email']
        assert records
        for record in records:
            assert 'private.student@mail.com' not in record.getMessage()
            assert 'private.student@mail.com' not in str(vars(record))
