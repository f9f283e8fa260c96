from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from goalplanner.core.config import settings
from goalplanner.services.mail import MailMessage, MailUnavailable
from goalplanner.services.mail import factory as mail_factory
from goalplanner.services.mail.noop import NoopMailRelay
from goalplanner.services.mail.resend_provider import ResendMailRelay

MESSAGE = MailMessage(
    sender="no-reply@goalplanner.local",
    to="asha@example.com",
    subject="Password Reset OTP - Goal Planner",
    body="Your OTP for password reset is: 123456. It expires in 10 minutes.",
)


def test_resend_relay_sends_plain_text_message() -> None:
    with patch("goalplanner.services.mail.resend_provider.resend") as mock_resend:
        mock_resend.Emails.send = MagicMock(return_value={"id": "email_id"})
        relay = ResendMailRelay(api_key="re_test")

        result = relay.send(MESSAGE)

        assert mock_resend.api_key == "re_test"
        assert result.status == "sent"
        assert "email_id" in result.reason
        mock_resend.Emails.send.assert_called_once_with(
            {
                "from": "no-reply@goalplanner.local",
                "to": ["asha@example.com"],
                "subject": "Password Reset OTP - Goal Planner",
                "text": MESSAGE.body,
            }
        )


def test_resend_failure_raises_mail_unavailable() -> None:
    with patch("goalplanner.services.mail.resend_provider.resend") as mock_resend:
        mock_resend.Emails.send = MagicMock(side_effect=RuntimeError("relay went away"))
        relay = ResendMailRelay(api_key="re_test")

        with pytest.raises(MailUnavailable) as excinfo:
            relay.send(MESSAGE)

    assert excinfo.value.status_code == 503
    assert excinfo.value.message == "Failed to send OTP"


def test_noop_relay_accepts_message() -> None:
    assert NoopMailRelay().send(MESSAGE).status == "noop"


def test_factory_picks_provider(monkeypatch) -> None:
    mail_factory.get_mail_relay.cache_clear()
    monkeypatch.setattr(settings, "mail_provider", "resend")
    monkeypatch.setattr(settings, "resend_api_key", "re_test")
    try:
        with patch("goalplanner.services.mail.resend_provider.resend"):
            assert isinstance(mail_factory.get_mail_relay(), ResendMailRelay)
        mail_factory.get_mail_relay.cache_clear()

        monkeypatch.setattr(settings, "resend_api_key", None)
        assert isinstance(mail_factory.get_mail_relay(), NoopMailRelay)
        mail_factory.get_mail_relay.cache_clear()

        monkeypatch.setattr(settings, "mail_provider", "carrier-pigeon")
        assert isinstance(mail_factory.get_mail_relay(), NoopMailRelay)
    finally:
        mail_factory.get_mail_relay.cache_clear()
