"""Resend transactional mail provider."""
from __future__ import annotations

import logging

import resend

from goalplanner.services.mail.base import MailMessage, MailRelay, MailResult, MailUnavailable

logger = logging.getLogger(__name__)


class ResendMailRelay(MailRelay):
    name = "resend"

    def __init__(self, *, api_key: str) -> None:
        resend.api_key = api_key

    def send(self, message: MailMessage) -> MailResult:
        params: resend.Emails.SendParams = {
            "from": message.sender,
            "to": [message.to],
            "subject": message.subject,
            "text": message.body,
        }
        try:
            result = resend.Emails.send(params)
        except Exception as exc:
            logger.error("Resend delivery to %s failed: %s", message.to, exc)
            raise MailUnavailable("Failed to send OTP") from exc

        email_id = result.get("id", "") if isinstance(result, dict) else getattr(result, "id", "")
        logger.info("Mail sent via resend to=%s id=%s", message.to, email_id)
        return MailResult(status="sent", reason=f"resend id {email_id}")
