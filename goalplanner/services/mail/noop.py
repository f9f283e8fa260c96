"""No-op mail provider (logs only)."""
from __future__ import annotations

import logging

from goalplanner.services.mail.base import MailMessage, MailRelay, MailResult

logger = logging.getLogger(__name__)


class NoopMailRelay(MailRelay):
    name = "noop"

    def send(self, message: MailMessage) -> MailResult:
        logger.info("Mail queued (noop) to=%s subject=%r", message.to, message.subject)
        return MailResult(status="noop", reason="mail provider is noop")
