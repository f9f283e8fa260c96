"""Mail relay factory."""
from __future__ import annotations

import logging
from functools import lru_cache

from goalplanner.core.config import settings
from goalplanner.services.mail.base import MailRelay
from goalplanner.services.mail.noop import NoopMailRelay
from goalplanner.services.mail.resend_provider import ResendMailRelay

logger = logging.getLogger(__name__)


@lru_cache
def get_mail_relay() -> MailRelay:
    provider = settings.mail_provider.lower()
    if provider == "resend":
        if settings.resend_api_key:
            return ResendMailRelay(api_key=settings.resend_api_key)
        logger.warning("MAIL_PROVIDER is resend but RESEND_API_KEY is missing; falling back to noop")
        return NoopMailRelay()
    if provider != "noop":
        logger.warning("Unknown MAIL_PROVIDER %r; falling back to noop", provider)
    return NoopMailRelay()
