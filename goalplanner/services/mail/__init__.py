"""Outbound mail providers."""
from goalplanner.services.mail.base import MailMessage, MailRelay, MailResult, MailUnavailable
from goalplanner.services.mail.factory import get_mail_relay

__all__ = ["MailMessage", "MailRelay", "MailResult", "MailUnavailable", "get_mail_relay"]
