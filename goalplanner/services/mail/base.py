"""Mail relay interface."""
from __future__ import annotations

from dataclasses import dataclass

from goalplanner.core.errors import MailUnavailable

__all__ = ["MailMessage", "MailRelay", "MailResult", "MailUnavailable"]


@dataclass(frozen=True)
class MailMessage:
    sender: str
    to: str
    subject: str
    body: str


@dataclass
class MailResult:
    status: str
    reason: str


class MailRelay:
    """Base interface for outbound mail providers.

    Implementations raise ``MailUnavailable`` when the message could not be
    handed to the relay.
    """

    name = "base"

    def send(self, message: MailMessage) -> MailResult:
        raise NotImplementedError
