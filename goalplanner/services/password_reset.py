"""Forgot-password / reset-password flow."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from goalplanner.core.config import settings
from goalplanner.core.errors import NotFound, ValidationFailure
from goalplanner.core.security import hash_password
from goalplanner.observability.metrics import log_metric
from goalplanner.services.mail import MailMessage, MailRelay, MailUnavailable
from goalplanner.services.otp_store import OtpCheck, OtpStore
from goalplanner.services.user_service import find_user_by_email, normalize_email, update_password

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Password Reset OTP - Goal Planner"

_CHECK_ERRORS = {
    OtpCheck.MISSING: "Invalid or expired OTP request",
    OtpCheck.EXPIRED: "OTP has expired",
    OtpCheck.MISMATCH: "Invalid OTP",
}


def request_password_reset(db: Session, email: str, otp_store: OtpStore, mail_relay: MailRelay) -> None:
    """Email a fresh one-time code to a registered user."""
    normalized = normalize_email(email)
    user = find_user_by_email(db, normalized)
    if user is None:
        raise NotFound("User not found")

    code = otp_store.issue(normalized)
    ttl_minutes = int(otp_store.ttl.total_seconds() // 60)
    message = MailMessage(
        sender=settings.mail_from,
        to=normalized,
        subject=RESET_SUBJECT,
        body=f"Your OTP for password reset is: {code}. It expires in {ttl_minutes} minutes.",
    )
    try:
        result = mail_relay.send(message)
    except MailUnavailable:
        otp_store.discard(normalized)
        log_metric("password_reset.mail.failed", 1, metadata={"provider": mail_relay.name})
        raise

    log_metric("password_reset.requested", 1, metadata={"provider": mail_relay.name})
    logger.info("Password reset code issued for user %s (mail status=%s)", user.id, result.status)


def reset_password(db: Session, email: str, code: str, new_password: str, otp_store: OtpStore) -> None:
    """Redeem a one-time code; the stored password changes only on success."""
    normalized = normalize_email(email)
    check = otp_store.verify(normalized, code.strip())
    if check is not OtpCheck.OK:
        log_metric("password_reset.rejected", 1, metadata={"reason": check.value})
        raise ValidationFailure(_CHECK_ERRORS[check])

    if not update_password(db, normalized, hash_password(new_password)):
        otp_store.discard(normalized)
        raise NotFound("User not found")

    otp_store.discard(normalized)
    log_metric("password_reset.completed", 1)
