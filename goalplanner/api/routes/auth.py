"""Registration, login and password-reset routes."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from goalplanner.api.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
)
from goalplanner.core.errors import AuthFailure, NotFound
from goalplanner.core.security import create_access_token, hash_password, verify_password
from goalplanner.db.deps import get_db
from goalplanner.observability.metrics import log_metric
from goalplanner.observability.tracing import trace
from goalplanner.services.mail import MailRelay, get_mail_relay
from goalplanner.services.otp_store import OtpStore, get_otp_store
from goalplanner.services.password_reset import request_password_reset, reset_password
from goalplanner.services.user_service import create_user, find_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, http_request: Request, db: Session = Depends(get_db)) -> MessageResponse:
    """Create an account; duplicate emails are rejected."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("auth.register", metadata={"route": "/api/register"}, request_id=request_id):
        create_user(db, name=payload.name, email=payload.email, password_hash=hash_password(payload.password))
    log_metric("auth.register.success", 1)
    return MessageResponse(message="User registered")


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, http_request: Request, db: Session = Depends(get_db)) -> LoginResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("auth.login", metadata={"route": "/api/login"}, request_id=request_id):
        user = find_user_by_email(db, payload.email)
        if user is None:
            log_metric("auth.login.failed", 1, metadata={"reason": "unknown_user"})
            raise NotFound("User not found")
        if not verify_password(payload.password, user.password_hash):
            log_metric("auth.login.failed", 1, metadata={"reason": "bad_password"})
            raise AuthFailure("Invalid password")
        token = create_access_token(user.id)

    log_metric("auth.login.success", 1)
    logger.info("User %s logged in", user.id)
    return LoginResponse(token=token, name=user.name)


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    otp_store: OtpStore = Depends(get_otp_store),
    mail_relay: MailRelay = Depends(get_mail_relay),
) -> MessageResponse:
    """Email a one-time reset code."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("auth.forgot_password", metadata={"provider": mail_relay.name}, request_id=request_id):
        request_password_reset(db, payload.email, otp_store, mail_relay)
    return MessageResponse(message="OTP sent to your email")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password_endpoint(
    payload: ResetPasswordRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    otp_store: OtpStore = Depends(get_otp_store),
) -> MessageResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("auth.reset_password", metadata={"route": "/api/reset-password"}, request_id=request_id):
        reset_password(db, payload.email, payload.otp, payload.new_password, otp_store)
    return MessageResponse(message="Password reset successfully")
