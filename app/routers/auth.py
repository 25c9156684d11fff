import logging
import time
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.core.auth import (
    clear_session_cookie,
    get_client_ip,
    get_current_user_optional,
    set_session_cookie,
)
from app.core.config import settings
from app.core.db import get_db
from app.core.ratelimit import RateLimiter, get_rate_limiter
from app.core.security import (
    INPUT_LIMITS,
    check_length,
    create_mfa_pending_token,
    dummy_verify,
    is_valid_email,
    validate_password,
    verify_approval_token,
    verify_password,
)
from app.models.user import User
from app.schemas.auth import (
    EmailIn,
    LoginIn,
    LoginOut,
    MagicLinkLoginOut,
    RegisterIn,
    RegisterOut,
    ResetPasswordIn,
    ResetPasswordOut,
    TokenIn,
    UserEnvelope,
    UserOut,
    VerifyEmailOut,
)
from app.schemas.base import MessageOut, SuccessOut
from app.services import auth as auth_service
from app.services import mailer
from app.services.recaptcha import verify_recaptcha
from app.utils.html_page import render_status_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

GENERIC_REGISTER_ERROR = "Unable to register with the provided information"
GENERIC_LOGIN_ERROR = "Invalid email or password"
NOT_VERIFIED_ERROR = "Please verify your email before logging in. Check your inbox for the verification link."
NOT_APPROVED_ERROR = "Your account is pending admin approval. You will receive an email once approved."
FORGOT_MESSAGE = "If an account exists with this email, you will receive a password reset link."
MAGIC_LINK_MESSAGE = "If an account exists with this email, you'll receive a login link shortly."


def _pad_response_time(started: float) -> None:
    # 기존/신규 계정의 응답 시간을 맞춤 (계정 존재 여부 노출 방지)
    remaining = settings.REGISTER_MIN_DURATION_SECONDS - (time.monotonic() - started)
    if remaining > 0:
        time.sleep(remaining)


def _require_active(user: User) -> None:
    if not user.email_verified:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_VERIFIED_ERROR)
    if not user.approved:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_APPROVED_ERROR)


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterIn,
    request: Request,
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    limiter.hit("email", get_client_ip(request))

    email = payload.email.lower()
    if not is_valid_email(email):
        raise HTTPException(status_code=400, detail="Invalid email format")
    check_length(payload.name, "name", "Name")
    pw_error = validate_password(payload.password)
    if pw_error:
        raise HTTPException(status_code=400, detail=pw_error)

    if payload.recaptcha_token and not verify_recaptcha(payload.recaptcha_token):
        raise HTTPException(status_code=400, detail="reCAPTCHA verification failed. Please try again.")

    started = time.monotonic()
    if auth_service.find_user_by_email(db, email):
        _pad_response_time(started)
        raise HTTPException(status_code=400, detail=GENERIC_REGISTER_ERROR)

    user = auth_service.create_user(db, email, payload.password, payload.name)
    token = auth_service.create_email_verification_token(db, user.id)
    db.commit()

    mailer.send_verification_email(user.email, user.name, token)
    mailer.send_admin_approval_email(user.id, user.email, user.name)
    logger.info("registered user %s", user.id)

    _pad_response_time(started)
    return RegisterOut(
        message=(
            "Registration successful! Please check your email to verify your account. "
            "Your account will also need admin approval before you can log in."
        )
    )


@router.post("/login", response_model=LoginOut, status_code=status.HTTP_200_OK)
def login(
    payload: LoginIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    limiter.hit("auth", get_client_ip(request))

    if not is_valid_email(payload.email):
        raise HTTPException(status_code=400, detail="Invalid email format")
    if len(payload.password) > INPUT_LIMITS["password"]:
        raise HTTPException(status_code=400, detail="Invalid credentials")

    user = auth_service.find_user_by_email(db, payload.email)
    if not user:
        dummy_verify(payload.password)
        raise HTTPException(status_code=401, detail=GENERIC_LOGIN_ERROR)
    if not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail=GENERIC_LOGIN_ERROR)

    _require_active(user)

    if user.mfa_enabled and user.mfa_secret:
        return LoginOut(mfa_required=True, mfa_token=create_mfa_pending_token(user.id))

    set_session_cookie(response, user)
    return LoginOut(user=UserOut.model_validate(user))


@router.post("/logout", response_model=SuccessOut)
def logout(response: Response):
    clear_session_cookie(response)
    return SuccessOut()


@router.get("/me", response_model=UserEnvelope)
def me(user: Optional[User] = Depends(get_current_user_optional)):
    if user is None:
        return UserEnvelope(user=None)
    return UserEnvelope(user=UserOut.model_validate(user))


@router.post("/verify-email", response_model=VerifyEmailOut)
def verify_email(payload: TokenIn, db: Session = Depends(get_db)):
    user_id = auth_service.verify_email_token(db, payload.token)
    user = db.get(User, user_id) if user_id else None
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

    user.email_verified = True
    db.commit()
    return VerifyEmailOut(message="Email verified successfully!", approved=bool(user.approved))


@router.get("/verify-email")
def verify_email_link(token: Optional[str] = Query(None)):
    # 메일의 링크 → 프론트 페이지로
    if not token:
        raise HTTPException(status_code=400, detail="Missing token")
    return RedirectResponse(url=f"{settings.APP_URL}/verify-email?{urlencode({'token': token})}", status_code=302)


@router.post("/forgot-password", response_model=MessageOut)
def forgot_password(
    payload: EmailIn,
    request: Request,
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    limiter.hit("email", get_client_ip(request))

    user = auth_service.find_user_by_email(db, payload.email)
    if user:
        token = auth_service.create_password_reset_token(db, user.id)
        db.commit()
        mailer.send_password_reset_email(user.email, user.name, token)
    # 항상 같은 응답 (이메일 존재 여부 노출 방지)
    return MessageOut(message=FORGOT_MESSAGE)


@router.post("/reset-password", response_model=ResetPasswordOut)
def reset_password(payload: ResetPasswordIn, db: Session = Depends(get_db)):
    pw_error = validate_password(payload.password)
    if pw_error:
        raise HTTPException(status_code=400, detail=pw_error)

    user_id = auth_service.verify_password_reset_token(db, payload.token)
    user = db.get(User, user_id) if user_id else None
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    auth_service.update_password(db, user, payload.password)
    db.commit()
    return ResetPasswordOut(message="Password reset successfully!", email=user.email)


@router.get("/approve", response_class=HTMLResponse)
def approve(
    user_id: Optional[str] = Query(None, alias="userId"),
    action: Optional[str] = Query(None),
    token: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    def page(title: str, message: str, ok: bool, code: int) -> HTMLResponse:
        return HTMLResponse(render_status_page(title, message, ok), status_code=code)

    if not user_id or not action or not token:
        return page("Error", "Missing required parameters.", False, 400)
    if action not in ("approve", "reject"):
        return page("Error", "Invalid action.", False, 400)
    if not verify_approval_token(user_id, action, token):
        logger.warning("invalid approval token for user %s (%s)", user_id, action)
        return page("Error", "Invalid or expired approval link.", False, 403)

    user = db.get(User, user_id)
    if not user:
        return page("Error", "User not found.", False, 404)

    if action == "approve":
        if user.approved:
            return page("Already Processed", "This user has already been approved.", True, 200)
        auth_service.approve_user(db, user)
        db.commit()
        mailer.send_approval_notification_email(user.email, user.name, True)
        return page("User Approved", f"{user.name} ({user.email}) has been approved and notified.", True, 200)

    name, email = user.name, user.email
    mailer.send_approval_notification_email(email, name, False)
    auth_service.reject_user(db, user)
    db.commit()
    return page("User Rejected", f"{name} ({email}) has been rejected and their account has been removed.", True, 200)


@router.post("/magic-link", response_model=MessageOut)
def request_magic_link(
    payload: EmailIn,
    request: Request,
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    limiter.hit("email", get_client_ip(request))

    user = auth_service.find_user_by_email(db, payload.email)
    if not user:
        return MessageOut(message=MAGIC_LINK_MESSAGE)
    _require_active(user)

    token = auth_service.create_magic_link_token(db, user.email)
    db.commit()
    mailer.send_magic_link_email(user.email, token)
    return MessageOut(message=MAGIC_LINK_MESSAGE)


@router.post("/verify-magic-link", response_model=MagicLinkLoginOut)
def verify_magic_link(
    payload: TokenIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    limiter.hit("auth", get_client_ip(request))

    email = auth_service.verify_magic_link_token(db, payload.token)
    db.commit()
    if not email:
        raise HTTPException(status_code=401, detail="Invalid or expired link")

    user = auth_service.find_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired link")
    _require_active(user)

    set_session_cookie(response, user)
    return MagicLinkLoginOut(message="Login successful", user=UserOut.model_validate(user))
