# app/routers/mfa.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.core.auth import get_client_ip, get_current_user, set_session_cookie
from app.core.db import get_db
from app.core.ratelimit import RateLimiter, get_rate_limiter
from app.core.security import decode_mfa_pending_token, generate_mfa_secret, verify_totp
from app.models.user import User
from app.schemas.auth import (
    LoginOut,
    MFACodeIn,
    MFAEnableIn,
    MFASetupOut,
    MFAStatusOut,
    MFAVerifyIn,
    UserOut,
)
from app.schemas.base import MessageOut
from app.services import auth as auth_service
from app.services.qr import qr_data_url

router = APIRouter(prefix="/api/auth/mfa", tags=["mfa"])


@router.get("/setup", response_model=MFASetupOut)
def setup(me: User = Depends(get_current_user)):
    """새 시크릿 발급만 함. enable 에서 코드 확인 후 저장"""
    generated = generate_mfa_secret(me.email)
    return MFASetupOut(
        secret=generated["secret"],
        otpauth_url=generated["otpauth_url"],
        qr_code_data_url=qr_data_url(generated["otpauth_url"]),
    )


@router.get("/status", response_model=MFAStatusOut)
def mfa_status(me: User = Depends(get_current_user)):
    return MFAStatusOut(mfa_enabled=bool(me.mfa_enabled))


@router.post("/enable", response_model=MessageOut)
def enable(payload: MFAEnableIn, me: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if me.mfa_enabled:
        raise HTTPException(status_code=400, detail="Two-factor authentication is already enabled")
    if not verify_totp(payload.secret, payload.code):
        raise HTTPException(status_code=400, detail="Invalid verification code")

    auth_service.enable_mfa(db, me, payload.secret)
    db.commit()
    return MessageOut(message="Two-factor authentication enabled successfully")


@router.post("/disable", response_model=MessageOut)
def disable(payload: MFACodeIn, me: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not me.mfa_enabled or not me.mfa_secret:
        raise HTTPException(status_code=400, detail="Two-factor authentication is not enabled")
    if not verify_totp(me.mfa_secret, payload.code):
        raise HTTPException(status_code=400, detail="Invalid verification code")

    auth_service.disable_mfa(db, me)
    db.commit()
    return MessageOut(message="Two-factor authentication disabled successfully")


@router.post("/verify", response_model=LoginOut)
def verify(
    payload: MFAVerifyIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """로그인 2단계: login 이 발급한 mfaToken + TOTP 코드 → 세션"""
    limiter.hit("auth", get_client_ip(request))

    claims = decode_mfa_pending_token(payload.mfa_token)
    user = db.get(User, claims["sub"]) if claims else None
    if not user or not user.mfa_enabled or not user.mfa_secret:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_totp(user.mfa_secret, payload.code):
        raise HTTPException(status_code=401, detail="Invalid verification code")

    set_session_cookie(response, user)
    return LoginOut(user=UserOut.model_validate(user))
