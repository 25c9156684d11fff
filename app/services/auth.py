#app/services/auth.py
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import generate_token, hash_password
from app.models.board import Board
from app.models.tag import Tag, DEFAULT_TAGS
from app.models.tokens import EmailVerificationToken, PasswordResetToken, MagicLinkToken
from app.models.user import User
from app.services.board import ensure_board
from app.utils.helpers import utc_now

logger = logging.getLogger(__name__)


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def seed_default_tags(db: Session) -> None:
    existing = {name for (name,) in db.query(Tag.name)}
    for name, color in DEFAULT_TAGS:
        if name not in existing:
            db.add(Tag(name=name, color=color))
    db.flush()


def create_user(db: Session, email: str, password: str, name: str) -> User:
    """미인증/미승인 상태로 생성. 보드는 승인 후에 생성됨"""
    user = User(
        email=email.strip().lower(),
        password_hash=hash_password(password),
        name=name,
        email_verified=False,
        approved=False,
    )
    db.add(user)
    db.flush()
    seed_default_tags(db)
    return user


def update_password(db: Session, user: User, new_password: str) -> None:
    user.password_hash = hash_password(new_password)
    user.updated_at = utc_now()
    db.flush()


# ---------- single-use tokens ----------
def _issue(db: Session, model, owner_field: str, owner_value: str, ttl: timedelta) -> str:
    # 같은 소유자의 기존 토큰은 폐기
    db.query(model).filter(getattr(model, owner_field) == owner_value).delete(synchronize_session=False)
    token = generate_token()
    db.add(model(**{owner_field: owner_value}, token=token, expires_at=utc_now() + ttl))
    db.flush()
    return token


def _consume(db: Session, model, token: str, owner_field: str) -> Optional[str]:
    row = (
        db.query(model)
        .filter(model.token == token, model.expires_at > utc_now())
        .first()
    )
    if not row:
        return None
    owner = getattr(row, owner_field)
    db.delete(row)
    db.flush()
    return owner


def create_email_verification_token(db: Session, user_id: str) -> str:
    return _issue(db, EmailVerificationToken, "user_id", user_id,
                  timedelta(hours=settings.EMAIL_TOKEN_EXPIRE_HOURS))


def verify_email_token(db: Session, token: str) -> Optional[str]:
    """토큰이 유효하면 user_id 반환 (1회용)"""
    return _consume(db, EmailVerificationToken, token, "user_id")


def create_password_reset_token(db: Session, user_id: str) -> str:
    return _issue(db, PasswordResetToken, "user_id", user_id,
                  timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES))


def verify_password_reset_token(db: Session, token: str) -> Optional[str]:
    return _consume(db, PasswordResetToken, token, "user_id")


def create_magic_link_token(db: Session, email: str) -> str:
    return _issue(db, MagicLinkToken, "email", email.strip().lower(),
                  timedelta(minutes=settings.MAGIC_LINK_EXPIRE_MINUTES))


def verify_magic_link_token(db: Session, token: str) -> Optional[str]:
    """토큰이 유효하면 email 반환 (1회용)"""
    return _consume(db, MagicLinkToken, token, "email")


# ---------- admin approval ----------
def approve_user(db: Session, user: User) -> Board:
    user.approved = True
    user.updated_at = utc_now()
    board = ensure_board(db, user.id)
    logger.info("user %s approved", user.id)
    return board


def reject_user(db: Session, user: User) -> None:
    logger.info("user %s rejected and removed", user.id)
    db.query(MagicLinkToken).filter(MagicLinkToken.email == user.email).delete(synchronize_session=False)
    db.delete(user)
    db.flush()


# ---------- MFA ----------
def enable_mfa(db: Session, user: User, secret: str) -> None:
    user.mfa_secret = secret
    user.mfa_enabled = True
    user.updated_at = utc_now()
    db.flush()


def disable_mfa(db: Session, user: User) -> None:
    user.mfa_secret = None
    user.mfa_enabled = False
    user.updated_at = utc_now()
    db.flush()
