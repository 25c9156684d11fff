# app/models/tokens.py
from sqlalchemy import Column, String, DateTime, ForeignKey
from app.core.db import Base
from app.utils.helpers import new_id, utc_now


class EmailVerificationToken(Base):
    __tablename__ = "email_verification_tokens"
    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    token = Column(String(255), unique=True, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"
    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    token = Column(String(255), unique=True, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)


class MagicLinkToken(Base):
    __tablename__ = "magic_link_tokens"
    id = Column(String(32), primary_key=True, default=new_id)
    # 이메일 기준 (유저 FK 없음)
    email = Column(String(255), index=True, nullable=False)
    token = Column(String(255), unique=True, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
