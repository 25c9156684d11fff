from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.utils.helpers import new_id, utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)

    email_verified = Column(Boolean, nullable=False, default=False)
    approved = Column(Boolean, nullable=False, default=False)

    mfa_secret = Column(String(64), nullable=True)
    mfa_enabled = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    # 승인 전에는 보드가 없음
    board = relationship("Board", back_populates="user", uselist=False, cascade="all, delete-orphan")
    email_tokens = relationship("EmailVerificationToken", cascade="all, delete-orphan")
    reset_tokens = relationship("PasswordResetToken", cascade="all, delete-orphan")
