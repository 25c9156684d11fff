from sqlalchemy import Column, String, DateTime
from app.core.db import Base
from app.utils.helpers import new_id, utc_now

# 회원가입 시 없으면 생성
DEFAULT_TAGS = [
    ("Bug", "#ef4444"),
    ("Feature", "#3b82f6"),
    ("Urgent", "#f59e0b"),
    ("Enhancement", "#8b5cf6"),
    ("Documentation", "#10b981"),
    ("Design", "#ec4899"),
]


class Tag(Base):
    __tablename__ = "tags"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(50), unique=True, nullable=False, index=True)
    color = Column(String(7), nullable=False)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)
