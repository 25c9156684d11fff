import json
from typing import List

from sqlalchemy import Column as SAColumn, String, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.utils.helpers import new_id, utc_now

# 승인 시 생성되는 기본 컬럼 (보드마다 같은 id 사용)
DEFAULT_COLUMNS = [
    ("todo", "To Do"),
    ("in-progress", "In Progress"),
    ("completed", "Completed"),
]
COMPLETED_COLUMN_ID = "completed"


class Board(Base):
    __tablename__ = "boards"

    id = SAColumn(String(32), primary_key=True, default=new_id)
    name = SAColumn(String(100), nullable=False, default="My Board")
    user_id = SAColumn(String(32), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)

    created_at = SAColumn(DateTime, nullable=False, default=utc_now)
    updated_at = SAColumn(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="board")
    columns = relationship(
        "Column", back_populates="board", cascade="all, delete-orphan",
        order_by="Column.position",
    )
    cards = relationship("Card", back_populates="board", cascade="all, delete-orphan")


class Column(Base):
    __tablename__ = "columns"

    # (board_id, id) 복합 PK: 모든 보드가 "todo" 같은 고정 id를 가질 수 있음
    board_id = SAColumn(String(32), ForeignKey("boards.id", ondelete="CASCADE"), primary_key=True)
    id = SAColumn(String(64), primary_key=True, default=new_id)

    title = SAColumn(String(100), nullable=False)
    position = SAColumn(Integer, nullable=False, default=0)
    # 카드 순서는 JSON 문자열로 보관
    card_ids_json = SAColumn("card_ids", Text, nullable=False, default="[]")

    created_at = SAColumn(DateTime, nullable=False, default=utc_now)
    updated_at = SAColumn(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    board = relationship("Board", back_populates="columns")

    @property
    def card_ids(self) -> List[str]:
        return json.loads(self.card_ids_json or "[]")

    @card_ids.setter
    def card_ids(self, value: List[str]) -> None:
        self.card_ids_json = json.dumps(list(value))
