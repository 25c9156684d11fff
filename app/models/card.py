from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.utils.helpers import new_id, utc_now

PRIORITIES = ("low", "medium", "high")


class Card(Base):
    __tablename__ = "cards"

    id = Column(String(32), primary_key=True, default=new_id)
    board_id = Column(String(32), ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    notes = Column(Text, nullable=False, default="")
    generated_prompt = Column(Text, nullable=True)
    due_date = Column(DateTime, nullable=True)
    priority = Column(String(10), nullable=False, default="medium")

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    board = relationship("Board", back_populates="cards")
    comments = relationship(
        "Comment", back_populates="card", cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )
    tag_links = relationship("CardTag", cascade="all, delete-orphan")

    @property
    def tags(self):
        return [link.tag for link in self.tag_links]


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(32), primary_key=True, default=new_id)
    card_id = Column(String(32), ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    card = relationship("Card", back_populates="comments")


class CardTag(Base):
    __tablename__ = "card_tags"

    card_id = Column(String(32), ForeignKey("cards.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(String(32), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    tag = relationship("Tag", lazy="joined")
