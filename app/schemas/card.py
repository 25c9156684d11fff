# app/schemas/card.py
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import Field
from .base import BaseSchema, UTCDateTime

Priority = Literal["low", "medium", "high"]


class TagOut(BaseSchema):
    id: str
    name: str
    color: str


class CommentOut(BaseSchema):
    id: str
    content: str
    card_id: str
    created_at: UTCDateTime
    updated_at: UTCDateTime


class CommentIn(BaseSchema):
    content: str


class CardCreateIn(BaseSchema):
    title: str
    column_id: str = Field(..., min_length=1)
    notes: Optional[str] = ""
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = "medium"
    tag_ids: Optional[List[str]] = None


class CardUpdateIn(BaseSchema):
    """정의된 필드만 반영 (exclude_unset). 명시적 null 은 덮어씀."""
    title: Optional[str] = None
    notes: Optional[str] = None
    generated_prompt: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    tag_ids: Optional[List[str]] = None
    column_id: Optional[str] = None


class CardOut(BaseSchema):
    id: str
    title: str
    notes: str
    generated_prompt: Optional[str] = None
    due_date: Optional[UTCDateTime] = None
    priority: Priority
    tags: List[TagOut] = Field(default_factory=list)
    comments: List[CommentOut] = Field(default_factory=list)
    created_at: UTCDateTime
    updated_at: UTCDateTime
