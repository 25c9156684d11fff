from typing import List, Optional
from pydantic import field_validator
from .base import BaseSchema, UTCDateTime
from .card import Priority


class TagCreateIn(BaseSchema):
    name: str
    color: str

    @field_validator("color")
    @classmethod
    def v_color(cls, v: str) -> str:
        if len(v) != 7 or not v.startswith("#") or any(c not in "0123456789abcdefABCDEF" for c in v[1:]):
            raise ValueError("color must be a hex value like #3b82f6")
        return v.lower()


class TagDetailOut(BaseSchema):
    id: str
    name: str
    color: str
    created_at: UTCDateTime
    updated_at: UTCDateTime


class TemplateCreateIn(BaseSchema):
    name: str
    title: str
    notes: Optional[str] = ""
    tags: List[str] = []
    priority: Optional[Priority] = "medium"


class TemplateOut(BaseSchema):
    id: str
    name: str
    title: str
    notes: str
    tags: List[str]
    priority: Priority
    created_at: UTCDateTime
    updated_at: UTCDateTime


class GeneratePromptIn(BaseSchema):
    title: Optional[str] = None
    notes: Optional[str] = None


class GeneratePromptOut(BaseSchema):
    prompt: str
