from typing import Dict, List, Optional
from pydantic import Field
from .base import BaseSchema
from .card import CardOut


class ColumnOut(BaseSchema):
    id: str
    title: str
    position: int
    card_ids: List[str]


class BoardOut(BaseSchema):
    columns: List[ColumnOut]
    cards: Dict[str, CardOut]


class ColumnOrderIn(BaseSchema):
    id: str = Field(..., min_length=1)
    title: Optional[str] = None
    card_ids: List[str] = Field(default_factory=list)


class BoardUpdateIn(BaseSchema):
    columns: List[ColumnOrderIn]


class MoveCardIn(BaseSchema):
    card_id: str = Field(..., min_length=1)
    over_id: str = Field(..., min_length=1)


class MoveCardOut(BaseSchema):
    moved: bool
    celebrate: bool
    columns: List[ColumnOut]


class ColumnCreateIn(BaseSchema):
    title: str


class ColumnUpdateIn(BaseSchema):
    title: str
