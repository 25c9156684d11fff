# app/schemas/base.py
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer

from app.utils.helpers import iso


def to_camel(s: str) -> str:
    parts = s.split("_")
    return parts[0] + "".join(p.title() for p in parts[1:])


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


# DB는 naive UTC → 응답은 "...Z"
UTCDateTime = Annotated[datetime, PlainSerializer(iso, return_type=str)]


class MessageOut(BaseSchema):
    message: str


class SuccessOut(BaseSchema):
    success: bool = True
