import json

from sqlalchemy import Column, String, Text, DateTime
from app.core.db import Base
from app.utils.helpers import new_id, utc_now


class Template(Base):
    __tablename__ = "templates"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    title = Column(String(200), nullable=False)
    notes = Column(Text, nullable=False, default="")
    tags_json = Column("tags", Text, nullable=False, default="[]")
    priority = Column(String(10), nullable=False, default="medium")

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    @property
    def tags(self):
        return json.loads(self.tags_json or "[]")
