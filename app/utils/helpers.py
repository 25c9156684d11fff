# app/utils/helpers.py
import uuid
from datetime import datetime, timezone
from typing import Optional


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """naive UTC (SQLite는 tz 정보를 저장하지 않음)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def iso(dt: Optional[datetime]) -> Optional[str]:
    if not dt:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")
