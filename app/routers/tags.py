from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.core.db import get_db
from app.core.security import check_length
from app.models.tag import Tag
from app.models.user import User
from app.schemas.tag import TagCreateIn, TagDetailOut

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("", response_model=List[TagDetailOut])
def list_tags(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    return [TagDetailOut.model_validate(t) for t in db.query(Tag).order_by(Tag.name.asc()).all()]


@router.post("", response_model=TagDetailOut, status_code=status.HTTP_201_CREATED)
def create_tag(body: TagCreateIn, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    if not body.name:
        raise HTTPException(status_code=400, detail="Name and color are required")
    check_length(body.name, "tag_name", "Tag name")

    if db.query(Tag).filter(Tag.name == body.name).first():
        raise HTTPException(status_code=400, detail="Tag with this name already exists")

    tag = Tag(name=body.name, color=body.color)
    db.add(tag)
    db.commit()
    db.refresh(tag)
    return TagDetailOut.model_validate(tag)
