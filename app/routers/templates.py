import json
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.core.db import get_db
from app.core.security import check_length
from app.models.template import Template
from app.models.user import User
from app.schemas.tag import TemplateCreateIn, TemplateOut

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("", response_model=List[TemplateOut])
def list_templates(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    rows = db.query(Template).order_by(Template.name.asc()).all()
    return [TemplateOut.model_validate(t) for t in rows]


@router.post("", response_model=TemplateOut, status_code=status.HTTP_201_CREATED)
def create_template(body: TemplateCreateIn, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    if not body.name or not body.title:
        raise HTTPException(status_code=400, detail="Name and title are required")
    check_length(body.name, "template_name", "Name")
    check_length(body.title, "card_title", "Title")
    check_length(body.notes, "card_notes", "Notes")

    t = Template(
        name=body.name,
        title=body.title,
        notes=body.notes or "",
        tags_json=json.dumps(body.tags),
        priority=body.priority or "medium",
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    return TemplateOut.model_validate(t)
