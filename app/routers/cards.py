from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth import get_current_board
from app.core.db import get_db
from app.core.security import check_length
from app.models.board import Board
from app.schemas.base import SuccessOut
from app.schemas.card import CardCreateIn, CardOut, CardUpdateIn, CommentIn, CommentOut
from app.services import board as board_service
from app.utils.helpers import to_naive_utc

router = APIRouter(prefix="/api/cards", tags=["cards"])


def _check_card_fields(data: dict) -> None:
    if "title" in data:
        if not data["title"]:
            raise HTTPException(status_code=400, detail="Title is required")
        check_length(data["title"], "card_title", "Title")
    check_length(data.get("notes"), "card_notes", "Notes")
    if data.get("due_date") is not None:
        data["due_date"] = to_naive_utc(data["due_date"])


# ---------- 카드 생성 ----------
@router.post("", response_model=CardOut, status_code=status.HTTP_201_CREATED)
def create_card(
    body: CardCreateIn,
    board: Board = Depends(get_current_board),
    db: Session = Depends(get_db),
):
    data = body.model_dump()
    _check_card_fields(data)
    column = board_service.get_owned_column(db, board, body.column_id)

    card = board_service.create_card(db, board, column, data)
    db.commit()
    db.refresh(card)
    return CardOut.model_validate(card)


# ---------- 카드 상세 ----------
@router.get("/{card_id}", response_model=CardOut)
def get_card(card_id: str, board: Board = Depends(get_current_board), db: Session = Depends(get_db)):
    return CardOut.model_validate(board_service.get_owned_card(db, board, card_id))


# ---------- 카드 수정 (partial) ----------
@router.put("/{card_id}", response_model=CardOut)
def update_card(
    card_id: str,
    body: CardUpdateIn,
    board: Board = Depends(get_current_board),
    db: Session = Depends(get_db),
):
    card = board_service.get_owned_card(db, board, card_id)

    data = body.model_dump(exclude_unset=True, by_alias=False)
    _check_card_fields(data)

    board_service.update_card(db, board, card, data)
    db.commit()
    db.refresh(card)
    return CardOut.model_validate(card)


# ---------- 카드 삭제 ----------
@router.delete("/{card_id}", response_model=SuccessOut)
def delete_card(card_id: str, board: Board = Depends(get_current_board), db: Session = Depends(get_db)):
    card = board_service.get_owned_card(db, board, card_id)
    board_service.delete_card(db, board, card)
    db.commit()
    return SuccessOut()


# ---------- 댓글 ----------
@router.get("/{card_id}/comments", response_model=List[CommentOut])
def list_comments(card_id: str, board: Board = Depends(get_current_board), db: Session = Depends(get_db)):
    card = board_service.get_owned_card(db, board, card_id)
    return [CommentOut.model_validate(c) for c in board_service.list_comments(db, card)]


@router.post("/{card_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def create_comment(
    card_id: str,
    body: CommentIn,
    board: Board = Depends(get_current_board),
    db: Session = Depends(get_db),
):
    if not body.content:
        raise HTTPException(status_code=400, detail="Comment content is required")
    check_length(body.content, "comment_content", "Comment")

    card = board_service.get_owned_card(db, board, card_id)
    comment = board_service.add_comment(db, card, body.content)
    db.commit()
    return CommentOut.model_validate(comment)
