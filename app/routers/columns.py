from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth import get_current_board
from app.core.db import get_db
from app.core.security import check_length
from app.models.board import Board
from app.schemas.base import SuccessOut
from app.schemas.board import ColumnCreateIn, ColumnOut, ColumnUpdateIn
from app.services import board as board_service

router = APIRouter(prefix="/api/columns", tags=["columns"])


def _check_title(title: str) -> None:
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    check_length(title, "column_title", "Title")


@router.post("", response_model=ColumnOut, status_code=status.HTTP_201_CREATED)
def create_column(body: ColumnCreateIn, board: Board = Depends(get_current_board), db: Session = Depends(get_db)):
    _check_title(body.title)
    col = board_service.create_column(db, board, body.title)
    db.commit()
    return ColumnOut.model_validate(col)


@router.patch("/{column_id}", response_model=ColumnOut)
def rename_column(
    column_id: str,
    body: ColumnUpdateIn,
    board: Board = Depends(get_current_board),
    db: Session = Depends(get_db),
):
    _check_title(body.title)
    col = board_service.get_owned_column(db, board, column_id)
    col.title = body.title
    db.commit()
    return ColumnOut.model_validate(col)


@router.delete("/{column_id}", response_model=SuccessOut)
def delete_column(column_id: str, board: Board = Depends(get_current_board), db: Session = Depends(get_db)):
    """컬럼 삭제 시 소속 카드, 댓글, 태그 링크까지 삭제"""
    col = board_service.get_owned_column(db, board, column_id)
    board_service.delete_column(db, board, col)
    db.commit()
    return SuccessOut()
