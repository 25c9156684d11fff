from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_board
from app.core.db import get_db
from app.core.security import check_length
from app.models.board import Board
from app.schemas.board import BoardOut, BoardUpdateIn, ColumnOut, MoveCardIn, MoveCardOut
from app.schemas.card import CardOut
from app.services import board as board_service

router = APIRouter(prefix="/api/board", tags=["board"])


def to_board_out(snapshot: dict) -> BoardOut:
    return BoardOut(
        columns=[ColumnOut.model_validate(c) for c in snapshot["columns"]],
        cards={cid: CardOut.model_validate(c) for cid, c in snapshot["cards"].items()},
    )


@router.get("", response_model=BoardOut)
def get_board(board: Board = Depends(get_current_board), db: Session = Depends(get_db)):
    return to_board_out(board_service.board_snapshot(db, board))


@router.put("", response_model=BoardOut)
def update_board(
    body: BoardUpdateIn,
    board: Board = Depends(get_current_board),
    db: Session = Depends(get_db),
):
    """드래그 앤 드롭 결과 저장 (컬럼 순서 + 카드 순서 전체 덮어쓰기)"""
    for col in body.columns:
        check_length(col.title, "column_title", "Title")
    board_service.replace_column_orders(db, board, body.columns)
    db.commit()
    return to_board_out(board_service.board_snapshot(db, board))


@router.post("/move", response_model=MoveCardOut)
def move_card(
    body: MoveCardIn,
    board: Board = Depends(get_current_board),
    db: Session = Depends(get_db),
):
    result = board_service.apply_move(db, board, body.card_id, body.over_id)
    db.commit()
    columns = board_service.board_columns(db, board)
    return MoveCardOut(
        moved=result.moved,
        celebrate=result.celebrate,
        columns=[ColumnOut.model_validate(c) for c in columns],
    )
