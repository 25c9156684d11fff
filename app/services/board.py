#app/services/board.py
"""
Board mutations.

Column membership lives in ``Column.card_ids`` (ordered JSON list). The move
helpers below work on plain ``ColumnOrder`` values so the same algorithm is
usable without a database; the remaining functions apply changes to the ORM
rows of one board. Nothing here commits: the router commits once per
request.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from fastapi import HTTPException
from sqlalchemy.orm import Session, selectinload

from app.models.board import Board, Column, DEFAULT_COLUMNS, COMPLETED_COLUMN_ID
from app.models.card import Card, CardTag, Comment
from app.models.tag import Tag
from app.utils.helpers import utc_now

logger = logging.getLogger(__name__)


# ---------- pure ordering logic ----------
@dataclass
class ColumnOrder:
    id: str
    card_ids: List[str] = field(default_factory=list)


@dataclass
class MoveResult:
    columns: List[ColumnOrder]
    moved: bool = False
    celebrate: bool = False
    source_id: Optional[str] = None
    target_id: Optional[str] = None


def array_move(items: Sequence[str], old_index: int, new_index: int) -> List[str]:
    out = list(items)
    out.insert(new_index, out.pop(old_index))
    return out


def find_column_with_card(columns: Iterable[ColumnOrder], card_id: str) -> Optional[ColumnOrder]:
    for col in columns:
        if card_id in col.card_ids:
            return col
    return None


def move_card(columns: Sequence[ColumnOrder], active_id: str, over_id: str) -> MoveResult:
    """
    Apply a drag-and-drop of ``active_id`` onto ``over_id`` (a card id or a
    column id). Returns new column orders; the input is not modified.
    Unknown ids or a drop onto itself leave the columns unchanged.
    """
    cols = [ColumnOrder(c.id, list(c.card_ids)) for c in columns]

    source = find_column_with_card(cols, active_id)
    target = next((c for c in cols if c.id == over_id), None) or find_column_with_card(cols, over_id)
    if source is None or target is None or active_id == over_id:
        return MoveResult(columns=cols)

    if source.id == target.id:
        old_index = source.card_ids.index(active_id)
        if over_id == target.id:
            new_index = len(source.card_ids) - 1
        else:
            new_index = source.card_ids.index(over_id)
        if old_index == new_index:
            return MoveResult(columns=cols, source_id=source.id, target_id=target.id)
        source.card_ids = array_move(source.card_ids, old_index, new_index)
        return MoveResult(columns=cols, moved=True, source_id=source.id, target_id=target.id)

    source.card_ids = [cid for cid in source.card_ids if cid != active_id]
    if over_id == target.id:
        insert_at = len(target.card_ids)
    else:
        insert_at = target.card_ids.index(over_id)
    target.card_ids.insert(insert_at, active_id)

    return MoveResult(
        columns=cols,
        moved=True,
        celebrate=target.id == COMPLETED_COLUMN_ID,
        source_id=source.id,
        target_id=target.id,
    )


# ---------- lookups (ownership) ----------
def get_owned_column(db: Session, board: Board, column_id: str) -> Column:
    col = db.get(Column, (board.id, column_id))
    if not col:
        raise HTTPException(status_code=404, detail="Column not found")
    return col


def get_owned_card(db: Session, board: Board, card_id: str) -> Card:
    card = db.get(Card, card_id)
    # 다른 유저의 카드도 404 (존재 여부 노출 안 함)
    if not card or card.board_id != board.id:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


def board_columns(db: Session, board: Board) -> List[Column]:
    return db.query(Column).filter(Column.board_id == board.id).order_by(Column.position).all()


# ---------- board ----------
def ensure_board(db: Session, user_id: str) -> Board:
    """보드가 없으면 기본 컬럼 3개와 함께 생성"""
    board = db.query(Board).filter(Board.user_id == user_id).first()
    if board:
        return board

    board = Board(user_id=user_id, name="My Board")
    db.add(board)
    db.flush()
    for position, (col_id, title) in enumerate(DEFAULT_COLUMNS):
        db.add(Column(board_id=board.id, id=col_id, title=title, position=position, card_ids_json="[]"))
    db.flush()
    logger.info("created board %s for user %s", board.id, user_id)
    return board


def board_snapshot(db: Session, board: Board) -> dict:
    columns = board_columns(db, board)
    cards = (
        db.query(Card)
        .options(selectinload(Card.comments), selectinload(Card.tag_links))
        .filter(Card.board_id == board.id)
        .all()
    )
    return {
        "columns": columns,
        "cards": {c.id: c for c in cards},
    }


def replace_column_orders(db: Session, board: Board, orders: Sequence) -> List[Column]:
    """
    Overwrite ``card_ids`` (and position, from payload order) of every listed
    column. Columns not in the payload keep their state. Last write wins.
    """
    by_id: Dict[str, Column] = {c.id: c for c in board_columns(db, board)}
    owned_cards = {cid for (cid,) in db.query(Card.id).filter(Card.board_id == board.id)}

    seen: set = set()
    listed: set = set()
    for order in orders:
        if order.id not in by_id:
            raise HTTPException(status_code=404, detail="Column not found")
        if order.id in listed:
            raise HTTPException(status_code=400, detail="A column can only appear once")
        listed.add(order.id)
        for cid in order.card_ids:
            if cid not in owned_cards:
                raise HTTPException(status_code=404, detail="Card not found")
            if cid in seen:
                raise HTTPException(status_code=400, detail="A card can only appear in one column")
            seen.add(cid)

    # 나머지 컬럼에 남아있는 카드와도 중복되면 안 됨
    for col in by_id.values():
        if col.id not in listed and seen.intersection(col.card_ids):
            raise HTTPException(status_code=400, detail="A card can only appear in one column")

    for index, order in enumerate(orders):
        col = by_id[order.id]
        col.card_ids = order.card_ids
        col.position = index
        if order.title:
            col.title = order.title
    # 목록에 없는 컬럼은 뒤로
    rest = sorted((c for c in by_id.values() if c.id not in listed), key=lambda c: c.position)
    for offset, col in enumerate(rest):
        col.position = len(orders) + offset

    db.flush()
    return board_columns(db, board)


def apply_move(db: Session, board: Board, card_id: str, over_id: str) -> MoveResult:
    get_owned_card(db, board, card_id)
    columns = board_columns(db, board)
    result = move_card([ColumnOrder(c.id, c.card_ids) for c in columns], card_id, over_id)
    if result.moved:
        by_id = {c.id: c for c in columns}
        for order in result.columns:
            if order.id in (result.source_id, result.target_id):
                by_id[order.id].card_ids = order.card_ids
        db.flush()
    return result


# ---------- columns ----------
def create_column(db: Session, board: Board, title: str) -> Column:
    position = db.query(Column).filter(Column.board_id == board.id).count()
    col = Column(board_id=board.id, title=title, position=position, card_ids_json="[]")
    db.add(col)
    db.flush()
    return col


def delete_column(db: Session, board: Board, column: Column) -> List[str]:
    """컬럼 + 소속 카드(댓글, 태그 링크 포함) 삭제. 삭제된 카드 id 반환"""
    card_ids = column.card_ids
    cards = []
    if card_ids:
        cards = db.query(Card).filter(Card.board_id == board.id, Card.id.in_(card_ids)).all()
    # comments / card_tags 는 relationship cascade 로 함께 삭제
    for card in cards:
        db.delete(card)
    db.delete(column)
    db.flush()

    for position, col in enumerate(board_columns(db, board)):
        col.position = position
    db.flush()
    return [c.id for c in cards]


# ---------- cards ----------
def replace_card_tags(db: Session, card: Card, tag_ids: Optional[Iterable[str]]) -> None:
    """delete-all-then-insert. 중복 id 는 한 번만"""
    wanted: List[str] = []
    for tid in tag_ids or []:
        if tid not in wanted:
            wanted.append(tid)
    if wanted:
        found = {tid for (tid,) in db.query(Tag.id).filter(Tag.id.in_(wanted))}
        missing = [tid for tid in wanted if tid not in found]
        if missing:
            raise HTTPException(status_code=400, detail="Unknown tag")

    # delete-orphan 으로 기존 링크 삭제
    card.tag_links.clear()
    db.flush()
    for tid in wanted:
        card.tag_links.append(CardTag(tag_id=tid))
    db.flush()


def remove_card_from_columns(db: Session, board: Board, card_id: str) -> None:
    for col in board_columns(db, board):
        ids = col.card_ids
        if card_id in ids:
            col.card_ids = [cid for cid in ids if cid != card_id]


def create_card(db: Session, board: Board, column: Column, data: dict) -> Card:
    card = Card(
        board_id=board.id,
        title=data["title"],
        notes=data.get("notes") or "",
        due_date=data.get("due_date"),
        priority=data.get("priority") or "medium",
    )
    db.add(card)
    db.flush()

    column.card_ids = column.card_ids + [card.id]
    if data.get("tag_ids"):
        replace_card_tags(db, card, data["tag_ids"])
    db.flush()
    return card


def update_card(db: Session, board: Board, card: Card, data: dict) -> Card:
    """data 에 있는 키만 반영 (None 은 명시적 초기화)"""
    if "title" in data:
        card.title = data["title"]
    if "notes" in data:
        card.notes = data["notes"] or ""
    if "generated_prompt" in data:
        card.generated_prompt = data["generated_prompt"]
    if "due_date" in data:
        card.due_date = data["due_date"]
    if "priority" in data:
        card.priority = data["priority"] or "medium"
    if "tag_ids" in data:
        replace_card_tags(db, card, data["tag_ids"])
    if data.get("column_id"):
        target = get_owned_column(db, board, data["column_id"])
        if card.id not in target.card_ids:
            remove_card_from_columns(db, board, card.id)
            target.card_ids = target.card_ids + [card.id]

    card.updated_at = utc_now()
    db.flush()
    return card


def delete_card(db: Session, board: Board, card: Card) -> None:
    remove_card_from_columns(db, board, card.id)
    db.delete(card)
    db.flush()


# ---------- comments ----------
def add_comment(db: Session, card: Card, content: str) -> Comment:
    comment = Comment(card_id=card.id, content=content)
    db.add(comment)
    db.flush()
    db.expire(card, ["comments"])
    return comment


def list_comments(db: Session, card: Card) -> List[Comment]:
    return (
        db.query(Comment)
        .filter(Comment.card_id == card.id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
