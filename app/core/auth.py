from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.core.security import create_session_token, decode_session_token
from app.models.board import Board
from app.models.user import User


def get_client_ip(request: Request) -> str:
    """프록시 헤더 우선, 없으면 소켓 주소"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def set_session_cookie(response: Response, user: User) -> None:
    token = create_session_token(user.id, user.email, user.name)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


def get_current_user_optional(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """
    쿠키가 없거나 invalid/expired 이면 None.
    유효하면 User 객체 반환 (삭제된 유저면 None).
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    payload = decode_session_token(token)
    if not payload:
        return None
    return db.get(User, payload["sub"])


def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


def get_current_board(
    me: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Board:
    board = db.query(Board).filter(Board.user_id == me.id).first()
    if not board:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found")
    return board
