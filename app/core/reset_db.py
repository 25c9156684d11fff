import logging

from app.core.db import Base, engine
from app.core.log import configure_logging
from app.models import board, card, tag, template, tokens, user  # noqa: F401  (테이블 등록)

logger = logging.getLogger(__name__)


# 한번만 실행하는 스크립트
def reset_db():
    logger.info("데이터베이스 초기화 중... (%s)", engine.url)
    Base.metadata.drop_all(bind=engine, checkfirst=True)
    Base.metadata.create_all(bind=engine)
    logger.info("초기화 완료! tables=%s", sorted(Base.metadata.tables.keys()))


if __name__ == "__main__":
    configure_logging()
    reset_db()
