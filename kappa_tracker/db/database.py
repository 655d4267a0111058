"""DB 엔진 / 세션 팩토리

SQLite URL이면 스레드 검사 해제 + 연결마다 외래 키 제약을 켠다
(팀 멤버십 CASCADE가 SQLite에서 동작하려면 필요).
"""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from kappa_tracker.config import settings


def _enable_sqlite_foreign_keys(dbapi_conn: Any, connection_record: Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, echo: bool = False, **kwargs: Any) -> Engine:
    """URL → Engine. 테스트는 poolclass=StaticPool 등을 kwargs로 넘긴다."""
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        kwargs.setdefault("connect_args", {"check_same_thread": False})

    new_engine = create_engine(url, echo=echo, **kwargs)
    if is_sqlite:
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """요청 단위 세션 (FastAPI 의존성)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
