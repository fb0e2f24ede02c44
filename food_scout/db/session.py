"""
food_scout/db/session.py – Engine factory + Session helper.

1 engine per database URL, cache lại để dùng chung giữa các request.
Dùng scoped session (contextmanager) để auto-close sau mỗi operation.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker


# ── Engine cache (1 engine / URL) ─────────────────────────────────────────────

_engines: dict[str, Engine] = {}
_session_factories: dict[str, sessionmaker] = {}


def get_engine(db_url: str) -> Engine:
    if db_url not in _engines:
        url = make_url(db_url)
        is_sqlite = url.get_backend_name() == "sqlite"
        if is_sqlite and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        engine = create_engine(
            db_url,
            connect_args={"check_same_thread": False} if is_sqlite else {},
            echo=False,
        )
        if is_sqlite:
            # WAL: nhiều worker đọc song song không chặn nhau
            @event.listens_for(engine, "connect")
            def set_wal(conn, _):
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=NORMAL")
                conn.execute("PRAGMA foreign_keys=ON")

        _engines[db_url] = engine
        _session_factories[db_url] = sessionmaker(bind=engine, expire_on_commit=False)
    return _engines[db_url]


def get_session_factory(db_url: str) -> sessionmaker:
    get_engine(db_url)
    return _session_factories[db_url]


@contextmanager
def db_session(db_url: str) -> Generator[Session, None, None]:
    """Context manager trả về Session, tự commit/rollback/close."""
    factory = get_session_factory(db_url)
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
