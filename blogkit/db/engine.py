import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

LEDGER_RELPATH = Path("var") / "db" / "blogkit.db"


def default_ledger_path() -> Path:
    """The ledger sits inside the blog checkout, not the caller's cwd."""
    return Path(os.getenv("BLOG_SITE_ROOT", ".")) / LEDGER_RELPATH


def get_database_url() -> str:
    """BLOG_DB_PATH may be a SQLAlchemy URL or a file path."""
    configured = os.getenv("BLOG_DB_PATH")
    if configured and "://" in configured:
        return configured
    path = Path(configured) if configured else default_ledger_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def make_engine(url: str | None = None) -> Engine:
    return create_engine(url or get_database_url(), future=True)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, future=True)


@contextmanager
def ledger_session() -> Iterator[Session]:
    """Session that commits on clean exit and rolls back on error."""
    with SessionLocal() as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        session.commit()
