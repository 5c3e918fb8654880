from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column


class Base(DeclarativeBase):
    pass


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class DeployRun(Base):
    __tablename__ = "deploy_run"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mode: Mapped[str] = mapped_column(String, nullable=False)
    # running | published | failed
    status: Mapped[str] = mapped_column(String, nullable=False, default="running")
    trigger: Mapped[str] = mapped_column(String, nullable=False, default="cli")
    started_at: Mapped[datetime] = mapped_column(
        DateTime, default=now_utc, nullable=False
    )
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    failed_stage: Mapped[str | None] = mapped_column(String, nullable=True)
    stages_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    files_published: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    target_commit: Mapped[str | None] = mapped_column(String, nullable=True)
    exit_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)


def latest_deploy_run(session: Session) -> DeployRun | None:
    return session.query(DeployRun).order_by(DeployRun.id.desc()).first()


def recent_deploy_runs(session: Session, limit: int = 20) -> list[DeployRun]:
    return session.query(DeployRun).order_by(DeployRun.id.desc()).limit(limit).all()


def create_all(engine: Engine) -> None:
    Base.metadata.create_all(engine)
