from blogkit.db.engine import (
    SessionLocal,
    engine,
    get_database_url,
    ledger_session,
    make_engine,
)
from blogkit.db.models import (
    Base,
    DeployRun,
    create_all,
    latest_deploy_run,
    recent_deploy_runs,
)

__all__ = [
    "SessionLocal",
    "engine",
    "ledger_session",
    "get_database_url",
    "make_engine",
    "Base",
    "DeployRun",
    "create_all",
    "latest_deploy_run",
    "recent_deploy_runs",
]
