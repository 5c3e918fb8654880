from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from blogkit.db import latest_deploy_run, recent_deploy_runs
from blogkit.worker.build import load_deploy_config, run_deploy_pipeline
from console.api import schemas
from console.api.deps import get_db, require_admin

router = APIRouter(prefix="/deploys", tags=["deploys"])


@router.get("", response_model=list[schemas.DeployRunResponse])
def list_deploys(
    limit: int = Query(default=20, ge=1, le=200),
    session: Session = Depends(get_db),
):
    return [
        schemas.DeployRunResponse.model_validate(run)
        for run in recent_deploy_runs(session, limit=limit)
    ]


@router.get("/latest", response_model=schemas.DeployRunResponse)
def get_latest(session: Session = Depends(get_db)):
    run = latest_deploy_run(session)
    if run is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No deploy has run yet"
        )
    return schemas.DeployRunResponse.model_validate(run)


@router.post(
    "/trigger",
    response_model=schemas.TriggerResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def trigger_deploy(
    background: BackgroundTasks,
    mode: str | None = None,
    _token: str = Depends(require_admin),
) -> schemas.TriggerResponse:
    try:
        config = load_deploy_config()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if mode is not None:
        if mode not in ("legacy", "safe"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="mode must be 'legacy' or 'safe'",
            )
        config.mode = mode
    # Run deploy in background to avoid blocking request.
    background.add_task(run_deploy_pipeline, config, "api")
    return schemas.TriggerResponse(
        accepted=True, mode=config.mode, message="Deploy scheduled"
    )
