from blogkit.worker.build.pipeline import (
    DeployConfig,
    DeployResult,
    StageResult,
    load_deploy_config,
    run_deploy_pipeline,
)

__all__ = [
    "DeployConfig",
    "DeployResult",
    "StageResult",
    "load_deploy_config",
    "run_deploy_pipeline",
]
