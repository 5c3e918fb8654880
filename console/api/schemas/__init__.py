from console.api.schemas.models import (
    ArticleResponse,
    DeployRunResponse,
    StageResponse,
    TriggerResponse,
)

__all__ = [
    "ArticleResponse",
    "DeployRunResponse",
    "StageResponse",
    "TriggerResponse",
]
