import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.staticfiles import StaticFiles

from blogkit.db import create_all, engine
from blogkit.worker.site_repo import SiteRepo
from console.api.routers import articles, deploys

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_all(engine)
    yield


app = FastAPI(title="blogkit console", lifespan=lifespan)

app.include_router(deploys.router, prefix="/api")
app.include_router(articles.router, prefix="/api")


# Local preview of the last build output.
def maybe_mount_public_site(app: FastAPI) -> bool:
    if os.getenv("BLOG_SERVE_PUBLIC", "0") != "1":
        return False
    public_dir: Path = SiteRepo(os.getenv("BLOG_SITE_ROOT", ".")).public_dir
    if not public_dir.exists():
        logger.warning("Preview enabled but public dir missing: %s", public_dir)
        return False
    app.mount("/", StaticFiles(directory=public_dir, html=True), name="blog-public")
    logger.info("Mounted public site at / from %s", public_dir)
    return True


public_mounted = maybe_mount_public_site(app)

# Provide a tiny landing page only when the public site is not mounted.
if not public_mounted:

    @app.get("/", tags=["meta"])
    async def root():
        return JSONResponse(
            {
                "app": "blogkit",
                "status": "ok",
                "api_base": "/api",
                "docs": "/docs",
            }
        )
