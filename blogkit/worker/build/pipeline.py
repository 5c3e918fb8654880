from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from blogkit.core.tree import count_files
from blogkit.db import DeployRun, create_all, engine, ledger_session
from blogkit.worker.build.errors import DeployError, PublishError
from blogkit.worker.build.hugo import run_hugo_build
from blogkit.worker.build.pages import PublishCommitConfig, commit_target
from blogkit.worker.build.publish import (
    clear_directory,
    copy_tree_contents,
    swap_into_place,
)
from blogkit.worker.site_repo import SiteRepo

logger = logging.getLogger(__name__)

DEPLOY_MODES = ("legacy", "safe")
TRUTHY = {"1", "true", "TRUE", "yes", "YES"}


@dataclass
class DeployConfig:
    site_root: str = "."
    publish_target: str = "../smyrgeorge.github.io"
    hugo_bin: str = "hugo"
    verbose: bool = True
    mode: str = "legacy"
    preserve: tuple[str, ...] = ("CNAME",)
    commit: bool = False
    push: bool = False
    push_branch: str | None = None
    git_user_name: str | None = None
    git_user_email: str | None = None

    def target_path(self) -> Path:
        target = Path(self.publish_target)
        if target.is_absolute():
            return target
        return Path(self.site_root) / target


def load_deploy_config() -> DeployConfig:
    mode = os.getenv("BLOG_DEPLOY_MODE", "legacy").lower()
    if mode not in DEPLOY_MODES:
        raise ValueError(f"BLOG_DEPLOY_MODE must be one of {DEPLOY_MODES}, got {mode!r}")
    preserve = tuple(
        name.strip()
        for name in os.getenv("BLOG_PRESERVE", "CNAME").split(",")
        if name.strip()
    )
    return DeployConfig(
        site_root=os.getenv("BLOG_SITE_ROOT", "."),
        publish_target=os.getenv("BLOG_PUBLISH_TARGET", "../smyrgeorge.github.io"),
        hugo_bin=os.getenv("BLOG_HUGO_BIN", "hugo"),
        verbose=os.getenv("BLOG_HUGO_VERBOSE", "1") in TRUTHY,
        mode=mode,
        preserve=preserve,
        commit=os.getenv("BLOG_PUBLISH_COMMIT", "0") in TRUTHY,
        push=os.getenv("BLOG_PUBLISH_PUSH", "0") in TRUTHY,
        push_branch=os.getenv("BLOG_PUBLISH_BRANCH") or None,
        git_user_name=os.getenv("BLOG_GIT_USER_NAME") or None,
        git_user_email=os.getenv("BLOG_GIT_USER_EMAIL") or None,
    )


@dataclass
class StageResult:
    name: str
    ok: bool
    detail: str | None = None


@dataclass
class DeployResult:
    mode: str
    stages: list[StageResult] = field(default_factory=list)
    files_published: int = 0
    commit: str | None = None

    @property
    def status(self) -> str:
        if self.stages and all(stage.ok for stage in self.stages):
            return "published"
        return "failed"

    @property
    def failed_stage(self) -> str | None:
        for stage in self.stages:
            if not stage.ok:
                return stage.name
        return None

    @property
    def exit_code(self) -> int:
        # deploy.sh exits with the status of its last command only.
        if self.mode == "legacy":
            return 0 if self.stages and self.stages[-1].ok else 1
        return 0 if self.status == "published" else 1


def _run_stage(
    result: DeployResult, name: str, fn: Callable[[], Any]
) -> tuple[bool, Any]:
    try:
        value = fn()
    except (DeployError, OSError) as exc:
        logger.warning("Stage %s failed: %s", name, exc)
        result.stages.append(StageResult(name=name, ok=False, detail=str(exc)))
        return False, None
    detail = None if value is None else str(value)
    result.stages.append(StageResult(name=name, ok=True, detail=detail))
    logger.info("Stage %s done", name)
    return True, value


def _generated(repo: SiteRepo) -> str:
    config_file = repo.config_file
    if config_file is None:
        logger.warning("No Hugo config file found in %s", repo.root)
        return "rendered without a site config"
    return f"rendered with {config_file.name}"


def _run_legacy(config: DeployConfig, repo: SiteRepo, target: Path) -> DeployResult:
    """Mirror deploy.sh step for step; no stage looks at an earlier outcome.

    Like `cp -R public/* target/`, the publish step fails when the target
    directory does not exist instead of creating it.
    """
    result = DeployResult(mode="legacy")
    if config.commit or config.push:
        logger.warning("Commit/push only apply to safe mode; ignored in legacy mode.")

    _run_stage(
        result,
        "clean",
        lambda: "removed" if repo.clean_public_dir() else "absent",
    )

    def generate() -> str:
        run_hugo_build(repo, hugo_bin=config.hugo_bin, verbose=config.verbose)
        return _generated(repo)

    _run_stage(result, "generate", generate)
    _run_stage(result, "clear-target", lambda: clear_directory(target))

    def publish() -> int:
        if not repo.public_dir.exists() or not any(
            not child.name.startswith(".") for child in repo.public_dir.iterdir()
        ):
            raise PublishError(f"{repo.public_dir}/*: No such file or directory")
        if not target.is_dir():
            raise PublishError(f"{target}: Not a directory")
        return copy_tree_contents(repo.public_dir, target)

    ok, copied = _run_stage(result, "publish", publish)
    if ok:
        result.files_published = copied
    return result


def _run_safe(config: DeployConfig, repo: SiteRepo, target: Path) -> DeployResult:
    """Render aside, validate, swap. The first failing stage stops the run."""
    result = DeployResult(mode="safe")
    repo.root.mkdir(parents=True, exist_ok=True)
    rendered = Path(tempfile.mkdtemp(prefix=".render-", dir=repo.root))
    try:
        def generate() -> str:
            run_hugo_build(
                repo,
                hugo_bin=config.hugo_bin,
                destination=rendered,
                verbose=config.verbose,
            )
            return _generated(repo)

        ok, _ = _run_stage(result, "generate", generate)
        if not ok:
            return result

        def validate() -> int:
            files = count_files(rendered)
            if files == 0:
                raise PublishError("Generator produced an empty site; refusing to publish")
            return files

        ok, _ = _run_stage(result, "validate", validate)
        if not ok:
            return result

        ok, published = _run_stage(
            result,
            "swap",
            lambda: swap_into_place(rendered, target, preserve=config.preserve),
        )
        if not ok:
            return result
        result.files_published = published

        def sync_public() -> str:
            repo.clean_public_dir()
            rendered.rename(repo.public_dir)
            return str(repo.public_dir)

        ok, _ = _run_stage(result, "sync-public", sync_public)
        if not ok:
            return result

        if config.commit:
            ok, commit = _run_stage(
                result,
                "commit",
                lambda: commit_target(
                    target,
                    PublishCommitConfig(
                        push=config.push,
                        branch=config.push_branch,
                        git_user_name=config.git_user_name,
                        git_user_email=config.git_user_email,
                    ),
                ),
            )
            if ok:
                result.commit = commit
        return result
    finally:
        if rendered.exists():
            shutil.rmtree(rendered, ignore_errors=True)


def _record(run: DeployRun, result: DeployResult) -> None:
    run.status = result.status
    run.failed_stage = result.failed_stage
    run.stages_json = json.dumps([asdict(stage) for stage in result.stages])
    run.files_published = result.files_published
    run.target_commit = result.commit
    run.exit_code = result.exit_code
    run.last_error = next(
        (stage.detail for stage in result.stages if not stage.ok), None
    )
    run.finished_at = datetime.now(timezone.utc)


def run_deploy_pipeline(
    config: DeployConfig | None = None, trigger: str = "cli"
) -> DeployResult:
    """Render the blog and publish it into the sibling checkout."""
    config = config or load_deploy_config()
    repo = SiteRepo(config.site_root)
    target = config.target_path()
    create_all(engine)

    with ledger_session() as session:
        run = DeployRun(mode=config.mode, status="running", trigger=trigger)
        session.add(run)
        session.commit()
        logger.info("Deploy #%s started (%s mode) -> %s", run.id, config.mode, target)
        try:
            if config.mode == "safe":
                result = _run_safe(config, repo, target)
            else:
                result = _run_legacy(config, repo, target)
        except Exception as exc:
            logger.exception("Deploy pipeline failed")
            run.status = "failed"
            run.last_error = str(exc)
            run.exit_code = 1
            run.finished_at = datetime.now(timezone.utc)
            session.add(run)
            session.commit()
            raise
        else:
            _record(run, result)
            session.add(run)
            session.commit()

    if result.status == "published":
        logger.info("Published %s file(s) to %s", result.files_published, target)
    else:
        logger.warning(
            "Deploy finished with failed stage %r (exit %s)",
            result.failed_stage,
            result.exit_code,
        )
    return result


__all__ = [
    "DeployConfig",
    "DeployResult",
    "StageResult",
    "load_deploy_config",
    "run_deploy_pipeline",
]


if __name__ == "__main__":  # pragma: no cover - manual entry
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(run_deploy_pipeline().exit_code)
