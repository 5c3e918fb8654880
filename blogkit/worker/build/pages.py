from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from blogkit.worker.build.errors import PublishError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishCommitConfig:
    push: bool = False
    remote: str = "origin"
    branch: str | None = None
    git_user_name: str | None = None
    git_user_email: str | None = None


def is_git_checkout(path: str | Path) -> bool:
    return (Path(path) / ".git").exists()


def commit_target(target: str | Path, config: PublishCommitConfig) -> str | None:
    """
    Commit the publishing checkout after a deploy.

    - stages every change with `git add -A`
    - commits only when the index differs from HEAD
    - pushes to `config.remote` when `config.push` is set
    Returns the HEAD commit, or None when the target is not a git checkout.
    """
    root = Path(target)
    if not is_git_checkout(root):
        logger.info("%s is not a git checkout; skipping commit.", root)
        return None

    env = os.environ.copy()
    env.setdefault("GIT_TERMINAL_PROMPT", "0")
    identity: list[str] = []
    if config.git_user_name:
        identity += ["-c", f"user.name={config.git_user_name}"]
    if config.git_user_email:
        identity += ["-c", f"user.email={config.git_user_email}"]

    _git(root, ["add", "-A"], env=env)
    has_head = _try_git(root, ["rev-parse", "--verify", "HEAD"], env=env)
    has_changes = (
        not has_head
        or _try_git(root, ["diff", "--cached", "--quiet"], env=env) is False
    )
    if has_changes:
        msg = f"Deploy {datetime.now(timezone.utc).isoformat(timespec='seconds')}"
        _git(root, [*identity, "commit", "-m", msg], env=env)
    else:
        logger.info("Publishing target unchanged; nothing to commit.")
    commit = _git_output(root, ["rev-parse", "HEAD"], env=env).strip()

    if config.push:
        push_args = ["push", config.remote]
        if config.branch:
            push_args.append(f"HEAD:{config.branch}")
        _git(root, push_args, env=env)
    return commit


def _git(cwd: Path, args: list[str], env: dict[str, str]) -> None:
    try:
        subprocess.run(
            ["git", *args], cwd=str(cwd), check=True, env=env, capture_output=True
        )
    except FileNotFoundError as exc:
        raise PublishError("git binary not found") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or b"").decode("utf-8", "replace").strip()
        raise PublishError(f"git {args[0]} failed: {stderr}") from exc


def _try_git(cwd: Path, args: list[str], env: dict[str, str]) -> bool:
    proc = subprocess.run(["git", *args], cwd=str(cwd), env=env, capture_output=True)
    return proc.returncode == 0


def _git_output(cwd: Path, args: list[str], env: dict[str, str]) -> str:
    return subprocess.check_output(["git", *args], cwd=str(cwd), env=env, text=True)


__all__ = ["PublishCommitConfig", "commit_target", "is_git_checkout"]
