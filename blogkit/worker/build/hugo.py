from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from blogkit.worker.build.errors import GeneratorError
from blogkit.worker.site_repo import SiteRepo

logger = logging.getLogger(__name__)

OUTPUT_TAIL_LINES = 20


def build_hugo_command(
    repo: SiteRepo, destination: Path, hugo_bin: str = "hugo", verbose: bool = False
) -> list[str]:
    cmd = [
        hugo_bin,
        "-s",
        str(repo.root.resolve()),
        "-d",
        str(destination.resolve()),
    ]
    if verbose:
        cmd += ["--logLevel", "info"]
    return cmd


def run_hugo_build(
    repo: SiteRepo,
    hugo_bin: str = "hugo",
    destination: str | Path | None = None,
    verbose: bool = False,
) -> str:
    """Invoke Hugo to render the content store. Returns the captured output."""
    dest = Path(destination) if destination is not None else repo.public_dir
    env = os.environ.copy()
    env.setdefault("HUGO_ENV", "production")
    cmd = build_hugo_command(repo, dest, hugo_bin=hugo_bin, verbose=verbose)
    logger.info("Running %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(repo.root),
            env=env,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise GeneratorError(
            f"Hugo binary {hugo_bin!r} not found. Install it and ensure it is on PATH."
        ) from exc

    output = (proc.stdout or "") + (proc.stderr or "")
    if proc.returncode != 0:
        tail = "\n".join(output.strip().splitlines()[-OUTPUT_TAIL_LINES:])
        raise GeneratorError(
            f"hugo exited with status {proc.returncode}: {tail}".strip(),
            returncode=proc.returncode,
            output=output,
        )
    if verbose and output.strip():
        logger.info("%s", output.strip())
    return output


__all__ = ["build_hugo_command", "run_hugo_build"]
