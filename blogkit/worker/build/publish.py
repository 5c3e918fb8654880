from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

from blogkit.core.tree import count_files
from blogkit.worker.build.errors import PublishError

logger = logging.getLogger(__name__)

ALWAYS_PRESERVED = (".git",)


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def clear_directory(
    path: str | Path,
    include_hidden: bool = False,
    preserve: Iterable[str] = (),
) -> int:
    """Delete the entries of `path`, keeping the directory itself.

    Without `include_hidden` this behaves like `rm -rf path/*`: dotfiles
    (and therefore a `.git` checkout) are left alone.
    """
    root = Path(path)
    if not root.exists():
        return 0
    keep = set(preserve)
    removed = 0
    for child in root.iterdir():
        if child.name in keep:
            continue
        if _is_hidden(child) and not include_hidden:
            continue
        _remove(child)
        removed += 1
    return removed


def copy_tree_contents(
    src: str | Path, dst: str | Path, include_hidden: bool = False
) -> int:
    """Copy the entries of `src` into `dst` like `cp -R src/* dst/`.

    A missing or empty source copies nothing; a missing `dst` is created.
    Returns the number of files copied.
    """
    src_path = Path(src)
    dst_path = Path(dst)
    if not src_path.exists():
        logger.warning("Nothing to copy, %s does not exist", src_path)
        return 0
    dst_path.mkdir(parents=True, exist_ok=True)
    copied = 0
    for child in src_path.iterdir():
        if _is_hidden(child) and not include_hidden:
            continue
        target = dst_path / child.name
        if child.is_dir():
            shutil.copytree(child, target, dirs_exist_ok=True)
            copied += count_files(child)
        else:
            shutil.copy2(child, target)
            copied += 1
    return copied


def swap_into_place(
    rendered: str | Path,
    target: str | Path,
    preserve: Iterable[str] = (),
) -> int:
    """Replace `target` with a copy of `rendered` using renames.

    Entries named in `preserve` (plus `.git`) are carried over from the old
    target unless the rendering ships its own. On failure the old target is
    restored and PublishError is raised.
    """
    rendered_path = Path(rendered)
    target_path = Path(target)
    if not rendered_path.is_dir():
        raise PublishError(f"Rendered site not found: {rendered_path}")
    parent = target_path.parent
    if not parent.exists():
        raise PublishError(f"Publishing target parent does not exist: {parent}")

    staging = parent / f".{target_path.name}.staging"
    previous = parent / f".{target_path.name}.previous"
    for leftover in (staging, previous):
        if leftover.exists():
            shutil.rmtree(leftover)

    try:
        shutil.copytree(rendered_path, staging)
    except OSError as exc:
        shutil.rmtree(staging, ignore_errors=True)
        raise PublishError(f"Could not stage rendered site: {exc}") from exc
    published = count_files(staging)

    carried: list[str] = []
    names = list(dict.fromkeys([*ALWAYS_PRESERVED, *preserve]))
    try:
        if target_path.exists():
            for name in names:
                source = target_path / name
                if source.exists() and not (staging / name).exists():
                    source.rename(staging / name)
                    carried.append(name)
            target_path.rename(previous)
        staging.rename(target_path)
    except OSError as exc:
        _rollback(target_path, staging, previous, carried)
        raise PublishError(f"Could not swap publishing target: {exc}") from exc

    if previous.exists():
        shutil.rmtree(previous)
    logger.info("Swapped %s files into %s", published, target_path)
    return published


def _rollback(target: Path, staging: Path, previous: Path, carried: list[str]) -> None:
    if previous.exists() and not target.exists():
        previous.rename(target)
    if staging.exists() and target.exists() and staging != target:
        for name in carried:
            moved = staging / name
            if moved.exists():
                moved.rename(target / name)
        shutil.rmtree(staging, ignore_errors=True)


__all__ = ["clear_directory", "copy_tree_contents", "swap_into_place"]
