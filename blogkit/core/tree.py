from __future__ import annotations

import hashlib
from pathlib import Path


def _digest(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def snapshot(root: str | Path, include_hidden: bool = True) -> dict[str, str]:
    """Map each file's POSIX relative path to its sha256."""
    base = Path(root)
    if not base.exists():
        return {}
    result: dict[str, str] = {}
    for path in sorted(base.rglob("*")):
        if not path.is_file():
            continue
        rel = path.relative_to(base)
        if not include_hidden and any(part.startswith(".") for part in rel.parts):
            continue
        result[rel.as_posix()] = _digest(path)
    return result


def count_files(root: str | Path) -> int:
    base = Path(root)
    if not base.exists():
        return 0
    return sum(1 for p in base.rglob("*") if p.is_file())


__all__ = ["snapshot", "count_files"]
