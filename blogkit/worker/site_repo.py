from __future__ import annotations

import shutil
from pathlib import Path

CONFIG_NAMES = ("hugo.toml", "hugo.yaml", "hugo.json", "config.toml", "config.yaml")


class SiteRepo:
    """Fixed layout of the blog checkout the deploy script runs in."""

    def __init__(self, workdir: str | Path):
        self.root = Path(workdir)
        self.content_dir = self.root / "content"
        self.public_dir = self.root / "public"

    @property
    def config_file(self) -> Path | None:
        for name in CONFIG_NAMES:
            candidate = self.root / name
            if candidate.exists():
                return candidate
        return None

    def clean_public_dir(self) -> bool:
        """Drop the previous build output. Returns False when there was none."""
        if not self.public_dir.exists():
            return False
        shutil.rmtree(self.public_dir)
        return True


__all__ = ["SiteRepo", "CONFIG_NAMES"]
