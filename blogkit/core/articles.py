from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Iterable

import frontmatter
import toml
import yaml


class FrontMatterError(ValueError):
    """Raised when an article's front matter cannot be parsed."""


@dataclass
class Article:
    path: Path
    title: str | None
    date: datetime | None
    subtitle: str | None = None
    author: str | None = None
    author_link: str | None = None
    cover_image: str | None = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    body: str = ""
    front_matter: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def slug(self) -> str:
        return self.path.stem


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split a content file into its front matter mapping and markdown body.

    YAML (`---`) and TOML (`+++`) headers are both understood, as in Hugo.
    """
    try:
        meta, body = frontmatter.parse(text)
    except (yaml.YAMLError, toml.TomlDecodeError) as exc:
        raise FrontMatterError(str(exc)) from exc
    return dict(meta), body


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _parse_date(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def load_article(path: str | Path) -> Article:
    path = Path(path)
    meta, body = split_front_matter(path.read_text(encoding="utf-8"))
    cover = meta.get("cover")
    cover_image = cover.get("image") if isinstance(cover, dict) else cover
    return Article(
        path=path,
        title=_optional_str(meta.get("title")),
        date=_parse_date(meta.get("date")),
        subtitle=_optional_str(meta.get("subtitle")),
        author=_optional_str(meta.get("author")),
        author_link=_optional_str(meta.get("authorLink")),
        cover_image=_optional_str(cover_image),
        categories=_as_list(meta.get("categories")),
        tags=_as_list(meta.get("tags")),
        body=body,
        front_matter=meta,
    )


def iter_content_files(content_dir: str | Path) -> Iterable[Path]:
    root = Path(content_dir)
    if not root.exists():
        return []
    return sorted(
        p for p in root.rglob("*.md") if p.is_file() and p.name != "_index.md"
    )


def _unreadable(path: Path, reason: str) -> Article:
    return Article(path=path, title=None, date=None, error=reason)


def discover_articles(content_dir: str | Path) -> list[Article]:
    """Load every article under the content root, newest first.

    A file that cannot be read or parsed is still listed, carrying `error`.
    """
    articles = []
    for path in iter_content_files(content_dir):
        try:
            articles.append(load_article(path))
        except FrontMatterError as exc:
            articles.append(_unreadable(path, f"invalid front matter: {exc}"))
        except UnicodeDecodeError:
            articles.append(_unreadable(path, "not valid UTF-8"))
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    articles.sort(key=lambda a: (a.date or oldest, str(a.path)), reverse=True)
    return articles


def article_issues(article: Article) -> list[str]:
    """Advisory checks only; nothing in the deploy path enforces them."""
    if article.error:
        return [article.error]
    issues = []
    if not article.title:
        issues.append("missing title")
    if article.date is None:
        if article.front_matter.get("date") in (None, ""):
            issues.append("missing date")
        else:
            issues.append("unparseable date")
    return issues


__all__ = [
    "Article",
    "FrontMatterError",
    "article_issues",
    "discover_articles",
    "iter_content_files",
    "load_article",
    "split_front_matter",
]
