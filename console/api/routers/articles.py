import os

from fastapi import APIRouter

from blogkit.core.articles import article_issues, discover_articles
from blogkit.worker.site_repo import SiteRepo
from console.api import schemas

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("", response_model=list[schemas.ArticleResponse])
def list_articles():
    repo = SiteRepo(os.getenv("BLOG_SITE_ROOT", "."))
    articles = discover_articles(repo.content_dir)
    return [
        schemas.ArticleResponse(
            path=article.path.relative_to(repo.content_dir).as_posix(),
            slug=article.slug,
            title=article.title,
            date=article.date,
            subtitle=article.subtitle,
            author=article.author,
            author_link=article.author_link,
            cover_image=article.cover_image,
            categories=article.categories,
            tags=article.tags,
            issues=article_issues(article),
        )
        for article in articles
    ]
