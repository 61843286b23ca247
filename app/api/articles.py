"""
Articles table API.

Serves the blog posts collection to the dashboard's collection mirrors:
list (admin or public mode), lookup by id or slug, insert, partial update,
delete, and a rendered-HTML view.

The store enforces the publish invariant on every write: `published_at` is
stamped the first time an article becomes PUBLISHED and is never moved or
cleared afterwards.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.db import get_session
from app.models.article import Article, ArticleStatus, generate_slug
from app.schemas import ArticleCreate, ArticleHtmlOut, ArticleOut, ArticleUpdate
from app.services.markdown import render_markdown

router = APIRouter()
logger = structlog.get_logger(__name__)


def apply_publish_rules(article: Article, now: datetime) -> None:
    """Stamp `published_at` on the first transition into PUBLISHED."""
    if article.status == ArticleStatus.PUBLISHED.value and article.published_at is None:
        article.published_at = now


def _get_or_404(session: Session, article_id: uuid.UUID) -> Article:
    article = session.get(Article, article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


def _commit(session: Session, article: Article) -> Article:
    try:
        session.add(article)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Slug already in use")
    session.refresh(article)
    return article


@router.get("", response_model=List[ArticleOut])
def list_articles(
    session: Session = Depends(get_session),
    include_unpublished: bool = Query(default=True),
) -> Any:
    """
    List articles.

    - include_unpublished=true (admin): every state, newest edits first
    - include_unpublished=false (public): PUBLISHED only, newest publications first
    """
    query = select(Article)
    if include_unpublished:
        query = query.order_by(Article.updated_at.desc(), Article.created_at.desc())
    else:
        query = query.where(Article.status == ArticleStatus.PUBLISHED.value).order_by(
            Article.published_at.desc().nulls_last(), Article.updated_at.desc()
        )
    return session.exec(query).all()


@router.get("/slug/{slug}", response_model=ArticleOut)
def get_article_by_slug(slug: str, session: Session = Depends(get_session)) -> Any:
    article = session.exec(select(Article).where(Article.slug == slug)).first()
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


@router.get("/{article_id}", response_model=ArticleOut)
def get_article(article_id: uuid.UUID, session: Session = Depends(get_session)) -> Any:
    return _get_or_404(session, article_id)


@router.get("/{article_id}/html", response_model=ArticleHtmlOut)
def get_article_html(article_id: uuid.UUID, session: Session = Depends(get_session)) -> Any:
    """Render the article body to HTML."""
    article = _get_or_404(session, article_id)
    return ArticleHtmlOut(id=article.id, slug=article.slug, html=render_markdown(article.content))


@router.post("", response_model=ArticleOut, status_code=201)
def create_article(article_in: ArticleCreate, session: Session = Depends(get_session)) -> Any:
    """Insert an article and return the stored row."""
    data = article_in.model_dump()
    data["status"] = article_in.status.value
    data["slug"] = article_in.slug or generate_slug(article_in.title) or f"post-{uuid.uuid4().hex[:8]}"
    if article_in.status != ArticleStatus.PUBLISHED:
        data["published_at"] = None

    now = datetime.now(timezone.utc)
    article = Article(**data, created_at=now, updated_at=now)
    apply_publish_rules(article, now)

    article = _commit(session, article)
    logger.info("Article created", article_id=str(article.id), slug=article.slug, status=article.status)
    return article


@router.patch("/{article_id}", response_model=ArticleOut)
def update_article(
    article_id: uuid.UUID,
    article_in: ArticleUpdate,
    session: Session = Depends(get_session),
) -> Any:
    """Apply a partial update. Concurrent writers simply overwrite each other."""
    article = _get_or_404(session, article_id)
    patch = article_in.model_dump(exclude_unset=True)

    # published_at is owned by the publish rules once set
    requested_published_at = patch.pop("published_at", None)
    if "status" in patch and patch["status"] is not None:
        patch["status"] = patch["status"].value

    for key, value in patch.items():
        if value is None and key in ("title", "status", "tags", "slug"):
            continue  # required columns
        setattr(article, key, value)

    now = datetime.now(timezone.utc)
    if article.published_at is None and requested_published_at is not None:
        if article.status == ArticleStatus.PUBLISHED.value:
            article.published_at = requested_published_at
    apply_publish_rules(article, now)
    article.updated_at = now

    article = _commit(session, article)
    logger.info("Article updated", article_id=str(article.id), fields=sorted(patch))
    return article


@router.delete("/{article_id}", status_code=204)
def delete_article(article_id: uuid.UUID, session: Session = Depends(get_session)) -> Response:
    """Hard delete. Deleting an id that does not exist is not an error."""
    article = session.get(Article, article_id)
    if article:
        session.delete(article)
        session.commit()
        logger.info("Article deleted", article_id=str(article_id))
    return Response(status_code=204)
