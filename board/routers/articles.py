from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from board.database import get_db
from board.dependencies import PaginationParams, get_current_user
from board.models import User
from board.schemas import (
    ArticleCommentCreate,
    ArticleCommentResponse,
    ArticleCreate,
    ArticleCreated,
    ArticleResponse,
    ArticleUpdate,
    ArticleWithCommentsResponse,
    PaginatedResponse,
    SearchType,
)
from board.services import article_service, comment_service

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])


@router.get("", response_model=PaginatedResponse)
async def list_articles(
    search_type: SearchType | None = None,
    search_value: str | None = None,
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.search_articles(
        db,
        search_type,
        search_value,
        pagination.page,
        pagination.page_size,
        pagination.sort_by,
        pagination.sort_order,
    )


@router.get("/search-hashtag", response_model=PaginatedResponse)
async def search_articles_via_hashtag(
    search_value: str | None = None,
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.search_articles_via_hashtag(
        db, search_value, pagination.page, pagination.page_size
    )


@router.get("/{article_id}", response_model=ArticleWithCommentsResponse)
async def get_article(article_id: int, db: AsyncSession = Depends(get_db)):
    return await article_service.get_article_with_comments(db, article_id)


@router.post("", status_code=201, response_model=ArticleCreated)
async def create_article(
    data: ArticleCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ArticleCreated(id=await article_service.save_article(db, user, data))


@router.put("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: int,
    data: ArticleUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.update_article(db, article_id, user, data)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


@router.delete("/{article_id}", status_code=204)
async def delete_article(
    article_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deleted = await article_service.delete_article(db, article_id, user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Article not found")


@router.get("/{article_id}/comments", response_model=list[ArticleCommentResponse])
async def list_comments(article_id: int, db: AsyncSession = Depends(get_db)):
    return await comment_service.search_article_comments(db, article_id)


@router.post("/{article_id}/comments", status_code=201, response_model=ArticleCommentResponse)
async def add_comment(
    article_id: int,
    data: ArticleCommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.save_comment(db, article_id, user, data)
    if not comment:
        raise HTTPException(status_code=404, detail="Article not found")
    return comment
