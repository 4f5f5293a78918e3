from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from board.cache import cache
from board.database import get_db
from board.models import Comment, Hashtag, User
from board.schemas import MetricsResponse
from board.services import article_service

router = APIRouter(prefix="/api/v1/metrics", tags=["metrics"])


@router.get("", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):
    total_articles = await article_service.get_article_count(db)
    total_comments = (await db.execute(select(func.count()).select_from(Comment))).scalar_one()
    total_users = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    total_hashtags = (await db.execute(select(func.count()).select_from(Hashtag))).scalar_one()

    avg_comments = total_comments / total_articles if total_articles > 0 else 0

    return MetricsResponse(
        total_articles=total_articles,
        total_comments=total_comments,
        total_users=total_users,
        total_hashtags=total_hashtags,
        avg_comments_per_article=round(avg_comments, 2),
        cache_info=cache.stats,
    )
