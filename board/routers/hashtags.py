from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from board.database import get_db
from board.services import hashtag_service

router = APIRouter(prefix="/api/v1/hashtags", tags=["hashtags"])


@router.get("", response_model=list[str])
async def list_hashtags(db: AsyncSession = Depends(get_db)):
    return await hashtag_service.get_hashtag_names(db)
