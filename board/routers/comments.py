from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from board.database import get_db
from board.dependencies import get_current_user
from board.models import User
from board.schemas import ArticleCommentResponse, ArticleCommentUpdate
from board.services import comment_service

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])


@router.put("/{comment_id}", response_model=ArticleCommentResponse)
async def update_comment(
    comment_id: int,
    data: ArticleCommentUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.update_comment(db, comment_id, user, data.content)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


@router.delete("/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deleted = await comment_service.delete_comment(db, comment_id, user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Comment not found")
