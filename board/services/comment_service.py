"""
Comment service — threaded comments for the Article aggregate.

Comments are stored flat, each with an optional ``parent_comment_id``;
the reply tree is rebuilt on every read by ``board.comment_tree``.  A
reply must point at a comment of the same article.  Deleting a comment
removes its whole subtree.  Every write purges the article's cached detail
view.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from board import repositories
from board.cache import cache
from board.comment_tree import CommentNode, CommentRecord, build_comment_tree, subtree_ids
from board.exceptions import ArticleNotFoundError, CommentNotFoundError
from board.models import Comment, User
from board.schemas import ArticleCommentCreate, ArticleCommentResponse

logger = logging.getLogger(__name__)


def _node_to_response(node: CommentNode, article_id: int) -> ArticleCommentResponse:
    record = node.record
    return ArticleCommentResponse(
        id=record.id,
        article_id=article_id,
        user_id=record.user_id,
        parent_comment_id=record.parent_comment_id,
        content=record.content,
        created_at=record.created_at,
        created_by=record.created_by,
        child_comments=[_node_to_response(child, article_id) for child in node.children],
    )


async def build_article_comment_tree(
    db: AsyncSession, article_id: int
) -> list[ArticleCommentResponse]:
    """Load the comments of *article_id* and arrange them as a reply tree."""
    comments = await repositories.find_comments_by_article(db, article_id)
    roots = build_comment_tree(CommentRecord.from_comment(c) for c in comments)
    return [_node_to_response(root, article_id) for root in roots]


async def search_article_comments(
    db: AsyncSession, article_id: int
) -> list[ArticleCommentResponse]:
    """
    Return the comment tree of *article_id*.

    Raises ``ArticleNotFoundError`` when the article does not exist.
    """
    if await repositories.find_article(db, article_id) is None:
        raise ArticleNotFoundError(article_id)
    return await build_article_comment_tree(db, article_id)


async def save_comment(
    db: AsyncSession,
    article_id: int,
    user: User,
    data: ArticleCommentCreate,
) -> ArticleCommentResponse | None:
    """
    Add a comment (or a reply, when ``parent_comment_id`` is set) to the
    article.

    Returns None and logs a warning when the article does not exist.
    Raises ``CommentNotFoundError`` when the parent is missing or belongs
    to a different article.
    """
    article = await repositories.find_article(db, article_id)
    if article is None:
        logger.warning("Comment save failed: article not found - article_id: %s", article_id)
        return None

    if data.parent_comment_id is not None:
        parent = await repositories.find_comment(db, data.parent_comment_id)
        if parent is None or parent.article_id != article_id:
            raise CommentNotFoundError(data.parent_comment_id)

    comment = Comment(
        content=data.content,
        article_id=article_id,
        user_id=user.id,
        parent_comment_id=data.parent_comment_id,
        created_by=user.username,
        modified_by=user.username,
    )
    db.add(comment)
    await db.flush()

    await cache.invalidate_comments(article_id)
    return _node_to_response(CommentNode(CommentRecord.from_comment(comment)), article_id)


async def update_comment(
    db: AsyncSession, comment_id: int, user: User, content: str
) -> ArticleCommentResponse | None:
    """
    Replace the content of a comment.

    Returns None (and logs a warning) when the comment does not exist or
    *user* is not its author; nothing is modified in either case.
    """
    comment = await repositories.find_comment(db, comment_id)
    if comment is None:
        logger.warning("Comment update failed: comment not found - comment_id: %s", comment_id)
        return None
    if comment.user_id != user.id:
        logger.warning(
            "Comment update failed: %s is not the author - comment_id: %s",
            user.username,
            comment_id,
        )
        return None

    comment.content = content
    comment.modified_by = user.username
    await db.flush()

    await cache.invalidate_comments(comment.article_id)
    return _node_to_response(CommentNode(CommentRecord.from_comment(comment)), comment.article_id)


async def delete_comment(db: AsyncSession, comment_id: int, user_id: int) -> bool:
    """
    Delete the comment and every reply beneath it.

    Returns False when the comment does not exist or *user_id* is not its
    author.
    """
    comment = await repositories.find_comment(db, comment_id)
    if comment is None:
        logger.warning("Comment delete failed: comment not found - comment_id: %s", comment_id)
        return False
    if comment.user_id != user_id:
        logger.warning(
            "Comment delete failed: user %s is not the author - comment_id: %s",
            user_id,
            comment_id,
        )
        return False

    article_id = comment.article_id
    siblings = await repositories.find_comments_by_article(db, article_id)
    doomed = subtree_ids((CommentRecord.from_comment(c) for c in siblings), comment_id)
    deleted = await repositories.delete_comments(db, doomed)
    logger.info("Deleted comment %s and %d descendant(s)", comment_id, deleted - 1)

    await cache.invalidate_comments(article_id)
    return True
