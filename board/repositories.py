"""
Repository functions — every SQL statement the services need.

Entities hold foreign keys only, so relationships are navigated here with
explicit queries instead of ORM back-collections.  Like the services, these
functions flush but never commit.
"""
from collections import defaultdict
from typing import Iterable

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from board.models import Article, Comment, Hashtag, User, article_hashtags


# ---------------------------------------------------------------------------
# Users / articles
# ---------------------------------------------------------------------------

async def find_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def find_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def find_users_by_ids(db: AsyncSession, user_ids: Iterable[int]) -> dict[int, User]:
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in result.scalars().all()}


async def find_article(db: AsyncSession, article_id: int) -> Article | None:
    return await db.get(Article, article_id)


async def count_articles(db: AsyncSession, user_id: int | None = None) -> int:
    q = select(func.count()).select_from(Article)
    if user_id is not None:
        q = q.where(Article.user_id == user_id)
    return (await db.execute(q)).scalar_one()


async def delete_article_cascade(db: AsyncSession, article_id: int) -> list[int]:
    """
    Delete an article together with its comments and hashtag links.

    Returns the ids of the hashtags that were linked to it so the caller can
    prune the ones left without articles.
    """
    hashtag_ids = await unlink_hashtags(db, article_id)
    await db.execute(delete(Comment).where(Comment.article_id == article_id))
    await db.execute(delete(Article).where(Article.id == article_id))
    await db.flush()
    return hashtag_ids


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

async def find_comments_by_article(db: AsyncSession, article_id: int) -> list[Comment]:
    result = await db.execute(select(Comment).where(Comment.article_id == article_id))
    return list(result.scalars().all())


async def find_comment(db: AsyncSession, comment_id: int) -> Comment | None:
    return await db.get(Comment, comment_id)


async def delete_comments(db: AsyncSession, comment_ids: Iterable[int]) -> int:
    ids = list(comment_ids)
    if not ids:
        return 0
    result = await db.execute(delete(Comment).where(Comment.id.in_(ids)))
    await db.flush()
    return result.rowcount


# ---------------------------------------------------------------------------
# Hashtags
# ---------------------------------------------------------------------------

async def find_hashtag(db: AsyncSession, hashtag_id: int) -> Hashtag | None:
    # Always hits the database; a row removed by a bulk delete earlier in the
    # transaction must read as absent.
    result = await db.execute(select(Hashtag).where(Hashtag.id == hashtag_id))
    return result.scalar_one_or_none()


async def find_hashtag_by_name(db: AsyncSession, name: str) -> Hashtag | None:
    """Case-insensitive lookup, matching the ``lower(name)`` unique index."""
    result = await db.execute(
        select(Hashtag).where(func.lower(Hashtag.name) == name.lower())
    )
    return result.scalar_one_or_none()


async def find_hashtags_by_article(db: AsyncSession, article_id: int) -> list[Hashtag]:
    result = await db.execute(
        select(Hashtag)
        .join(article_hashtags, article_hashtags.c.hashtag_id == Hashtag.id)
        .where(article_hashtags.c.article_id == article_id)
        .order_by(Hashtag.name)
    )
    return list(result.scalars().all())


async def find_hashtags_by_articles(
    db: AsyncSession, article_ids: Iterable[int]
) -> dict[int, list[Hashtag]]:
    """Load the hashtags of a whole result page in one statement."""
    ids = list(article_ids)
    grouped: dict[int, list[Hashtag]] = defaultdict(list)
    if not ids:
        return grouped
    result = await db.execute(
        select(article_hashtags.c.article_id, Hashtag)
        .join(Hashtag, article_hashtags.c.hashtag_id == Hashtag.id)
        .where(article_hashtags.c.article_id.in_(ids))
        .order_by(Hashtag.name)
    )
    for article_id, hashtag in result.all():
        grouped[article_id].append(hashtag)
    return grouped


async def find_all_hashtag_names(db: AsyncSession) -> list[str]:
    result = await db.execute(select(Hashtag.name).distinct().order_by(Hashtag.name))
    return list(result.scalars().all())


async def count_articles_referencing(db: AsyncSession, hashtag_id: int) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(article_hashtags)
        .where(article_hashtags.c.hashtag_id == hashtag_id)
    )
    return result.scalar_one()


async def save_hashtag(db: AsyncSession, hashtag: Hashtag) -> Hashtag:
    db.add(hashtag)
    await db.flush()
    return hashtag


async def delete_hashtag(db: AsyncSession, hashtag_id: int) -> None:
    await db.execute(delete(Hashtag).where(Hashtag.id == hashtag_id))
    await db.flush()


async def link_hashtags(
    db: AsyncSession, article_id: int, hashtag_ids: Iterable[int]
) -> None:
    rows = [{"article_id": article_id, "hashtag_id": hid} for hid in sorted(set(hashtag_ids))]
    if rows:
        await db.execute(insert(article_hashtags), rows)
        await db.flush()


async def unlink_hashtags(db: AsyncSession, article_id: int) -> list[int]:
    """Remove every hashtag link of *article_id*, returning the unlinked ids."""
    result = await db.execute(
        select(article_hashtags.c.hashtag_id).where(article_hashtags.c.article_id == article_id)
    )
    hashtag_ids = list(result.scalars().all())
    if hashtag_ids:
        await db.execute(
            delete(article_hashtags).where(article_hashtags.c.article_id == article_id)
        )
        await db.flush()
    return hashtag_ids
