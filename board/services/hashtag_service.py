"""
Hashtag service — maps hashtag names to persisted rows and removes rows
that no article uses any more.

Concurrent article updates can race on the same "before" state.  The
``lower(name)`` unique index turns a duplicate insert into an
``IntegrityError`` for one of the transactions, and pruning can safely be
re-run, so a retried transaction converges.  Isolation is not serializable.
"""
import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from board import repositories
from board.models import Hashtag

logger = logging.getLogger(__name__)


async def resolve_hashtags(db: AsyncSession, names: Iterable[str]) -> set[Hashtag]:
    """
    Return a Hashtag row for every name in *names*, creating missing ones.

    Names that differ only by case map to the same row; when the row does
    not exist yet, the alphabetically first spelling is stored.
    """
    hashtags: set[Hashtag] = set()
    seen: set[str] = set()
    for name in sorted(names):
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        hashtag = await repositories.find_hashtag_by_name(db, name)
        if hashtag is None:
            hashtag = await repositories.save_hashtag(db, Hashtag(name=name))
            logger.debug("Created hashtag %r (id=%s)", hashtag.name, hashtag.id)
        hashtags.add(hashtag)
    return hashtags


async def prune_orphan_hashtags(db: AsyncSession, hashtag_ids: Iterable[int]) -> None:
    """
    Delete each candidate hashtag that no article references any more.

    Ids that no longer exist are skipped, so calling this twice with the
    same candidates is harmless.
    """
    for hashtag_id in set(hashtag_ids):
        hashtag = await repositories.find_hashtag(db, hashtag_id)
        if hashtag is None:
            continue
        if await repositories.count_articles_referencing(db, hashtag_id) == 0:
            await repositories.delete_hashtag(db, hashtag_id)
            logger.info("Pruned hashtag %r (id=%s) with no articles", hashtag.name, hashtag_id)


async def get_hashtag_names(db: AsyncSession) -> list[str]:
    return await repositories.find_all_hashtag_names(db)
