"""
Hashtag tests — extraction from text, and reconciliation against the
database (resolve, prune, idempotence).
"""
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from board import repositories
from board.hashtags import extract_hashtag_names
from board.models import Article, Hashtag, User
from board.services import hashtag_service


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def test_hyphen_ends_the_token():
    assert extract_hashtag_names("hello #java and #spring-boot") == {"java", "spring"}


def test_extraction_keeps_case_and_dedupes_exact_tokens():
    assert extract_hashtag_names("#Java #java #Java") == {"Java", "java"}


@pytest.mark.parametrize("text", [None, "", "no tags here", "# spaced", "trailing #"])
def test_no_hashtags(text):
    assert extract_hashtag_names(text) == set()


def test_punctuation_boundaries():
    text = "#python, #fastapi. (#sqlalchemy) #pydantic!#redis"
    assert extract_hashtag_names(text) == {"python", "fastapi", "sqlalchemy", "pydantic", "redis"}


def test_underscores_digits_and_unicode_are_word_characters():
    assert extract_hashtag_names("#spring_boot #java17 #자바") == {"spring_boot", "java17", "자바"}


def test_adjacent_hashtags_split_on_marker():
    assert extract_hashtag_names("#a#b ##c") == {"a", "b", "c"}


def test_over_long_token_is_not_a_hashtag():
    text = "#" + "a" * 300 + " and #java"
    assert extract_hashtag_names(text) == {"java"}


def test_longest_hashtag_fits_the_name_column():
    column_length = Hashtag.__table__.c.name.type.length
    names = extract_hashtag_names("#" + "b" * column_length + " #" + "c" * (column_length + 1))
    assert names == {"b" * column_length}
    assert all(len(name) <= column_length for name in names)


# ---------------------------------------------------------------------------
# Reconciliation helpers
# ---------------------------------------------------------------------------

async def _article(db: AsyncSession, title: str = "title") -> Article:
    user = await repositories.find_user_by_username(db, "tagger")
    if user is None:
        user = User(username="tagger", password_hash="x", email="tagger@example.com")
        db.add(user)
        await db.flush()
    article = Article(title=title, content="content", user_id=user.id, created_by=user.username)
    db.add(article)
    await db.flush()
    return article


async def _hashtag_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Hashtag))).scalar_one()


# ---------------------------------------------------------------------------
# resolve_hashtags
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_resolve_creates_missing_hashtags(db_session: AsyncSession):
    hashtags = await hashtag_service.resolve_hashtags(db_session, {"java", "spring"})
    assert {h.name for h in hashtags} == {"java", "spring"}
    assert all(h.id is not None for h in hashtags)
    assert await _hashtag_count(db_session) == 2


@pytest.mark.asyncio
async def test_resolve_reuses_existing_rows(db_session: AsyncSession):
    first = await hashtag_service.resolve_hashtags(db_session, {"java"})
    second = await hashtag_service.resolve_hashtags(db_session, {"java", "kotlin"})
    (java,) = first
    assert java.id in {h.id for h in second}
    assert await _hashtag_count(db_session) == 2


@pytest.mark.asyncio
async def test_resolve_matches_case_insensitively(db_session: AsyncSession):
    (original,) = await hashtag_service.resolve_hashtags(db_session, {"Java"})
    resolved = await hashtag_service.resolve_hashtags(db_session, {"JAVA", "java"})
    assert {h.id for h in resolved} == {original.id}
    assert original.name == "Java"
    assert await _hashtag_count(db_session) == 1


@pytest.mark.asyncio
async def test_resolve_empty_set(db_session: AsyncSession):
    assert await hashtag_service.resolve_hashtags(db_session, set()) == set()


# ---------------------------------------------------------------------------
# prune_orphan_hashtags
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_prune_deletes_only_unreferenced(db_session: AsyncSession):
    article = await _article(db_session)
    hashtags = {h.name: h for h in await hashtag_service.resolve_hashtags(db_session, {"kept", "orphan"})}
    await repositories.link_hashtags(db_session, article.id, [hashtags["kept"].id])

    await hashtag_service.prune_orphan_hashtags(db_session, [h.id for h in hashtags.values()])

    assert await repositories.find_hashtag_by_name(db_session, "kept") is not None
    assert await repositories.find_hashtag_by_name(db_session, "orphan") is None


@pytest.mark.asyncio
async def test_prune_twice_is_idempotent(db_session: AsyncSession):
    article = await _article(db_session)
    hashtags = await hashtag_service.resolve_hashtags(db_session, {"java", "spring"})
    ids = [h.id for h in hashtags]
    await repositories.link_hashtags(db_session, article.id, ids)

    unlinked = await repositories.unlink_hashtags(db_session, article.id)
    assert sorted(unlinked) == sorted(ids)

    await hashtag_service.prune_orphan_hashtags(db_session, unlinked)
    assert await _hashtag_count(db_session) == 0

    await hashtag_service.prune_orphan_hashtags(db_session, unlinked)
    assert await _hashtag_count(db_session) == 0


@pytest.mark.asyncio
async def test_prune_keeps_hashtag_shared_with_another_article(db_session: AsyncSession):
    first = await _article(db_session, "first")
    second = await _article(db_session, "second")
    (shared,) = await hashtag_service.resolve_hashtags(db_session, {"shared"})
    await repositories.link_hashtags(db_session, first.id, [shared.id])
    await repositories.link_hashtags(db_session, second.id, [shared.id])

    await repositories.unlink_hashtags(db_session, first.id)
    await hashtag_service.prune_orphan_hashtags(db_session, [shared.id])

    assert await repositories.count_articles_referencing(db_session, shared.id) == 1
    assert await repositories.find_hashtag(db_session, shared.id) is not None


@pytest.mark.asyncio
async def test_prune_unknown_id_is_noop(db_session: AsyncSession):
    await hashtag_service.prune_orphan_hashtags(db_session, [12345])
    assert await _hashtag_count(db_session) == 0


@pytest.mark.asyncio
async def test_get_hashtag_names_sorted(db_session: AsyncSession):
    await hashtag_service.resolve_hashtags(db_session, {"spring", "boot", "java"})
    assert await hashtag_service.get_hashtag_names(db_session) == ["boot", "java", "spring"]
