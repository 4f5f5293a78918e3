"""
Article service — business logic for the Article aggregate.

Design notes
------------
- Search pages and the article detail view go through the cache-aside
  pattern (Redis, then the database).  Cache keys encode every dimension
  that affects the result, and every write purges what it can change.
- Articles carry no ORM collections.  Authors are joined in the search
  query; hashtags for a whole page are loaded with one extra statement
  through ``board.repositories``.
- Hashtags are never supplied by the client: they are extracted from the
  content on save and on every content change, then reconciled so no
  hashtag is left without articles.
- Writes by anyone other than the author, or against a missing article,
  are logged and ignored; the router decides what the client sees.
- Service functions flush but do not commit; the transaction boundary is
  owned by ``session_scope`` via the ``get_db`` dependency.
"""
import logging
import math

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from board import repositories
from board.cache import cache, detail_key, search_key
from board.config import settings
from board.exceptions import ArticleNotFoundError
from board.hashtags import extract_hashtag_names
from board.models import Article, Hashtag, User, article_hashtags
from board.schemas import (
    ArticleCreate,
    ArticleResponse,
    ArticleUpdate,
    ArticleWithCommentsResponse,
    HashtagResponse,
    PaginatedResponse,
    SearchType,
    UserResponse,
)
from board.services import comment_service, hashtag_service
from board.services.pagination_service import get_pagination_bar_numbers

logger = logging.getLogger(__name__)

# Columns that are safe to sort by; guards against arbitrary attribute access.
_SORTABLE_COLUMNS: frozenset[str] = frozenset(
    {"created_at", "modified_at", "title", "created_by"}
)


def _resolve_sort_column(sort_by: str):
    """Return the column for *sort_by*, falling back to ``created_at``."""
    if sort_by in _SORTABLE_COLUMNS:
        return getattr(Article, sort_by)
    return Article.created_at


def _hashtag_search_names(keyword: str) -> list[str]:
    """Split a hashtag query like ``"#java spring"`` into lowercase names."""
    names = (part.lstrip("#").lower() for part in keyword.split())
    return [name for name in names if name]


def _search_condition(search_type: SearchType, keyword: str):
    if search_type is SearchType.TITLE:
        return Article.title.icontains(keyword)
    if search_type is SearchType.CONTENT:
        return Article.content.icontains(keyword)
    if search_type is SearchType.ID:
        return User.username.icontains(keyword)
    if search_type is SearchType.NICKNAME:
        return User.nickname.icontains(keyword)
    tagged = (
        select(article_hashtags.c.article_id)
        .join(Hashtag, article_hashtags.c.hashtag_id == Hashtag.id)
        .where(func.lower(Hashtag.name).in_(_hashtag_search_names(keyword)))
    )
    return Article.id.in_(tagged)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _to_response(article: Article, author: User | None, hashtags: list[Hashtag]) -> ArticleResponse:
    return ArticleResponse(
        id=article.id,
        title=article.title,
        content=article.content,
        created_at=article.created_at,
        created_by=article.created_by,
        modified_at=article.modified_at,
        modified_by=article.modified_by,
        user_id=article.user_id,
        author=UserResponse.model_validate(author) if author is not None else None,
        hashtags=[HashtagResponse.model_validate(h) for h in hashtags],
    )


def _empty_page(page: int, page_size: int) -> PaginatedResponse:
    return PaginatedResponse(items=[], total=0, page=page, page_size=page_size, pages=0)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def search_articles(
    db: AsyncSession,
    search_type: SearchType | None = None,
    search_keyword: str | None = None,
    page: int = 1,
    page_size: int = settings.DEFAULT_PAGE_SIZE,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> PaginatedResponse:
    """
    Return one page of articles, optionally filtered by *search_type*.

    A blank keyword (or no search type) lists every article.  Two SQL
    statements are issued on a cache miss for the page itself, plus one for
    the hashtags of the articles on it.
    """
    keyword = (search_keyword or "").strip()
    if search_type is None or not keyword:
        search_type, keyword = None, ""

    cache_key = search_key(
        search_type.value if search_type else "", keyword, page, page_size, sort_by, sort_order
    )
    cached = await cache.get(cache_key)
    if cached:
        return PaginatedResponse(**cached)

    conditions = [] if search_type is None else [_search_condition(search_type, keyword)]

    # 1. Total count
    count_q = (
        select(func.count(Article.id))
        .join(User, Article.user_id == User.id)
        .where(*conditions)
    )
    total: int = (await db.execute(count_q)).scalar_one()

    # 2. Page rows with their authors
    sort_col = _resolve_sort_column(sort_by)
    order_expr = desc(sort_col) if sort_order == "desc" else asc(sort_col)
    articles_q = (
        select(Article, User)
        .join(User, Article.user_id == User.id)
        .where(*conditions)
        .order_by(order_expr, desc(Article.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    rows = (await db.execute(articles_q)).all()

    hashtags = await repositories.find_hashtags_by_articles(db, (a.id for a, _ in rows))
    pages = math.ceil(total / page_size) if total > 0 else 0
    response = PaginatedResponse(
        items=[_to_response(article, author, hashtags.get(article.id, [])) for article, author in rows],
        total=total,
        page=page,
        page_size=page_size,
        pages=pages,
        bar_numbers=get_pagination_bar_numbers(page, pages),
    )
    await cache.set(cache_key, response.model_dump(mode="json"), ttl=settings.CACHE_TTL_LIST)
    return response


async def search_articles_via_hashtag(
    db: AsyncSession,
    hashtag_name: str | None,
    page: int = 1,
    page_size: int = settings.DEFAULT_PAGE_SIZE,
) -> PaginatedResponse:
    """Articles tagged with any of the names in *hashtag_name*; blank gives an empty page."""
    if not hashtag_name or not _hashtag_search_names(hashtag_name):
        return _empty_page(page, page_size)
    return await search_articles(db, SearchType.HASHTAG, hashtag_name, page, page_size)


async def get_article(db: AsyncSession, article_id: int) -> ArticleResponse:
    article = await repositories.find_article(db, article_id)
    if article is None:
        raise ArticleNotFoundError(article_id)
    author = await repositories.find_user(db, article.user_id)
    hashtags = await repositories.find_hashtags_by_article(db, article_id)
    return _to_response(article, author, hashtags)


async def get_article_with_comments(db: AsyncSession, article_id: int) -> ArticleWithCommentsResponse:
    """
    Return the article with its comments arranged as a reply tree.

    Raises ``ArticleNotFoundError`` when the article does not exist.
    """
    cached = await cache.get(detail_key(article_id))
    if cached:
        return ArticleWithCommentsResponse.model_validate(cached)

    article = await get_article(db, article_id)
    comments = await comment_service.build_article_comment_tree(db, article_id)
    detail = ArticleWithCommentsResponse(**article.model_dump(), comments=comments)
    await cache.set(detail_key(article_id), detail.model_dump(mode="json"), ttl=settings.CACHE_TTL_DETAIL)
    return detail


async def get_article_count(db: AsyncSession) -> int:
    return await repositories.count_articles(db)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def _replace_hashtags(db: AsyncSession, article: Article) -> None:
    """Re-link *article* to the hashtags in its content and prune the dropped ones."""
    old_ids = await repositories.unlink_hashtags(db, article.id)
    hashtags = await hashtag_service.resolve_hashtags(db, extract_hashtag_names(article.content))
    await repositories.link_hashtags(db, article.id, (h.id for h in hashtags))
    await hashtag_service.prune_orphan_hashtags(db, old_ids)


async def save_article(db: AsyncSession, user: User, data: ArticleCreate) -> int:
    """Create an article for *user*, tag it from its content and return its id."""
    article = Article(
        title=data.title,
        content=data.content,
        user_id=user.id,
        created_by=user.username,
        modified_by=user.username,
    )
    db.add(article)
    await db.flush()

    await _replace_hashtags(db, article)
    await cache.invalidate_article()
    logger.info("Article saved - article_id: %s, user: %s", article.id, user.username)
    return article.id


async def update_article(
    db: AsyncSession, article_id: int, user: User, data: ArticleUpdate
) -> ArticleResponse | None:
    """
    Apply *data* to the article and return the updated view.

    Returns None (and logs a warning) when the article does not exist or
    *user* is not its author; nothing is modified in either case.
    """
    article = await repositories.find_article(db, article_id)
    if article is None:
        logger.warning("Article update failed: article not found - article_id: %s", article_id)
        return None
    if article.user_id != user.id:
        logger.warning(
            "Article update failed: %s is not the author - article_id: %s",
            user.username,
            article_id,
        )
        return None

    if data.title is not None:
        article.title = data.title
    if data.content is not None:
        article.content = data.content
    article.modified_by = user.username
    await db.flush()

    if data.content is not None:
        await _replace_hashtags(db, article)

    await cache.invalidate_article(article_id)
    return await get_article(db, article_id)


async def delete_article(db: AsyncSession, article_id: int, user_id: int) -> bool:
    """
    Delete the article, its comments and its hashtag links.

    Returns False when the article does not exist or *user_id* is not the
    author.
    """
    article = await repositories.find_article(db, article_id)
    if article is None:
        logger.warning("Article delete failed: article not found - article_id: %s", article_id)
        return False
    if article.user_id != user_id:
        logger.warning(
            "Article delete failed: user %s is not the author - article_id: %s",
            user_id,
            article_id,
        )
        return False

    hashtag_ids = await repositories.delete_article_cascade(db, article_id)
    await hashtag_service.prune_orphan_hashtags(db, hashtag_ids)
    await cache.invalidate_article(article_id)
    return True
