"""
User service — registration, lookup and credential checks for User.

Passwords are stored as argon2 hashes only; plain text never leaves
``create_user`` / ``authenticate``.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from board import repositories
from board.models import User
from board.schemas import UserCreate
from board.security import hash_password, verify_password

logger = logging.getLogger(__name__)


def _user_to_dict(user: User) -> dict:
    """Serialise a User ORM instance to a plain dict (no credentials)."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "nickname": user.nickname,
        "memo": user.memo,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def get_users(db: AsyncSession) -> list[dict]:
    """Return all users ordered by creation date (newest first)."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return [_user_to_dict(u) for u in result.scalars().all()]


async def get_user(db: AsyncSession, user_id: int) -> dict | None:
    """
    Return *user_id* with the number of articles they have written, or
    None when the user does not exist.
    """
    user = await repositories.find_user(db, user_id)
    if user is None:
        return None
    data = _user_to_dict(user)
    data["article_count"] = await repositories.count_articles(db, user_id=user_id)
    return data


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    """
    Register a new user and return its serialised dict.

    Username and email uniqueness is enforced by the database; the router
    turns the resulting ``IntegrityError`` into a 409.
    """
    user = User(
        username=data.username,
        password_hash=hash_password(data.password),
        email=data.email,
        nickname=data.nickname,
        memo=data.memo,
    )
    db.add(user)
    await db.flush()
    logger.info("User registered - username: %s", user.username)
    return _user_to_dict(user)


async def authenticate(db: AsyncSession, username: str, password: str) -> User | None:
    user = await repositories.find_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
