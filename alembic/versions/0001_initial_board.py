"""Initial board schema.

Revision ID: 0001_initial_board
Revises:
Create Date: 2026-10-19 12:00:00.000000

Changes:
  1. users, articles, hashtags, article_comments tables
  2. article_hashtags link table
  3. case-insensitive unique index on hashtags.name
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_initial_board"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("email", sa.String(100), nullable=False, unique=True),
        sa.Column("nickname", sa.String(100), nullable=True),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "hashtags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_hashtags_name", "hashtags", ["name"])
    op.create_index("uq_hashtags_name_lower", "hashtags", [sa.text("lower(name)")], unique=True)

    op.create_table(
        "articles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(100), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_by", sa.String(100), nullable=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    op.create_index("ix_articles_title", "articles", ["title"])
    op.create_index("ix_articles_created_at", "articles", ["created_at"])
    op.create_index("ix_articles_user_id", "articles", ["user_id"])
    op.create_index("ix_articles_user_id_created_at", "articles", ["user_id", "created_at"])

    op.create_table(
        "article_hashtags",
        sa.Column(
            "article_id",
            sa.Integer(),
            sa.ForeignKey("articles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "hashtag_id",
            sa.Integer(),
            sa.ForeignKey("hashtags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index("ix_article_hashtags_hashtag_id", "article_hashtags", ["hashtag_id"])

    op.create_table(
        "article_comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(100), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_by", sa.String(100), nullable=True),
        sa.Column(
            "article_id",
            sa.Integer(),
            sa.ForeignKey("articles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "parent_comment_id",
            sa.Integer(),
            sa.ForeignKey("article_comments.id", ondelete="CASCADE"),
            nullable=True,
        ),
    )
    op.create_index(
        "ix_article_comments_article_id_created_at",
        "article_comments",
        ["article_id", "created_at"],
    )
    op.create_index("ix_article_comments_user_id", "article_comments", ["user_id"])
    op.create_index("ix_article_comments_parent_comment_id", "article_comments", ["parent_comment_id"])


def downgrade() -> None:
    op.drop_table("article_comments")
    op.drop_table("article_hashtags")
    op.drop_table("articles")
    op.drop_index("uq_hashtags_name_lower", table_name="hashtags")
    op.drop_table("hashtags")
    op.drop_table("users")
