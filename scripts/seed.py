"""Database seeder for the board: users, hashtagged articles and reply threads."""
import asyncio
import argparse
import random
import time

from board import repositories
from board.database import engine, Base, session_scope
from board.schemas import ArticleCommentCreate, ArticleCreate, UserCreate
from board.services import article_service, comment_service, user_service

HASHTAGS = ["python", "fastapi", "postgresql", "redis", "docker", "kubernetes",
            "spring", "java", "typescript", "aws", "devops", "testing"]

SEED_PASSWORD = "seed-password"


async def seed(small: bool = False):
    num_users = 5 if small else 30
    num_articles = 50 if small else 2000
    max_comments = 4 if small else 12

    print(f"Seeding: {num_users} users, {num_articles} articles, up to {max_comments} comments each")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with session_scope() as session:
        users = []
        for i in range(num_users):
            created = await user_service.create_user(session, UserCreate(
                username=f"user_{i:04d}",
                password=SEED_PASSWORD,
                email=f"user_{i:04d}@example.com",
                nickname=f"User {i}",
            ))
            users.append(await repositories.find_user(session, created["id"]))
        print(f"  Created {len(users)} users")

        total_comments = 0
        for i in range(num_articles):
            tags = " ".join(f"#{name}" for name in random.sample(HASHTAGS, k=random.randint(1, 4)))
            author = random.choice(users)
            article_id = await article_service.save_article(session, author, ArticleCreate(
                title=f"Article {i}: notes on {random.choice(HASHTAGS)}",
                content=f"This is the body of article {i}. {tags}",
            ))

            # Each comment replies to an earlier one about half the time.
            comment_ids: list[int] = []
            for _ in range(random.randint(0, max_comments)):
                parent_id = random.choice(comment_ids) if comment_ids and random.random() < 0.5 else None
                comment = await comment_service.save_comment(
                    session,
                    article_id,
                    random.choice(users),
                    ArticleCommentCreate(content="Thanks, this helped.", parent_comment_id=parent_id),
                )
                comment_ids.append(comment.id)
            total_comments += len(comment_ids)

            if (i + 1) % 500 == 0:
                print(f"  {i + 1} articles created")

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {num_users}")
    print(f"  Articles: {num_articles}")
    print(f"  Comments: {total_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the board database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (50 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
