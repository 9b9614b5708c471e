"""
Seed service — populates a fresh or sparse database with sample data.

The generated dataset is deterministic for a given random seed: authors
and comment counts come from a private ``random.Random`` instance, and
timestamps step back one minute per post from a single ``now`` so that
post 1 is the most recent.
"""
import logging
import random
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from blogstore.config import settings
from blogstore.migrations import upgrade_database
from blogstore.models import Comment, Post, User
from blogstore.schemas import SeedResult

logger = logging.getLogger(__name__)


def build_sample_data(
    rng: random.Random,
    now: datetime,
    user_count: int,
    post_count: int,
    max_comments: int,
) -> tuple[list[User], list[Post], list[Comment]]:
    """Return unsaved users, posts and comments wired through relationships."""
    users = [User(name=f"User{i}") for i in range(1, user_count + 1)]

    posts: list[Post] = []
    for i in range(1, post_count + 1):
        posts.append(
            Post(
                title=f"Post {i} Title",
                content=f"This is the content of post {i}. Sample text to enable searching and testing.",
                created_at=now - timedelta(minutes=i),
                author=rng.choice(users),
            )
        )

    comments: list[Comment] = []
    for i, post in enumerate(posts):
        for c in range(rng.randint(0, max_comments)):
            comments.append(
                Comment(
                    content=f"Comment {c + 1} on post {i + 1}",
                    created_at=now - timedelta(minutes=i + c),
                    post=post,
                    author=rng.choice(users),
                )
            )

    return users, posts, comments


async def count_posts(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Post))).scalar_one()


async def seed_sample_data(db: AsyncSession, rng: random.Random | None = None) -> SeedResult:
    """
    Insert the sample dataset when fewer than ``SEED_POST_THRESHOLD`` posts
    exist.  Users, posts and comments are added in that order and written
    by one commit.

    Returns the number of rows created per table (all zero when skipped).
    Any persistence error rolls the session back and is re-raised; the
    caller logs it.
    """
    existing = await count_posts(db)
    if existing >= settings.SEED_POST_THRESHOLD:
        logger.info("Skipping sample data: existing posts = %d", existing)
        return SeedResult()

    logger.info("Seeding sample data: existing posts = %d", existing)
    if rng is None:
        rng = random.Random(settings.SEED_RANDOM_SEED)

    users, posts, comments = build_sample_data(
        rng,
        datetime.now(timezone.utc),
        settings.SEED_USER_COUNT,
        settings.SEED_POST_COUNT,
        settings.SEED_MAX_COMMENTS_PER_POST,
    )

    try:
        db.add_all(users)
        db.add_all(posts)
        db.add_all(comments)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    result = SeedResult(users=len(users), posts=len(posts), comments=len(comments))
    logger.info(
        "Seeded sample data: posts=%d users=%d comments=%d",
        result.posts,
        result.users,
        result.comments,
    )
    return result


async def initialize_database(
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
) -> SeedResult:
    """Startup routine: apply pending migrations, then seed if needed."""
    try:
        await upgrade_database(engine)
        async with session_factory() as db:
            return await seed_sample_data(db)
    except Exception:
        logger.exception("An error occurred while initializing the database.")
        raise
