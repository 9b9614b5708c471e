"""Database seeder for the blog sample data."""
import asyncio
import argparse
import time

from blogstore.database import engine, async_session
from blogstore.log import configure_logging
from blogstore.migrations import downgrade_database
from blogstore.services.seed_service import initialize_database


async def seed(reset: bool = False):
    start = time.perf_counter()

    try:
        if reset:
            print("Dropping existing schema")
            await downgrade_database(engine)
        result = await initialize_database(engine, async_session)
    finally:
        await engine.dispose()

    elapsed = time.perf_counter() - start
    if not result.seeded:
        print(f"Database already populated; nothing to do ({elapsed:.1f}s)")
        return
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {result.users}")
    print(f"  Posts: {result.posts}")
    print(f"  Comments: {result.comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--reset", action="store_true", help="Drop all tables before seeding")
    args = parser.parse_args()
    configure_logging()
    asyncio.run(seed(reset=args.reset))


if __name__ == "__main__":
    main()
