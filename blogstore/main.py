"""
Console entry point: prepare the database, then exercise each query once
and log what comes back.
"""
import argparse
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from blogstore import database
from blogstore.config import settings
from blogstore.instrumentation import get_query_count, reset_query_count
from blogstore.log import configure_logging
from blogstore.schemas import SortKey
from blogstore.services import post_service
from blogstore.services.seed_service import initialize_database

logger = logging.getLogger(__name__)


async def exercise_queries(
    db: AsyncSession,
    report_items: int = 50,
    query: str | None = "post",
    max_results: int = 10,
    skip: int = 10,
    take: int = 10,
    order_key: SortKey | str = SortKey.CREATED_AT,
    descending: bool = True,
) -> None:
    """
    Call the report generator, the simple search and the paged search in
    turn.  A failing call is logged and the next one still runs.
    """
    # 1) Report generator
    reset_query_count()
    try:
        logger.info("Calling generate_post_summary_report(%d)", report_items)
        await post_service.generate_post_summary_report(db, report_items)
        logger.info(
            "generate_post_summary_report completed successfully (%d statements).",
            get_query_count(),
        )
    except NotImplementedError:
        logger.warning("generate_post_summary_report is not implemented.")
    except Exception:
        logger.exception("generate_post_summary_report raised an exception.")

    # 2) Simple search
    reset_query_count()
    try:
        logger.info("Calling search_post_summaries(%r, %d)", query, max_results)
        results = await post_service.search_post_summaries(db, query, max_results)
        logger.info(
            "search_post_summaries returned %d items (%d statements).",
            len(results),
            get_query_count(),
        )
        for dto in results[:5]:
            logger.info(
                "Search result: %d %s %s Comments=%d",
                dto.id, dto.title, dto.author_name, dto.comment_count,
            )
    except NotImplementedError:
        logger.warning("search_post_summaries is not implemented.")
    except Exception:
        logger.exception("search_post_summaries raised an exception.")

    # 3) Paged search
    reset_query_count()
    try:
        logger.info(
            "Calling search_post_summaries_paged(%r, skip=%d, take=%d, order_key=%s, descending=%s)",
            query, skip, take, getattr(order_key, "value", order_key), descending,
        )
        page = await post_service.search_post_summaries_paged(
            db, query, skip, take, order_key, descending
        )
        logger.info(
            "Paged search returned %d items (%d statements).",
            len(page),
            get_query_count(),
        )
        for dto in page:
            logger.info("Paged: %d %s %s", dto.id, dto.title, dto.created_at.isoformat())
    except NotImplementedError:
        logger.warning("search_post_summaries_paged is not implemented.")
    except Exception:
        logger.exception("search_post_summaries_paged raised an exception.")


async def run(
    engine: AsyncEngine | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    **query_options,
) -> None:
    """Initialise the database, exercise the queries, dispose the engine.

    Initialisation failures propagate; the engine is disposed either way.
    """
    if engine is None:
        engine = database.engine
    if session_factory is None:
        session_factory = database.async_session
    try:
        await initialize_database(engine, session_factory)
        async with session_factory() as db:
            await exercise_queries(db, **query_options)
    finally:
        await engine.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blogstore",
        description="Seed the blog database and run the sample post queries",
    )
    parser.add_argument("--report-items", type=int, default=50, help="Posts included in the summary report")
    parser.add_argument("--query", default="post", help="Search text (blank disables filtering)")
    parser.add_argument("--max-results", type=int, default=10, help="Limit for the simple search")
    parser.add_argument("--skip", type=int, default=10, help="Rows skipped by the paged search")
    parser.add_argument("--take", type=int, default=10, help="Page size for the paged search")
    parser.add_argument(
        "--order-by",
        default=SortKey.CREATED_AT.value,
        help=f"Paged search sort key ({', '.join(k.value for k in SortKey)})",
    )
    parser.add_argument("--ascending", action="store_true", help="Sort the paged search ascending")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    asyncio.run(
        run(
            report_items=args.report_items,
            query=args.query,
            max_results=args.max_results,
            skip=args.skip,
            take=args.take,
            order_key=args.order_by,
            descending=not args.ascending,
        )
    )


if __name__ == "__main__":
    main()
