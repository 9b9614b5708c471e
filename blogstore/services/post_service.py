"""
Post service — read-only queries over the Post aggregate.

Design notes
------------
- Nothing here loads ORM entities.  Every operation builds one ``select()``
  of labelled columns (a projection) and lets the database do the
  filtering, ordering, aggregation and paging; rows are turned into
  ``PostDto`` instances only after they come back.
- Per-post aggregates (comment count, latest commenter) are correlated
  scalar subqueries inside that same SELECT, so an operation costs one
  round-trip no matter how many posts it covers.
- The paged search only orders by the fields enumerated in ``SortKey``;
  anything else is rejected with ``UnsupportedSortKeyError`` before a
  statement is built.
- Functions take the ``AsyncSession`` as their first argument; the caller
  owns its lifetime.  Store errors propagate unchanged.
"""
import logging

from sqlalchemy import Select, Text, asc, case, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from blogstore.config import settings
from blogstore.exceptions import InvalidQueryParameterError, UnsupportedSortKeyError
from blogstore.models import Comment, Post, User
from blogstore.schemas import PostDto, SortKey

logger = logging.getLogger(__name__)

REPORT_START = "REPORT_START"
REPORT_END = "REPORT_END"
SUMMARY_PREFIX = "POST_SUMMARY"

ELLIPSIS = "..."

# ---------------------------------------------------------------------------
# Column expressions
# ---------------------------------------------------------------------------


def _comment_count_expr():
    """Correlated ``count(*)`` of the comments attached to the outer post."""
    return (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


def _latest_comment_author_expr():
    """Name of the author of the outer post's most recent comment, or NULL."""
    commenter = aliased(User)
    return (
        select(commenter.name)
        .select_from(Comment)
        .outerjoin(commenter, commenter.id == Comment.author_id)
        .where(Comment.post_id == Post.id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .limit(1)
        .correlate(Post)
        .scalar_subquery()
    )


def _excerpt_expr():
    """Content cut to ``EXCERPT_LENGTH`` characters, with an ellipsis when cut."""
    length = settings.EXCERPT_LENGTH
    return case(
        (
            func.length(Post.content) > length,
            func.substr(Post.content, 1, length, type_=Text) + ELLIPSIS,
        ),
        else_=Post.content,
    )


def _summary_select() -> tuple[Select, dict[SortKey, object]]:
    """
    Return the PostDto projection together with the SQL expression behind
    each sortable field.
    """
    author = aliased(User)
    comment_count = _comment_count_expr().label("comment_count")
    stmt = (
        select(
            Post.id.label("id"),
            Post.title.label("title"),
            _excerpt_expr().label("excerpt"),
            author.name.label("author_name"),
            comment_count,
            Post.created_at.label("created_at"),
        )
        .select_from(Post)
        .outerjoin(author, author.id == Post.author_id)
    )
    sort_columns = {
        SortKey.ID: Post.id,
        SortKey.TITLE: Post.title,
        SortKey.CREATED_AT: Post.created_at,
        SortKey.COMMENT_COUNT: comment_count,
    }
    return stmt, sort_columns


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalize_query(query: str | None) -> str | None:
    """Return the search text, or None when it should not filter at all."""
    if query is None or not query.strip():
        return None
    return query


def _apply_text_filter(stmt: Select, query: str | None) -> Select:
    """Case-insensitive substring match on title OR content."""
    text = _normalize_query(query)
    if text is None:
        return stmt
    return stmt.where(
        or_(
            Post.title.icontains(text, autoescape=True),
            Post.content.icontains(text, autoescape=True),
        )
    )


def _require_non_negative(operation: str, parameter: str, value: int) -> None:
    if value < 0:
        raise InvalidQueryParameterError(operation, parameter, value, "must not be negative")


def resolve_sort_key(order_key: SortKey | str, operation: str = "search_post_summaries_paged") -> SortKey:
    """Map *order_key* (member or value) onto ``SortKey`` or raise."""
    if isinstance(order_key, SortKey):
        return order_key
    try:
        return SortKey(order_key)
    except ValueError:
        raise UnsupportedSortKeyError(operation, order_key, [k.value for k in SortKey]) from None


def _to_dtos(rows) -> list[PostDto]:
    return [PostDto(**row._mapping) for row in rows]


def format_summary_line(post_id: int, author_name: str | None, comment_count: int, latest_comment_author: str | None) -> str:
    return "|".join(
        [
            SUMMARY_PREFIX,
            str(post_id),
            author_name or "",
            str(comment_count),
            latest_comment_author or "",
        ]
    )


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------


async def generate_post_summary_report(db: AsyncSession, max_items: int) -> list[str]:
    """
    Build the post summary report for the *max_items* highest post ids.

    The returned lines are ``REPORT_START``, one
    ``POST_SUMMARY|PostId|AuthorName|CommentCount|LatestCommentAuthor`` line
    per post (newest id first) and ``REPORT_END``.  A missing author or an
    absent comment renders as an empty field.

    One SQL statement is issued regardless of ``max_items``.
    """
    _require_non_negative("generate_post_summary_report", "max_items", max_items)

    author = aliased(User)
    q = (
        select(
            Post.id,
            author.name.label("author_name"),
            _comment_count_expr().label("comment_count"),
            _latest_comment_author_expr().label("latest_comment_author"),
        )
        .select_from(Post)
        .outerjoin(author, author.id == Post.author_id)
        .order_by(Post.id.desc())
        .limit(max_items)
    )
    result = await db.execute(q)

    lines = [REPORT_START]
    lines.extend(
        format_summary_line(row.id, row.author_name, row.comment_count, row.latest_comment_author)
        for row in result.all()
    )
    lines.append(REPORT_END)

    logger.info("\n".join(lines))
    return lines


async def search_post_summaries(
    db: AsyncSession,
    query: str | None,
    max_results: int = settings.DEFAULT_MAX_RESULTS,
) -> list[PostDto]:
    """
    Return up to *max_results* posts whose title or content contains
    *query* (case-insensitive), newest first.

    A ``None``, empty or whitespace-only *query* disables filtering.
    """
    _require_non_negative("search_post_summaries", "max_results", max_results)

    stmt, _ = _summary_select()
    stmt = (
        _apply_text_filter(stmt, query)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(max_results)
    )
    result = await db.execute(stmt)
    return _to_dtos(result.all())


async def search_post_summaries_paged(
    db: AsyncSession,
    query: str | None,
    skip: int,
    take: int,
    order_key: SortKey | str,
    descending: bool,
) -> list[PostDto]:
    """
    Return one page of post summaries.

    Filtering follows ``search_post_summaries``.  Rows are ordered by the
    PostDto field named by *order_key* with ``posts.id`` as tie-breaker
    (same direction), so consecutive pages never overlap or skip rows.
    Then *skip* rows are discarded and at most *take* are returned.

    Raises ``UnsupportedSortKeyError`` for an order key outside ``SortKey``.
    """
    operation = "search_post_summaries_paged"
    key = resolve_sort_key(order_key, operation)
    _require_non_negative(operation, "skip", skip)
    _require_non_negative(operation, "take", take)

    stmt, sort_columns = _summary_select()
    direction = desc if descending else asc
    order_by = [direction(sort_columns[key])]
    if key is not SortKey.ID:
        order_by.append(direction(Post.id))

    stmt = (
        _apply_text_filter(stmt, query)
        .order_by(*order_by)
        .offset(skip)
        .limit(take)
    )
    result = await db.execute(stmt)
    return _to_dtos(result.all())
