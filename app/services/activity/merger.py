"""Activity feed: a time-ordered merge of visible reviews and comments.

Reviews and comments come from separate queries with separate visibility
rules, so the feed cannot be produced by one ordered query. Each side keeps a
buffer of fetched rows and a cursor; a side is refilled whenever its buffer
runs dry, because visibility filtering can discard an arbitrary share of a
batch. The two sides' next visible rows are compared and the newer one is
emitted until `limit` items are produced or both sides are drained.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

import structlog
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.exceptions import DataUnavailableError
from app.services.activity.cursor import CursorState, StreamCursor, decode_position, encode_position
from app.services.activity.record import ActivityKind, ActivityRecord
from app.services.activity.sources import ActivitySource, CommentSource, ReviewSource
from app.services.activity.visibility import Viewer, VisibilityPolicy

logger = structlog.get_logger()

DEFAULT_MAX_BATCH_SIZE = 1000


@dataclass
class FeedPage:
    items: list[ActivityRecord]
    next_position: str | None
    has_more: bool
    review_cursor: StreamCursor
    comment_cursor: StreamCursor
    fetches: int = 0


@dataclass
class _Side:
    source: ActivitySource
    can_see: Callable[[Viewer, ActivityRecord], bool]
    cursor: StreamCursor
    batch_size: int
    buffer: deque = field(default_factory=deque)
    head: ActivityRecord | None = None
    fetches: int = 0

    @property
    def drained(self) -> bool:
        return self.head is None and not self.buffer and self.cursor.is_exhausted


class ActivityMerger:
    def __init__(
        self,
        review_source: ActivitySource,
        comment_source: ActivitySource,
        policy: VisibilityPolicy,
        batch_size: int | None = None,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        self.review_source = review_source
        self.comment_source = comment_source
        self.policy = policy
        self.batch_size = batch_size or 0
        self.max_batch_size = max_batch_size

    def _initial_cursor(self, position: str | None, now: int | None) -> StreamCursor:
        cursor = decode_position(position)
        if cursor.state is CursorState.START and now is not None:
            # contact ids start at 1, so this admits everything at or before `now`
            cursor = StreamCursor.before(now, 0, 0)
        return cursor

    async def _refill(self, viewer: Viewer, side: _Side) -> None:
        requested = side.batch_size
        rows = await side.source.fetch(viewer, side.cursor, requested)
        if len(rows) > requested:
            raise DataUnavailableError(
                "Activity source returned more rows than requested.",
                details={"kind": side.source.kind.value},
            )
        previous = None
        for row in rows:
            # every row must lie after the cursor, newest first
            if not side.cursor.admits(row.position):
                raise DataUnavailableError(
                    "Activity source ignored the feed position.",
                    details={"kind": side.source.kind.value, "cursor": side.cursor.encode()},
                )
            if previous is not None and row.sort_key < previous.sort_key:
                raise DataUnavailableError(
                    "Activity source returned rows out of feed order.",
                    details={"kind": side.source.kind.value, "cursor": side.cursor.encode()},
                )
            previous = row
        side.cursor = side.cursor.after_batch(rows, requested)
        side.buffer.extend(rows)
        side.fetches += 1
        side.batch_size = min(max(requested * 2, 1), max(self.max_batch_size, requested))

    async def _advance(self, viewer: Viewer, side: _Side, deadline: float | None) -> bool:
        """Make `side.head` the next visible record. Returns False if the deadline stopped it."""
        while side.head is None:
            if side.buffer:
                record = side.buffer.popleft()
                if not record.is_activity:
                    logger.warning(
                        "activity_record_without_time",
                        kind=record.kind.value,
                        contact_id=record.contact_id,
                        paper_id=record.paper_id,
                    )
                    continue
                if side.can_see(viewer, record):
                    side.head = record
                continue
            if side.cursor.is_exhausted:
                break
            if deadline is not None and time.monotonic() >= deadline:
                return False
            await self._refill(viewer, side)
        return True

    async def produce(
        self,
        viewer: Viewer,
        position: str | None,
        limit: int,
        now: int | None = None,
        deadline: float | None = None,
    ) -> FeedPage:
        if limit <= 0:
            raise ValueError("limit must be positive")

        start = self._initial_cursor(position, now)
        batch_size = max(limit, self.batch_size)
        reviews = _Side(self.review_source, self.policy.can_view_review, start, batch_size)
        comments = _Side(self.comment_source, self.policy.can_view_comment, start, batch_size)

        items: list[ActivityRecord] = []
        timed_out = False
        while len(items) < limit:
            if not await self._advance(viewer, reviews, deadline) or not await self._advance(
                viewer, comments, deadline
            ):
                timed_out = True
                break

            review, comment = reviews.head, comments.head
            if review is None and comment is None:
                break
            if comment is None or (review is not None and review.sort_key <= comment.sort_key):
                items.append(review)
                reviews.head = None
            else:
                items.append(comment)
                comments.head = None

        if items:
            next_position = encode_position(items[-1].position)
        elif start.encode() is not None:
            next_position = start.encode()
        else:
            next_position = None

        page = FeedPage(
            items=items,
            next_position=next_position,
            has_more=timed_out or not (reviews.drained and comments.drained),
            review_cursor=reviews.cursor,
            comment_cursor=comments.cursor,
            fetches=reviews.fetches + comments.fetches,
        )
        logger.info(
            "activity_feed_built",
            viewer=viewer.contact_id,
            position=start.encode(),
            limit=limit,
            items=len(items),
            reviews=sum(1 for r in items if r.kind is ActivityKind.REVIEW),
            comments=sum(1 for r in items if r.kind is ActivityKind.COMMENT),
            fetches=page.fetches,
            has_more=page.has_more,
            timed_out=timed_out,
        )
        return page


async def build_feed(
    viewer: Viewer,
    position: str | None,
    limit: int,
    *,
    conf_settings: dict[str, int] | None = None,
    session_factory: async_sessionmaker | None = None,
    now: int | None = None,
    deadline: float | None = None,
    batch_size: int | None = None,
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
) -> FeedPage:
    """Build one page of `viewer`'s activity feed from the conference database."""
    merger = ActivityMerger(
        ReviewSource(session_factory),
        CommentSource(session_factory),
        VisibilityPolicy(conf_settings),
        batch_size=batch_size,
        max_batch_size=max_batch_size,
    )
    return await merger.produce(viewer, position, limit, now=now, deadline=deadline)
