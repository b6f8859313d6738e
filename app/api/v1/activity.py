import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from app.config import settings
from app.dependencies import get_viewer
from app.schemas.activity import ActivityFeed, ActivityItem
from app.services.activity import Viewer, build_feed
from app.services.conf_settings import ConferenceSettings

router = APIRouter()


def _format_time(t: int) -> str:
    return datetime.fromtimestamp(t, tz=timezone.utc).isoformat()


@router.get("/conf/activity")
async def activity(
    position: str | None = Query(default=None),
    limit: int = Query(default=settings.conf_feed_default_limit, ge=1, le=settings.conf_feed_max_limit),
    viewer: Viewer = Depends(get_viewer),
) -> ActivityFeed:
    """Recent reviews and comments the viewer may see, newest first."""
    conf = await ConferenceSettings().load()
    deadline = None
    if settings.conf_feed_deadline_seconds > 0:
        deadline = time.monotonic() + settings.conf_feed_deadline_seconds

    page = await build_feed(
        viewer,
        position,
        limit,
        conf_settings=conf.snapshot(),
        now=int(time.time()),
        deadline=deadline,
        batch_size=settings.conf_feed_batch_size or None,
        max_batch_size=settings.conf_feed_max_batch_size,
    )

    items = [
        ActivityItem(
            kind=record.kind.value,
            sort_time=record.sort_time,
            timestamp=_format_time(record.sort_time),
            contact_id=record.contact_id,
            paper_id=record.paper_id,
            payload=record.payload,
        )
        for record in page.items
    ]
    return ActivityFeed(items=items, next_position=page.next_position, has_more=page.has_more)
