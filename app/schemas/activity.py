from pydantic import BaseModel


class ActivityItem(BaseModel):
    kind: str  # review, comment
    sort_time: int
    timestamp: str
    contact_id: int
    paper_id: int
    payload: dict


class ActivityFeed(BaseModel):
    items: list[ActivityItem]
    next_position: str | None = None
    has_more: bool
