"""In-memory activity sources that honour the fetch contract."""

from app.core.exceptions import DataUnavailableError
from app.services.activity.cursor import StreamCursor
from app.services.activity.record import ActivityKind, ActivityRecord


class FakeSource:
    def __init__(self, kind: ActivityKind, records: list[ActivityRecord], fail_after: int | None = None):
        self.kind = kind
        self.records = sorted(records, key=lambda r: r.sort_key)
        self.fail_after = fail_after
        self.calls: list[tuple[StreamCursor, int]] = []

    async def fetch(self, viewer, cursor: StreamCursor, batch_size: int) -> list[ActivityRecord]:
        self.calls.append((cursor, batch_size))
        if self.fail_after is not None and len(self.calls) > self.fail_after:
            raise DataUnavailableError(f"{self.kind.value} store offline")
        if cursor.is_exhausted:
            return []
        rows = [r for r in self.records if r.sort_time > 0 and cursor.admits(r.position)]
        return rows[:batch_size]


def reviews(*entries) -> list[ActivityRecord]:
    """entries: (sort_time, contact_id, paper_id) tuples."""
    return [ActivityRecord(ActivityKind.REVIEW, t, c, p) for t, c, p in entries]


def comments(*entries) -> list[ActivityRecord]:
    return [ActivityRecord(ActivityKind.COMMENT, t, c, p) for t, c, p in entries]
