"""Feed resume positions.

A position is three ASCII-decimal integers joined by ``.``:
``<sortTime>.<contactId>.<paperId>``. It names a point in feed order; a
cursor in the ``before`` state admits only rows strictly after that point
(older, or equally old with a larger contact id, or equal on both with a
larger paper id).
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import structlog

from app.core.exceptions import InvalidCursorError
from app.services.activity.record import ActivityRecord

logger = structlog.get_logger()

_POSITION_RE = re.compile(r"\A(\d+)\.(\d+)\.(\d+)\Z", re.ASCII)
_MAX_TOKEN_LENGTH = 64
# positions are bound into SQL as signed 64-bit integers
_MAX_COMPONENT = 2**63 - 1


class CursorState(str, Enum):
    START = "start"
    BEFORE = "before"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class StreamCursor:
    state: CursorState
    bound: tuple[int, int, int] | None = None

    @classmethod
    def start(cls) -> "StreamCursor":
        return cls(CursorState.START)

    @classmethod
    def exhausted(cls) -> "StreamCursor":
        return cls(CursorState.EXHAUSTED)

    @classmethod
    def before(cls, sort_time: int, contact_id: int, paper_id: int) -> "StreamCursor":
        return cls(CursorState.BEFORE, (sort_time, contact_id, paper_id))

    @property
    def is_exhausted(self) -> bool:
        return self.state is CursorState.EXHAUSTED

    def admits(self, position: tuple[int, int, int]) -> bool:
        """True if `position` lies strictly after this cursor in feed order."""
        if self.state is CursorState.START:
            return True
        if self.state is CursorState.EXHAUSTED:
            return False
        t, c, p = self.bound
        time, contact, paper = position
        return time < t or (time == t and (contact > c or (contact == c and paper > p)))

    def after_batch(self, rows: Sequence[ActivityRecord], requested: int) -> "StreamCursor":
        """Cursor for the next fetch once `rows` came back for a request of `requested`."""
        if len(rows) < requested:
            return StreamCursor.exhausted()
        return StreamCursor.before(*rows[-1].position)

    def encode(self) -> str | None:
        if self.state is CursorState.BEFORE:
            return encode_position(self.bound)
        return None


def encode_position(position: tuple[int, int, int]) -> str:
    sort_time, contact_id, paper_id = position
    return f"{int(sort_time)}.{int(contact_id)}.{int(paper_id)}"


def parse_position(token: str) -> StreamCursor:
    """Strictly decode a position token. Raises InvalidCursorError."""
    if not isinstance(token, str) or len(token) > _MAX_TOKEN_LENGTH:
        raise InvalidCursorError(details={"position": str(token)[:_MAX_TOKEN_LENGTH]})
    m = _POSITION_RE.match(token)
    if m is None:
        raise InvalidCursorError(details={"position": token})
    sort_time, contact_id, paper_id = (int(g) for g in m.groups())
    if max(sort_time, contact_id, paper_id) > _MAX_COMPONENT:
        raise InvalidCursorError(details={"position": token})
    return StreamCursor.before(sort_time, contact_id, paper_id)


def decode_position(token: str | None) -> StreamCursor:
    """Decode a caller-supplied position; anything unusable restarts the feed."""
    if not token:
        return StreamCursor.start()
    try:
        return parse_position(token)
    except InvalidCursorError:
        logger.info("invalid_feed_cursor", position=str(token)[:_MAX_TOKEN_LENGTH])
        return StreamCursor.start()
