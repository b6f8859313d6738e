"""Activity feed: merged, permission-filtered reviews and comments."""

from app.services.activity.cursor import StreamCursor, decode_position, encode_position, parse_position
from app.services.activity.merger import ActivityMerger, FeedPage, build_feed
from app.services.activity.record import ActivityKind, ActivityRecord, PaperAccess
from app.services.activity.sources import CommentSource, ReviewSource
from app.services.activity.visibility import Viewer, VisibilityPolicy

__all__ = [
    "ActivityKind",
    "ActivityMerger",
    "ActivityRecord",
    "CommentSource",
    "FeedPage",
    "PaperAccess",
    "ReviewSource",
    "StreamCursor",
    "Viewer",
    "VisibilityPolicy",
    "build_feed",
    "decode_position",
    "encode_position",
    "parse_position",
]
