"""Normalized activity feed entries."""

from dataclasses import dataclass, field
from enum import Enum


class ActivityKind(str, Enum):
    REVIEW = "review"
    COMMENT = "comment"


@dataclass(frozen=True)
class PaperAccess:
    """What the data layer knows about the viewer's relationship to a paper."""

    conflict_type: int = 0
    my_review_type: int = 0
    my_review_submitted: int = 0
    paper_blind: bool = True
    manager_contact_id: int = 0


@dataclass(frozen=True)
class ActivityRecord:
    kind: ActivityKind
    sort_time: int
    contact_id: int
    paper_id: int
    # comment audience (admin/pc/rev/au); None for reviews
    visibility: str | None = field(default=None, compare=False)
    payload: dict = field(default_factory=dict, compare=False)
    access: PaperAccess = field(default_factory=PaperAccess, compare=False)

    @property
    def position(self) -> tuple[int, int, int]:
        return (self.sort_time, self.contact_id, self.paper_id)

    @property
    def sort_key(self) -> tuple[int, int, int]:
        """Ascending key for feed order: newest first, then contact, then paper."""
        return (-self.sort_time, self.contact_id, self.paper_id)

    @property
    def is_activity(self) -> bool:
        return self.sort_time > 0
