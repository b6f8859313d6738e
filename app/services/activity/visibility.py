"""Per-viewer visibility of reviews and comments.

The policy is evaluated against a snapshot of conference settings taken at
request time plus the per-paper access facts the sources join into each
record, so every check is synchronous and never touches the database.
"""

from dataclasses import dataclass
from typing import Mapping

from app.services.activity.record import ActivityRecord

ROLE_PC = 1
ROLE_ADMIN = 2
ROLE_CHAIR = 4

CONFLICT_AUTHOR = 64

REVIEW_EXTERNAL = 1
REVIEW_PC = 2
REVIEW_SECONDARY = 3
REVIEW_PRIMARY = 4

COMMENT_ADMIN = "admin"
COMMENT_PC = "pc"
COMMENT_REVIEWER = "rev"
COMMENT_AUTHOR = "au"
COMMENT_VISIBILITIES = (COMMENT_ADMIN, COMMENT_PC, COMMENT_REVIEWER, COMMENT_AUTHOR)


@dataclass(frozen=True)
class Viewer:
    contact_id: int
    roles: int = 0

    @property
    def is_pc(self) -> bool:
        return bool(self.roles & (ROLE_PC | ROLE_CHAIR))

    @property
    def privchair(self) -> bool:
        return bool(self.roles & (ROLE_ADMIN | ROLE_CHAIR))


class VisibilityPolicy:
    def __init__(self, conf_settings: Mapping[str, int] | None = None):
        conf_settings = conf_settings or {}
        self.pc_seeallrev = int(conf_settings.get("pc_seeallrev", 0) or 0)
        self.extrev_view = int(conf_settings.get("extrev_view", 0) or 0)
        self.au_seerev = int(conf_settings.get("au_seerev", 0) or 0)

    def _can_see_paper_reviews(self, viewer: Viewer, record: ActivityRecord) -> bool:
        """Review-level access for an unconflicted, non-chair viewer."""
        access = record.access
        if access.manager_contact_id and access.manager_contact_id == viewer.contact_id:
            return True
        if viewer.is_pc:
            return self.pc_seeallrev > 0 or access.my_review_submitted > 0
        if access.my_review_type > 0:
            return self.extrev_view > 0 and access.my_review_submitted > 0
        return False

    def can_view_review(self, viewer: Viewer, record: ActivityRecord) -> bool:
        if record.contact_id == viewer.contact_id:
            return True
        access = record.access
        if access.conflict_type > 0:
            return access.conflict_type >= CONFLICT_AUTHOR and self.au_seerev > 0
        if viewer.privchair:
            return True
        return self._can_see_paper_reviews(viewer, record)

    def can_view_comment(self, viewer: Viewer, record: ActivityRecord) -> bool:
        if record.contact_id == viewer.contact_id:
            return True
        access = record.access
        visibility = record.visibility or COMMENT_REVIEWER
        if access.conflict_type > 0:
            return (
                access.conflict_type >= CONFLICT_AUTHOR
                and visibility == COMMENT_AUTHOR
                and self.au_seerev > 0
            )
        if viewer.privchair:
            return True
        if visibility == COMMENT_ADMIN:
            return False
        if visibility == COMMENT_PC:
            return viewer.is_pc
        return self._can_see_paper_reviews(viewer, record)
