"""Review and comment activity sources backed by the conference database."""

from typing import Protocol

import structlog
from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import aliased

import app.core.database as db_module
from app.core.database import ContactInfo, Paper, PaperComment, PaperConflict, PaperReview
from app.core.exceptions import DataUnavailableError
from app.services.activity.cursor import CursorState, StreamCursor
from app.services.activity.record import ActivityKind, ActivityRecord, PaperAccess
from app.services.activity.visibility import Viewer

logger = structlog.get_logger()

_SHORT_TITLE = 80
_SHORT_COMMENT = 300


class ActivitySource(Protocol):
    kind: ActivityKind

    async def fetch(self, viewer: Viewer, cursor: StreamCursor, batch_size: int) -> list[ActivityRecord]:
        """Rows strictly after `cursor`, newest first, at most `batch_size`."""
        ...


def _cursor_clause(time_col, contact_col, paper_col, cursor: StreamCursor):
    t, c, p = cursor.bound
    return or_(
        time_col < t,
        and_(time_col == t, contact_col > c),
        and_(time_col == t, contact_col == c, paper_col > p),
    )


def _access(paper: Paper, conflict_type, my_review_type, my_review_submitted) -> PaperAccess:
    return PaperAccess(
        conflict_type=conflict_type or 0,
        my_review_type=my_review_type or 0,
        my_review_submitted=my_review_submitted or 0,
        paper_blind=bool(paper.blind),
        manager_contact_id=paper.manager_contact_id or 0,
    )


def _author(contact: ContactInfo) -> dict:
    return {
        "first_name": contact.first_name,
        "last_name": contact.last_name,
        "email": contact.email,
    }


def _paper(paper: Paper) -> dict:
    return {
        "title": paper.title,
        "short_title": (paper.title or "")[:_SHORT_TITLE],
        "time_submitted": paper.time_submitted,
        "time_withdrawn": paper.time_withdrawn,
        "outcome": paper.outcome,
    }


class _SqlSource:
    """Shared fetch plumbing: viewer joins, cursor bound, ordering, limit."""

    kind: ActivityKind
    model = None
    time_attr: str

    def __init__(self, session_factory: async_sessionmaker | None = None):
        self._session_factory = session_factory or db_module.async_session

    def _statement(self, viewer: Viewer, cursor: StreamCursor, batch_size: int):
        model = self.model
        time_col = getattr(model, self.time_attr)
        my_review = aliased(PaperReview, name="my_review")

        stmt = (
            select(
                model,
                Paper,
                ContactInfo,
                PaperConflict.conflict_type,
                my_review.review_type,
                my_review.review_submitted,
            )
            .select_from(model)
            .join(ContactInfo, ContactInfo.contact_id == model.contact_id)
            .join(Paper, Paper.paper_id == model.paper_id)
            .outerjoin(
                PaperConflict,
                and_(
                    PaperConflict.paper_id == model.paper_id,
                    PaperConflict.contact_id == viewer.contact_id,
                ),
            )
            .outerjoin(
                my_review,
                and_(
                    my_review.paper_id == model.paper_id,
                    my_review.contact_id == viewer.contact_id,
                ),
            )
            .where(time_col > 0)
        )
        if cursor.state is CursorState.BEFORE:
            stmt = stmt.where(_cursor_clause(time_col, model.contact_id, model.paper_id, cursor))
        return stmt.order_by(time_col.desc(), model.contact_id.asc(), model.paper_id.asc()).limit(batch_size)

    def _to_record(self, row) -> ActivityRecord:
        raise NotImplementedError

    async def fetch(self, viewer: Viewer, cursor: StreamCursor, batch_size: int) -> list[ActivityRecord]:
        if cursor.is_exhausted or batch_size <= 0:
            return []
        stmt = self._statement(viewer, cursor, batch_size)
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as exc:
            logger.error("activity_source_failed", kind=self.kind.value, error=str(exc))
            raise DataUnavailableError(
                f"Could not load {self.kind.value} activity.",
                details={"kind": self.kind.value},
            ) from exc

        records = [self._to_record(row) for row in rows]
        logger.debug(
            "activity_source_fetch",
            kind=self.kind.value,
            viewer=viewer.contact_id,
            cursor=cursor.encode(),
            requested=batch_size,
            returned=len(records),
        )
        return records


class ReviewSource(_SqlSource):
    kind = ActivityKind.REVIEW
    model = PaperReview
    time_attr = "review_submitted"

    def _to_record(self, row) -> ActivityRecord:
        review, paper, contact, conflict_type, my_type, my_submitted = row
        payload = {
            "review_id": review.review_id,
            "review_type": review.review_type,
            "review_submitted": review.review_submitted,
            "review_modified": review.review_modified,
            "overall_merit": review.overall_merit,
            "reviewer_qualification": review.reviewer_qualification,
            "paper": _paper(paper),
            "reviewer": _author(contact),
        }
        return ActivityRecord(
            kind=self.kind,
            sort_time=review.review_submitted,
            contact_id=review.contact_id,
            paper_id=review.paper_id,
            payload=payload,
            access=_access(paper, conflict_type, my_type, my_submitted),
        )


class CommentSource(_SqlSource):
    kind = ActivityKind.COMMENT
    model = PaperComment
    time_attr = "time_modified"

    def _to_record(self, row) -> ActivityRecord:
        comment, paper, contact, conflict_type, my_type, my_submitted = row
        payload = {
            "comment_id": comment.comment_id,
            "time_modified": comment.time_modified,
            "visibility": comment.visibility,
            "reply_to": comment.reply_to,
            "short_comment": (comment.comment or "")[:_SHORT_COMMENT],
            "paper": _paper(paper),
            "commenter": _author(contact),
        }
        return ActivityRecord(
            kind=self.kind,
            sort_time=comment.time_modified,
            contact_id=comment.contact_id,
            paper_id=comment.paper_id,
            visibility=comment.visibility,
            payload=payload,
            access=_access(paper, conflict_type, my_type, my_submitted),
        )
