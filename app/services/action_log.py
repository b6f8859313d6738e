from collections import defaultdict
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import func, select

import app.core.database as db_module
from app.core.database import ActionLog

logger = structlog.get_logger()

MAX_ACTION_LENGTH = 4096


class ActionLogService:
    """Records conference actions (who did what to which papers)."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or db_module.async_session
        self._pending: dict[tuple[int, str], list[int]] | None = None

    @staticmethod
    def _contact_id(who) -> int:
        if not who:
            return 0
        if isinstance(who, int):
            return who
        return int(getattr(who, "contact_id", 0) or 0)

    @staticmethod
    def _paper_ids(pids) -> list[int]:
        if pids is None:
            return []
        if isinstance(pids, int):
            return [pids] if pids > 0 else []
        if hasattr(pids, "paper_id"):
            return [pids.paper_id]
        return [getattr(p, "paper_id", p) for p in pids]

    async def log(self, text: str, who=None, pids=None, ipaddr: str | None = None) -> None:
        contact_id = self._contact_id(who)
        paper_ids = self._paper_ids(pids)

        if self._pending is not None:
            self._pending[(contact_id, text)].extend(paper_ids)
            return

        if not paper_ids:
            paper_id = None
        elif len(paper_ids) == 1:
            paper_id = paper_ids[0]
        else:
            text = f"{text} (papers {', '.join(str(p) for p in paper_ids)})"
            paper_id = None

        async with self._session_factory() as session:
            session.add(
                ActionLog(
                    ipaddr=ipaddr,
                    contact_id=contact_id,
                    paper_id=paper_id,
                    action=text[:MAX_ACTION_LENGTH],
                )
            )
            await session.commit()
        logger.debug("action_logged", contact_id=contact_id, paper_id=paper_id, action=text[:80])

    @asynccontextmanager
    async def batch(self):
        """Group log calls by (who, text) and write one entry per group on exit."""
        if self._pending is not None:
            yield self
            return
        self._pending = defaultdict(list)
        try:
            yield self
        finally:
            pending, self._pending = self._pending, None
            for (contact_id, text), paper_ids in pending.items():
                await self.log(text, contact_id, paper_ids)

    async def query(
        self,
        limit: int = 50,
        offset: int = 0,
        contact_id: int | None = None,
        paper_id: int | None = None,
    ) -> tuple[list[ActionLog], int]:
        """Query the action log, newest first. Returns (items, total_count)."""
        async with self._session_factory() as session:
            base = select(ActionLog)
            if contact_id is not None:
                base = base.where(ActionLog.contact_id == contact_id)
            if paper_id is not None:
                base = base.where(ActionLog.paper_id == paper_id)

            count_stmt = select(func.count()).select_from(base.subquery())
            total = (await session.execute(count_stmt)).scalar() or 0

            stmt = base.order_by(ActionLog.time.desc(), ActionLog.log_id.desc()).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).scalars().all()

            return list(rows), total
