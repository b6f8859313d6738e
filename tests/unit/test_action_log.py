import pytest

from app.services.action_log import MAX_ACTION_LENGTH, ActionLogService
from app.services.activity.visibility import Viewer


@pytest.fixture
def action_log(session_factory):
    return ActionLogService(session_factory)


@pytest.mark.asyncio
class TestLog:
    async def test_no_papers(self, action_log):
        await action_log.log("Logged in", 3, ipaddr="10.0.0.1")
        rows, total = await action_log.query()
        assert total == 1
        assert rows[0].paper_id is None
        assert rows[0].contact_id == 3
        assert rows[0].ipaddr == "10.0.0.1"

    async def test_single_paper(self, action_log):
        await action_log.log("Review submitted", Viewer(contact_id=2), 7)
        rows, _ = await action_log.query()
        assert rows[0].paper_id == 7
        assert rows[0].contact_id == 2

    async def test_many_papers_listed_in_text(self, action_log):
        await action_log.log("Tagged", 1, [3, 4, 5])
        rows, _ = await action_log.query()
        assert rows[0].paper_id is None
        assert rows[0].action == "Tagged (papers 3, 4, 5)"

    async def test_text_truncated(self, action_log):
        await action_log.log("x" * (MAX_ACTION_LENGTH + 10))
        rows, _ = await action_log.query()
        assert len(rows[0].action) == MAX_ACTION_LENGTH
        assert rows[0].contact_id == 0

    async def test_batch_groups_by_actor_and_text(self, action_log):
        async with action_log.batch():
            await action_log.log("Assigned review", 1, 3)
            await action_log.log("Assigned review", 1, 4)
            await action_log.log("Assigned review", 2, 9)
            rows, total = await action_log.query()
            assert total == 0

        rows, total = await action_log.query(limit=10)
        assert total == 2
        assert sorted(r.action for r in rows) == ["Assigned review", "Assigned review (papers 3, 4)"]

    async def test_query_filters(self, action_log):
        await action_log.log("a", 1, 3)
        await action_log.log("b", 2, 3)
        await action_log.log("c", 2, 4)
        _, total = await action_log.query(contact_id=2)
        assert total == 2
        rows, total = await action_log.query(paper_id=3, limit=1)
        assert total == 2
        assert len(rows) == 1
