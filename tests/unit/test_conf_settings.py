import pytest
from sqlalchemy import select

from app.core.database import Setting
from app.services.conf_settings import ConferenceSettings, printable_interval


class TestPrintableInterval:
    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "past"),
            (-5, "past"),
            (1, "1 second"),
            (59.2, "60 seconds"),
            (181, "4 minutes"),
            (3601, "1.5 hours"),
            (5400, "1.5 hours"),
            (7200, "2 hours"),
            (28801, "9 hours"),
            (259201, "4 days"),
        ],
    )
    def test_rounding(self, seconds, expected):
        assert printable_interval(seconds) == expected


@pytest.mark.asyncio
class TestConferenceSettings:
    async def test_load_empty(self, session_factory):
        conf = await ConferenceSettings(session_factory).load()
        assert conf.values == {}
        assert conf.setting("pc_seeallrev", 0) == 0

    async def test_save_and_reload(self, session_factory):
        conf = await ConferenceSettings(session_factory).load()
        assert await conf.save_setting("pc_seeallrev", 1) is True
        assert await conf.save_setting("conf_name", 1, "Example Conf") is True

        reloaded = await ConferenceSettings(session_factory).load()
        assert reloaded.setting("pc_seeallrev") == 1
        assert reloaded.setting_data("conf_name") == "Example Conf"
        assert reloaded.snapshot() == {"pc_seeallrev": 1, "conf_name": 1}

    async def test_unchanged_save_reports_no_change(self, session_factory):
        conf = await ConferenceSettings(session_factory).load()
        await conf.save_setting("au_seerev", 2)
        assert await conf.save_setting("au_seerev", 2) is False

    async def test_json_data(self, session_factory):
        conf = await ConferenceSettings(session_factory).load()
        await conf.save_setting("tag_vote", 1, {"vote": 3})
        assert conf.setting_data("tag_vote") == '{"vote": 3}'
        assert conf.setting_json("tag_vote") == {"vote": 3}
        await conf.save_setting("tag_vote", 1, "not json")
        assert conf.setting_json("tag_vote") is None

    async def test_delete(self, session_factory):
        conf = await ConferenceSettings(session_factory).load()
        await conf.save_setting("sub_sub", 1000, "x")
        assert await conf.save_setting("sub_sub", None) is True
        assert conf.setting("sub_sub") is None
        assert conf.setting_data("sub_sub") is None
        async with session_factory() as session:
            assert (await session.execute(select(Setting))).scalars().all() == []
        assert await conf.save_setting("sub_sub", None) is False

    async def test_invalidate_caches_bumps_pc_stamp(self, session_factory):
        conf = await ConferenceSettings(session_factory).load()
        await conf.save_setting("pc", 1)
        await conf.invalidate_caches()
        assert conf.setting("pc") > 1

    async def test_invalidate_caches_removes(self, session_factory):
        conf = await ConferenceSettings(session_factory).load()
        await conf.save_setting("pc", 1)
        await conf.invalidate_caches({"pc": False})
        assert conf.setting("pc") is None


class TestDeadlines:
    def _conf(self, **values):
        conf = ConferenceSettings(session_factory=lambda: None)
        conf.values = dict(values)
        return conf

    def test_settings_after(self):
        conf = self._conf(sub_open=100, sub_sub=0)
        assert conf.settings_after("sub_open", now=100)
        assert not conf.settings_after("sub_open", now=99)
        assert not conf.settings_after("sub_sub", now=1000)
        assert not conf.settings_after("missing", now=1000)

    def test_deadlines_after_with_grace(self):
        conf = self._conf(sub_sub=100, sub_grace=50)
        assert conf.deadlines_after("sub_sub", now=120)
        assert not conf.deadlines_after("sub_sub", now=120, grace="sub_grace")
        assert conf.deadlines_after("sub_sub", now=150, grace="sub_grace")

    def test_deadlines_between(self):
        conf = self._conf(rev_open=100, pcrev_hard=200, pcrev_grace=30)
        assert not conf.deadlines_between("rev_open", "pcrev_hard", now=99)
        assert conf.deadlines_between("rev_open", "pcrev_hard", now=150)
        assert not conf.deadlines_between("rev_open", "pcrev_hard", now=201)
        assert conf.deadlines_between("rev_open", "pcrev_hard", now=201, grace="pcrev_grace")
        assert conf.deadlines_between("rev_open", "unset", now=10**9)
