"""Per-conference settings stored in the `settings` table.

Each setting has an integer value and optional text data. Deadlines are
stored as Unix timestamps in the value column; a value of 0 or less means
"not set".
"""

import json
import math
import time

import structlog
from sqlalchemy import delete, select

import app.core.database as db_module
from app.core.database import Setting

logger = structlog.get_logger()


def printable_interval(amount: float) -> str:
    """Human-readable rendering of a remaining duration in seconds."""
    if amount > 259200:  # 3 days
        count, unit = math.ceil(amount / 86400), "day"
    elif amount > 28800:  # 8 hours
        count, unit = math.ceil(amount / 3600), "hour"
    elif amount > 3600:
        count, unit = math.ceil(amount / 1800) / 2, "hour"
    elif amount > 180:
        count, unit = math.ceil(amount / 60), "minute"
    elif amount > 0:
        count, unit = math.ceil(amount), "second"
    else:
        return "past"
    if isinstance(count, float) and count.is_integer():
        count = int(count)
    return f"{count} {unit}" + ("" if count == 1 else "s")


class ConferenceSettings:
    def __init__(self, session_factory=None):
        self._session_factory = session_factory or db_module.async_session
        self.values: dict[str, int] = {}
        self.texts: dict[str, str] = {}
        self._json_cache: dict[str, object] = {}

    async def load(self) -> "ConferenceSettings":
        async with self._session_factory() as session:
            rows = (await session.execute(select(Setting))).scalars().all()

        self.values = {}
        self.texts = {}
        self._json_cache = {}
        for row in rows:
            self.values[row.name] = int(row.value)
            if row.data is not None:
                self.texts[row.name] = row.data
        return self

    def setting(self, name: str, default=None):
        return self.values.get(name, default)

    def setting_data(self, name: str) -> str | None:
        return self.texts.get(name)

    def setting_json(self, name: str):
        """Parsed JSON data for `name`, or None if absent or not JSON."""
        if name in self._json_cache:
            return self._json_cache[name]
        raw = self.texts.get(name)
        if raw is None:
            return None
        try:
            parsed = json.loads(raw)
        except ValueError:
            return None
        self._json_cache[name] = parsed
        return parsed

    def snapshot(self) -> dict[str, int]:
        return dict(self.values)

    async def save_setting(self, name: str, value: int | None, data=None) -> bool:
        """Insert, update or (when both are None) delete a setting. Returns True on change."""
        if value is None and data is None:
            async with self._session_factory() as session:
                result = await session.execute(delete(Setting).where(Setting.name == name))
                await session.commit()
            self.values.pop(name, None)
            self.texts.pop(name, None)
            self._json_cache.pop(name, None)
            changed = result.rowcount > 0
            logger.info("setting_deleted", name=name, changed=changed)
            return changed

        if data is not None and not isinstance(data, str):
            data = json.dumps(data)
        value = int(value or 0)

        async with self._session_factory() as session:
            row = await session.get(Setting, name)
            if row is not None and row.value == value and row.data == data:
                return False
            if row is None:
                session.add(Setting(name=name, value=value, data=data))
            else:
                row.value = value
                row.data = data
            await session.commit()

        self.values[name] = value
        if data is None:
            self.texts.pop(name, None)
        else:
            self.texts[name] = data
        self._json_cache.pop(name, None)
        logger.info("setting_saved", name=name, value=value, has_data=data is not None)
        return True

    async def invalidate_caches(self, caches: dict[str, bool] | None = None) -> None:
        """Bump (or clear) cache-stamp settings such as `pc`."""
        stamp = int(time.time())
        if caches is None:
            if self.setting("pc", 0) > 0:
                await self.save_setting("pc", stamp)
            return
        for name, keep in caches.items():
            await self.save_setting(name, stamp if keep else None)

    # Deadlines

    def _deadline(self, name: str, grace: str | None) -> int | None:
        t = self.values.get(name)
        if t is not None and t > 0 and grace:
            t += self.values.get(grace, 0)
        return t

    def settings_after(self, name: str, now: int) -> bool:
        t = self.values.get(name)
        return t is not None and 0 < t <= now

    def deadlines_after(self, name: str, now: int, grace: str | None = None) -> bool:
        t = self._deadline(name, grace)
        return t is not None and 0 < t <= now

    def deadlines_between(self, name1: str | None, name2: str, now: int, grace: str | None = None) -> bool:
        """True once `name1` has passed and `name2` (plus grace) has not."""
        if name1:
            t = self.values.get(name1)
            if t is None or t <= 0 or t > now:
                return False
        t = self._deadline(name2, grace)
        return t is None or t <= 0 or t >= now
