"""Schema bootstrap: brings the conference database to the Alembic head."""

import asyncio
from pathlib import Path

import structlog
from alembic import command
from alembic.config import Config
from sqlalchemy import inspect, text

import app.core.database as db_module
from app.core.database import Base

logger = structlog.get_logger()

_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent

# Tables whose presence marks a database as already holding conference data.
_CONFERENCE_TABLES = ("settings", "paper_reviews", "paper_comments")


def _alembic_cfg() -> Config:
    """Alembic config with absolute paths, so the CLI and server work from any cwd."""
    cfg = Config(str(_BACKEND_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(_BACKEND_ROOT / "alembic"))
    return cfg


def _check_db_state(connection) -> tuple[str | None, set[str]]:
    """Return (current_revision or None if untracked, existing table names). Sync, for run_sync."""
    tables = set(inspect(connection).get_table_names())
    if "alembic_version" not in tables:
        return None, tables
    row = connection.execute(text("SELECT version_num FROM alembic_version")).first()
    return (row[0] if row else ""), tables


def _stamp_head() -> None:
    command.stamp(_alembic_cfg(), "head")


def _upgrade_head() -> None:
    command.upgrade(_alembic_cfg(), "head")


async def ensure_db_migrated() -> None:
    """Make the schema current before the server or CLI touches it."""
    engine = db_module.engine
    async with engine.begin() as conn:
        current_rev, tables = await conn.run_sync(_check_db_state)

    if current_rev is not None:
        # Tracked by Alembic: apply whatever revisions are pending.
        logger.info("migrations_tracked_db", current_rev=current_rev or None, action="upgrade_head")
        await asyncio.to_thread(_upgrade_head)
        return

    known = [name for name in _CONFERENCE_TABLES if name in tables]
    missing = sorted(set(Base.metadata.tables) - tables)
    if known:
        # Conference data predates tracking; fill in tables added since, then adopt it.
        logger.info("migrations_existing_db", missing_tables=missing, action="create_missing_and_stamp")
    else:
        logger.info("migrations_fresh_db", action="create_all_and_stamp")
    if missing:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    await asyncio.to_thread(_stamp_head)
