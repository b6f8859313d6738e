import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.config import settings


class Base(DeclarativeBase):
    pass


# ── People ───────────────────────────────────────────────────────────────────


class ContactInfo(Base):
    __tablename__ = "contact_info"

    contact_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(120), default="")
    last_name: Mapped[str] = mapped_column(String(120), default="")
    email: Mapped[str] = mapped_column(String(120), unique=True)
    affiliation: Mapped[str] = mapped_column(String(2048), default="")
    roles: Mapped[int] = mapped_column(Integer, default=0)  # ROLE_PC | ROLE_ADMIN | ROLE_CHAIR
    disabled: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, server_default=func.now()
    )


class ApiToken(Base):
    __tablename__ = "api_tokens"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    token_prefix: Mapped[str] = mapped_column(String(20))
    label: Mapped[str] = mapped_column(String(255))
    contact_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contact_info.contact_id", ondelete="CASCADE"), index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, server_default=func.now()
    )
    last_used_at: Mapped[datetime.datetime | None] = mapped_column(DateTime, nullable=True)


# ── Papers ───────────────────────────────────────────────────────────────────


class Paper(Base):
    __tablename__ = "papers"

    paper_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), default="")
    time_submitted: Mapped[int] = mapped_column(Integer, default=0)
    time_withdrawn: Mapped[int] = mapped_column(Integer, default=0)
    blind: Mapped[bool] = mapped_column(Boolean, default=True, server_default="1")
    outcome: Mapped[int] = mapped_column(Integer, default=0)
    manager_contact_id: Mapped[int] = mapped_column(Integer, default=0)


class PaperConflict(Base):
    __tablename__ = "paper_conflicts"

    paper_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("papers.paper_id", ondelete="CASCADE"), primary_key=True
    )
    contact_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contact_info.contact_id", ondelete="CASCADE"), primary_key=True
    )
    conflict_type: Mapped[int] = mapped_column(Integer, default=0)  # >= CONFLICT_AUTHOR means author


# ── Reviews & comments ───────────────────────────────────────────────────────


class PaperReview(Base):
    __tablename__ = "paper_reviews"
    __table_args__ = (UniqueConstraint("paper_id", "contact_id", name="uq_paper_reviews_paper_contact"),)

    review_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    paper_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("papers.paper_id", ondelete="CASCADE"), index=True
    )
    contact_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contact_info.contact_id"), index=True
    )
    review_type: Mapped[int] = mapped_column(Integer, default=0)
    review_submitted: Mapped[int] = mapped_column(Integer, default=0, index=True)
    review_needs_submit: Mapped[int] = mapped_column(Integer, default=1)
    review_modified: Mapped[int] = mapped_column(Integer, default=0)
    overall_merit: Mapped[int] = mapped_column(Integer, default=0)
    reviewer_qualification: Mapped[int] = mapped_column(Integer, default=0)
    paper_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    comments_to_author: Mapped[str | None] = mapped_column(Text, nullable=True)


class PaperComment(Base):
    __tablename__ = "paper_comments"

    comment_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    paper_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("papers.paper_id", ondelete="CASCADE"), index=True
    )
    contact_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contact_info.contact_id"), index=True
    )
    time_modified: Mapped[int] = mapped_column(Integer, default=0, index=True)
    visibility: Mapped[str] = mapped_column(String(10), default="rev")  # admin/pc/rev/au
    reply_to: Mapped[int] = mapped_column(Integer, default=0)
    comment: Mapped[str] = mapped_column(Text, default="")


# ── Conference settings ──────────────────────────────────────────────────────


class Setting(Base):
    __tablename__ = "settings"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, default=0)
    data: Mapped[str | None] = mapped_column(Text, nullable=True)


# ── Action log ───────────────────────────────────────────────────────────────


class ActionLog(Base):
    __tablename__ = "action_log"

    log_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    time: Mapped[datetime.datetime] = mapped_column(
        DateTime, server_default=func.now(), index=True
    )
    ipaddr: Mapped[str | None] = mapped_column(String(39), nullable=True)
    contact_id: Mapped[int] = mapped_column(Integer, default=0, index=True)
    paper_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(4096))


# ── Engine & Session ──────────────────────────────────────────────────────────

engine = create_async_engine(settings.conf_db_url, echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    """Ensure database schema is up to date via Alembic migrations."""
    from app.core.migrations import ensure_db_migrated

    await ensure_db_migrated()


async def close_db() -> None:
    """Dispose of the engine."""
    await engine.dispose()


async def get_session() -> AsyncSession:
    """Yield a database session (for use as FastAPI dependency)."""
    async with async_session() as session:
        yield session
