import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.database import (
    ApiToken,
    Base,
    ContactInfo,
    Paper,
    PaperComment,
    PaperConflict,
    PaperReview,
)
from app.core.security import generate_api_token, get_token_prefix, hash_api_token
from app.services.activity.visibility import ROLE_CHAIR, ROLE_PC


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine for tests."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Async session bound to the in-memory engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def conference(session_factory):
    """A small conference: a chair, two PC members, an author and three papers.

    Contacts: 1 chair, 2 PC, 3 PC, 4 author of paper 1.
    Submitted reviews at 50 (paper 1), 40 (paper 2), 10 (paper 3);
    comments at 45 (paper 1) and 20 (paper 2); one unsubmitted review.
    """
    async with session_factory() as session:
        session.add_all(
            [
                ContactInfo(contact_id=1, email="chair@example.org", roles=ROLE_CHAIR | ROLE_PC),
                ContactInfo(contact_id=2, email="pc2@example.org", roles=ROLE_PC),
                ContactInfo(contact_id=3, email="pc3@example.org", roles=ROLE_PC),
                ContactInfo(contact_id=4, email="author@example.org", roles=0),
                Paper(paper_id=1, title="Merging Streams", time_submitted=5),
                Paper(paper_id=2, title="Cursor Pagination", time_submitted=6),
                Paper(paper_id=3, title="Visibility Rules", time_submitted=7),
            ]
        )
        await session.flush()
        session.add_all(
            [
                PaperConflict(paper_id=1, contact_id=4, conflict_type=64),
                PaperReview(paper_id=1, contact_id=2, review_type=2, review_submitted=50),
                PaperReview(paper_id=2, contact_id=3, review_type=2, review_submitted=40),
                PaperReview(paper_id=3, contact_id=2, review_type=2, review_submitted=10),
                PaperReview(paper_id=2, contact_id=2, review_type=2, review_submitted=0),
                PaperComment(paper_id=1, contact_id=3, time_modified=45, visibility="rev", comment="Agree."),
                PaperComment(paper_id=2, contact_id=3, time_modified=20, visibility="au", comment="Revise."),
            ]
        )
        await session.commit()
    return session_factory


@pytest_asyncio.fixture
async def app_with_db(db_engine):
    """FastAPI app wired to the in-memory test database."""
    import app.core.database as db_module

    original_engine = db_module.engine
    original_session = db_module.async_session

    test_session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    db_module.engine = db_engine
    db_module.async_session = test_session_factory

    from app.main import app

    yield app

    db_module.engine = original_engine
    db_module.async_session = original_session


async def _make_token(session_factory, contact_id: int) -> str:
    raw_token = generate_api_token()
    async with session_factory() as session:
        session.add(
            ApiToken(
                token_hash=hash_api_token(raw_token),
                token_prefix=get_token_prefix(raw_token),
                label="integration-test",
                contact_id=contact_id,
                is_active=True,
            )
        )
        await session.commit()
    return raw_token


@pytest.fixture
def make_client(app_with_db, conference):
    """Factory for an authenticated client acting as the given contact."""
    async def _make(contact_id: int) -> AsyncClient:
        raw_token = await _make_token(conference, contact_id)
        client = AsyncClient(transport=ASGITransport(app=app_with_db), base_url="http://test")
        client.headers["Authorization"] = f"Bearer {raw_token}"
        return client

    return _make


@pytest_asyncio.fixture
async def chair_client(make_client):
    client = await make_client(1)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def pc_client(make_client):
    client = await make_client(2)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def anon_client(app_with_db):
    """Unauthenticated async HTTP client."""
    transport = ASGITransport(app=app_with_db)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
