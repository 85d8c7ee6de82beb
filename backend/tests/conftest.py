"""
Shared fixtures: an in-memory SQLite session, record factories and an
authenticated HTTP client bound to the FastAPI app.
"""

import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from jobtrackr.auth import create_session_token
from jobtrackr.database import Base, get_db, utcnow
from jobtrackr.models import Application, Document, Interview

USER_ID = "user-1"
OTHER_USER_ID = "user-2"

SAMPLE_JOB_TITLES = [
    {
        "libelle": "Développeur Full Stack",
        "libelle_court": "Développeur Full Stack",
        "code_ogr": 38861,
        "code_rome_parent": "M1805",
    },
    {
        "libelle": "Développeur / Développeuse web",
        "libelle_court": "Développeur web",
        "code_ogr": 38971,
        "code_rome_parent": "M1805",
    },
    {
        "libelle": "Chef de projet web",
        "libelle_court": "Chef de projet web",
        "code_ogr": 12345,
        "code_rome_parent": "M1803",
    },
    {
        "libelle": "Analyste programmeur",
        "code_ogr": 11111,
        "code_rome_parent": "M1805",
        "peu_usite": "O",
    },
]


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def add_records(db_session):
    """Insert applications, interviews and documents for a user."""

    async def _add(
        user_id=USER_ID,
        applications=0,
        accepted=0,
        interviews=0,
        documents=(),
        created_at=None,
    ):
        created_at = created_at or utcnow()
        apps = [
            Application(
                user_id=user_id,
                title=f"Application {i}",
                status="accepted" if i < accepted else "pending",
                created_at=created_at,
            )
            for i in range(max(applications, accepted, 1 if interviews else 0))
        ]
        db_session.add_all(apps)
        await db_session.flush()

        db_session.add_all(
            Interview(
                user_id=user_id,
                application_id=apps[0].id,
                title=f"Interview {i}",
                scheduled_at=created_at,
                created_at=created_at,
            )
            for i in range(interviews)
        )
        db_session.add_all(
            Document(user_id=user_id, type=doc_type, title=doc_type, created_at=created_at)
            for doc_type in documents
        )
        await db_session.commit()

    return _add


@pytest.fixture
def job_titles_file(tmp_path):
    path = tmp_path / "job-titles.json"
    path.write_text(json.dumps(SAMPLE_JOB_TITLES, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_session_token(USER_ID)}"}


@pytest_asyncio.fixture
async def client(db_session):
    from jobtrackr.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()
