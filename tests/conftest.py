import os

# antes de importar cardapp: nada de Postgres ni tokens reales en tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["TWITTER_BEARER_TOKEN"] = ""
os.environ["TWITTER_CLIENT_ID"] = ""
os.environ["TWITTER_CLIENT_SECRET"] = ""

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardapp.db import init_db
from cardapp.db.session import build_engine, get_session
from cardapp.main import app


@pytest_asyncio.fixture
async def engine(tmp_path):
    # sqlite en archivo: varias conexiones reales (para probar concurrencia)
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'cards.db'}", timeout=30)
    await init_db.init_models(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(engine, session_factory, monkeypatch):
    async def _get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    monkeypatch.setattr(init_db, "default_engine", engine)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
