import os
import sys
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

# Configure test environment before the app (and its engine) is imported
_TMP = tempfile.mkdtemp(prefix='animetrack-tests-')
os.environ['DATABASE_URL'] = f"sqlite+aiosqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ['UPLOAD_DIR'] = os.path.join(_TMP, 'uploads')
os.environ.setdefault('JWT_SECRET', 'test-secret')
os.environ['KODIK_TOKEN'] = ''

# Ensure the package root is on sys.path when pytest changes CWD to this tests dir
HERE = Path(__file__).resolve()
PKG_ROOT = HERE.parents[2]
if str(PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(PKG_ROOT))

from httpx import AsyncClient, ASGITransport  # noqa: E402
from animetrack.models import Base, engine, AsyncSessionLocal  # noqa: E402
from animetrack.models.users import User  # noqa: E402


@pytest_asyncio.fixture
async def db():
    """Fresh schema per test; pooled connections are dropped so they never cross event loops."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def make_user(db):
    """Insert users directly, skipping password hashing."""
    counter = {'n': 0}

    async def _make(nickname=None):
        counter['n'] += 1
        n = counter['n']
        async with AsyncSessionLocal() as session:
            user = User(
                email=f'user{n}@example.com',
                hashed_password='x',
                nickname=nickname or f'user{n}',
                social_links={},
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest_asyncio.fixture
async def client(db):
    from animetrack.main import app
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac
    app.dependency_overrides.clear()


async def register_and_login(ac, email, password='secret123', nickname=None):
    """Register a user over HTTP and return (user json, auth headers)."""
    body = {'email': email, 'password': password}
    if nickname:
        body['nickname'] = nickname
    r = await ac.post('/api/auth/register', json=body)
    assert r.status_code == 200, r.text
    login = await ac.post('/api/auth/login', data={'username': email, 'password': password})
    assert login.status_code == 200, login.text
    token = login.json()['access_token']
    return r.json(), {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_user():
    return register_and_login
