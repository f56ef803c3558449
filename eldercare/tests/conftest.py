import os
import sys
import tempfile
import uuid
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Throwaway SQLite database; never point the suite at a shared DATABASE_URL
_DB_DIR = tempfile.mkdtemp(prefix='eldercare-tests-')
os.environ['DATABASE_URL'] = os.getenv('TEST_DATABASE_URL') or f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ.setdefault('JWT_SECRET', 'test-secret')
os.environ.setdefault('BCRYPT_ROUNDS', '4')

# Ensure the package root is on sys.path when pytest changes CWD to this tests dir
HERE = Path(__file__).resolve()
PKG_ROOT = HERE.parents[2]
if str(PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(PKG_ROOT))

from eldercare.main import app  # noqa: E402
from eldercare.models import engine, Base  # noqa: E402


@pytest_asyncio.fixture
async def db():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac


@pytest.fixture
def asgi_transport():
    return ASGITransport(app=app)


@pytest_asyncio.fixture
async def make_user(client):
    """Register and log in a user, returning its id and auth headers."""

    async def _make(full_name: str = 'Nora Santos', user_type: str = 'nurse',
                    password: str = 'secret123', email: str | None = None):
        email = email or f"{uuid.uuid4().hex[:8]}@carehome.org"
        r = await client.post('/api/users/register', json={
            'fullName': full_name,
            'email': email,
            'password': password,
            'userType': user_type,
        })
        assert r.status_code == 201, r.text
        login = await client.post('/api/users/login', json={'email': email, 'password': password})
        assert login.status_code == 200, login.text
        token = login.json()['accessToken']
        return {
            'id': r.json()['id'],
            'email': email,
            'password': password,
            'full_name': full_name,
            'user_type': user_type,
            'token': token,
            'headers': {'Authorization': f'Bearer {token}'},
        }

    return _make
