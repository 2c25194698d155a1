import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# backend/app 을 import 경로에 추가 (core, models, services ...)
APP_ROOT = Path(__file__).resolve().parents[1] / "backend" / "app"
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))

# Force test config before importing app modules.
TEST_DB_PATH = Path(tempfile.gettempdir()) / "weather_bff_test.db"
if TEST_DB_PATH.exists():
    TEST_DB_PATH.unlink()

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["FRONTEND_URL"] = "http://localhost:5173"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["JWT_ISSUER"] = "weather-bff-test"
os.environ["JWT_AUDIENCE"] = "weather-bff-clients"
os.environ["JWT_ALGORITHM"] = "HS256"

from main import app
from core.database import Base, engine

STRONG_PASSWORD = "Str0ng!Pass1234"


async def _reset_db():
    import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture()
def client():
    with TestClient(app) as tc:
        tc.portal.call(_reset_db)
        yield tc


@pytest.fixture()
def run(client):
    """TestClient 이벤트 루프에서 async 함수 실행"""
    def _run(fn, *args):
        return client.portal.call(fn, *args)
    return _run


def register(client, email="a@x.com", password=STRONG_PASSWORD, username="alice"):
    resp = client.post(
        "/auth/register",
        json={"email": email, "password": password, "username": username},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
