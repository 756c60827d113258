# conftest.py
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CLINIC_API_KEYS"] = "test-key"

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient
from httpx._transports.asgi import ASGITransport  # required for ASGI testing

from clinic_billing.main import app
from clinic_billing.clinic_database import Base, engine

HEADERS = {"X-API-Key": "test-key"}


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(app, headers=HEADERS) as c:
        yield c


@pytest.fixture(scope="module")
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def async_client(anyio_backend):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers=HEADERS) as ac:
        yield ac


