import os

# Settings are read at import time, so the environment goes first.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["ENV"] = "test"
os.environ["ENABLE_FILE_LOGGING"] = "false"
os.environ["ENABLE_REQUEST_LOGGING"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import build_engine, get_db, init_models
from core.security import Identity, sign_token
from main import app
from repositories.user import UserRepository
from services.connection_registry import ConnectionRegistry
from services.notifier import Notifier
from services.panic_alert import PanicAlertService
from services.realtime import RealtimeGateway


class FakeSocketServer:
    """Stands in for socketio.AsyncServer and records what was sent."""

    def __init__(self, failing_sids: Optional[set] = None):
        self.handlers: Dict[str, Any] = {}
        self.emitted: List[Tuple[str, Any, Optional[str]]] = []
        self.disconnected: List[str] = []
        self.failing_sids = failing_sids or set()

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler
        return handler

    async def emit(self, event, data=None, to=None, **kwargs):
        if to in self.failing_sids:
            raise RuntimeError("transport closed")
        self.emitted.append((event, data, to))

    async def disconnect(self, sid, **kwargs):
        self.disconnected.append(sid)
        handler = self.handlers.get("disconnect")
        if handler is not None:
            await handler(sid, "server disconnect")

    def sent_to(self, sid: str) -> List[Any]:
        return [data for event, data, to in self.emitted if to == sid]


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def fake_sio():
    return FakeSocketServer()


@pytest.fixture
def gateway(fake_sio, registry, session_factory):
    notifier = Notifier(fake_sio, registry, notify_all_sessions=True)
    alerts = PanicAlertService(session_factory, notifier)
    return RealtimeGateway(fake_sio, registry, alerts)


@pytest.fixture
def make_user(session_factory):
    """Create a user and return ``(user, token)``."""

    async def _make_user(name: str, email: Optional[str] = None):
        async with session_factory() as session:
            user = await UserRepository(session).create_user(name=name, email=email or f"{name.lower()}@x.com")
        return user, sign_token(Identity(user_id=user.id, name=user.name))

    return _make_user


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
