"""Shared fixtures: a fresh SQLite database per test and an API client."""
from decimal import Decimal

import httpx
import pytest

from ledger.database import build_engine, build_session_factory, get_db, init_db
from ledger.services.ledger_service import LedgerService
from ledger.services.notification_service import NotificationDispatcher
from ledger.services.seller_lock import reset_seller_locks


class RecordingNotifier:
    """Keeps every notification in memory."""

    def __init__(self):
        self.sent = []

    async def notify(self, notification):
        self.sent.append(notification)


@pytest.fixture
async def engine(tmp_path):
    reset_seller_locks()
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await init_db(bind=engine)
    yield engine
    await engine.dispose()
    reset_seller_locks()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier):
    return NotificationDispatcher(notifier)


@pytest.fixture
def ledger(db, dispatcher):
    return LedgerService(db, dispatcher=dispatcher)


@pytest.fixture
async def make_ledger(session_factory, dispatcher):
    """Ledger on its own session, for concurrent callers."""
    sessions = []

    def _make(**kwargs):
        session = session_factory()
        sessions.append(session)
        return LedgerService(session, dispatcher=dispatcher, **kwargs)

    yield _make

    for session in sessions:
        await session.close()


@pytest.fixture
async def seller(ledger):
    return await ledger.register_seller("Acme Traders", email="acme@example.com")


@pytest.fixture
async def funded_seller(ledger, seller):
    """Seller with 1000.00 of confirmed commission."""
    await ledger.record_earned_commission(seller.id, "ORD-1000", Decimal("1000.00"), confirmed=True)
    return seller


@pytest.fixture
async def client(session_factory, dispatcher):
    from ledger.api.deps import get_dispatcher
    from ledger.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
