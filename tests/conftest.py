from datetime import datetime, timezone
from itertools import count

import httpx
import pytest
import pytest_asyncio

from helpdesk.services.record_store import RecordStoreClient
from helpdesk.store.app import create_store_app
from helpdesk.store.database import JsonFileDatabase
from helpdesk.tickets.models import Actor, StatusHistoryEntry, Ticket
from helpdesk.tickets.state import TicketCategory, TicketPriority, TicketStatus

T0 = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def actor() -> Actor:
    return Actor(id="u-1", name="Rina CS")


@pytest.fixture
def id_factory():
    counter = count(1)
    return lambda: f"h-{next(counter)}"


@pytest.fixture
def make_ticket():
    def factory(*, status: TicketStatus = TicketStatus.OPEN, ticket_id: str = "t-1", **overrides) -> Ticket:
        seed = StatusHistoryEntry(
            id="h-seed",
            status=TicketStatus.OPEN,
            timestamp=T0,
            user_id="u-1",
            user_name="Rina CS",
            notes="Tiket dibuat",
        )
        history = (seed,)
        if status is not TicketStatus.OPEN:
            history += (
                StatusHistoryEntry(id="h-prev", status=status, timestamp=T0, user_id="u-1", user_name="Rina CS"),
            )
        values = dict(
            id=ticket_id,
            title="Internet mati",
            description="Koneksi terputus sejak pagi",
            customer_id="c-1",
            customer_name="Budi",
            created_by="u-1",
            status=status,
            priority=TicketPriority.HIGH,
            category=TicketCategory.CONNECTION,
            created_at=T0,
            updated_at=T0,
            status_history=history,
        )
        values.update(overrides)
        return Ticket(**values)

    return factory


@pytest.fixture
def store_database(tmp_path) -> JsonFileDatabase:
    clock = iter(datetime(2024, 3, 1, 9, minute, tzinfo=timezone.utc) for minute in range(60))
    return JsonFileDatabase(tmp_path / "db.json", clock=lambda: next(clock))


@pytest.fixture
def store_app(store_database):
    return create_store_app(store_database)


@pytest_asyncio.fixture
async def store_client(store_app):
    client = RecordStoreClient(base_url="http://store", transport=httpx.ASGITransport(app=store_app))
    try:
        yield client
    finally:
        await client.close()
