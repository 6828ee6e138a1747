from datetime import datetime, timezone

import pytest

from helpdesk.tickets.lifecycle import apply_transition
from helpdesk.tickets.models import Actor, TicketFilters
from helpdesk.tickets.repository import TicketRepository
from helpdesk.tickets.state import TicketPriority, TicketStatus

T1 = datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_create_and_get_round_trip(store_client, make_ticket):
    repository = TicketRepository(store_client)

    created = await repository.create(make_ticket(ticket_id=""))
    fetched = await repository.get(created.id)

    assert fetched is not None
    assert created.id
    assert fetched.title == "Internet mati"
    assert fetched.priority is TicketPriority.HIGH
    assert fetched.status_history[0].notes == "Tiket dibuat"
    assert fetched.created_at == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_documents_use_camel_case_keys(store_client, store_database, make_ticket):
    repository = TicketRepository(store_client)
    ticket = make_ticket(ticket_id="t-1", assigned_to="u-2")
    resolved = apply_transition(ticket, TicketStatus.RESOLVED, Actor("u-2", "Dewi"), now=T1).ticket

    await repository.create(resolved)

    document = store_database.get("tickets", "t-1")
    assert document["customerId"] == "c-1"
    assert document["assignedTo"] == "u-2"
    assert document["resolvedAt"] == "2024-03-01T10:30:00.000Z"
    assert "closedAt" not in document
    assert document["statusHistory"][-1] == {
        "id": resolved.status_history[-1].id,
        "status": "resolved",
        "timestamp": "2024-03-01T10:30:00.000Z",
        "userId": "u-2",
        "userName": "Dewi",
        "notes": "",
    }


@pytest.mark.asyncio
async def test_put_missing_ticket_returns_none(store_client, make_ticket):
    repository = TicketRepository(store_client)

    assert await repository.put("ghost", make_ticket(ticket_id="ghost")) is None
    assert await repository.get("ghost") is None
    assert await repository.delete("ghost") is False


@pytest.mark.asyncio
async def test_list_applies_filters(store_client, make_ticket):
    repository = TicketRepository(store_client)
    await repository.create(make_ticket(ticket_id="t-1"))
    await repository.create(make_ticket(ticket_id="t-2", status=TicketStatus.IN_PROGRESS, customer_id="c-2"))

    in_progress = await repository.list(TicketFilters(status=TicketStatus.IN_PROGRESS))
    by_customer = await repository.list(TicketFilters(customer_id="c-1"))

    assert [ticket.id for ticket in in_progress] == ["t-2"]
    assert [ticket.id for ticket in by_customer] == ["t-1"]
    assert len(await repository.list()) == 2


def test_filters_translate_to_store_params():
    filters = TicketFilters(search="modem", assigned_to="u-1", date_from="2024-01-01")

    assert filters.to_query_params() == {"q": "modem", "assignedTo": "u-1", "dateFrom": "2024-01-01"}


def test_document_without_history_is_accepted():
    ticket = TicketRepository._document_to_ticket(
        {"id": 7, "title": "Legacy", "status": "open", "createdAt": "2023-12-01T00:00:00.000Z"}
    )

    assert ticket.id == "7"
    assert ticket.status_history == ()
    assert ticket.updated_at == ticket.created_at
