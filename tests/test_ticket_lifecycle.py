from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from helpdesk.tickets.lifecycle import (
    CREATED_NOTE,
    FailureKind,
    apply_edits,
    apply_transition,
    create_ticket,
)
from helpdesk.tickets.models import Actor, TicketFormData
from helpdesk.tickets.state import TicketCategory, TicketPriority, TicketStatus


T0 = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(hours=2)
T2 = T0 + timedelta(hours=5)


@pytest.mark.parametrize(
    "current, target",
    [
        (TicketStatus.OPEN, TicketStatus.IN_PROGRESS),
        (TicketStatus.OPEN, TicketStatus.RESOLVED),
        (TicketStatus.OPEN, TicketStatus.CANCELLED),
        (TicketStatus.IN_PROGRESS, TicketStatus.OPEN),
        (TicketStatus.RESOLVED, TicketStatus.OPEN),
        (TicketStatus.RESOLVED, TicketStatus.CLOSED),
        (TicketStatus.CANCELLED, TicketStatus.IN_PROGRESS),
    ],
)
def test_permitted_transition_updates_status_and_appends_entry(make_ticket, actor, id_factory, current, target):
    ticket = make_ticket(status=current)

    result = apply_transition(ticket, target, actor, now=T1, id_factory=id_factory)

    assert result.ok
    assert result.ticket.status == target
    assert result.ticket.updated_at == T1
    assert len(result.ticket.status_history) == len(ticket.status_history) + 1
    assert result.ticket.status_history[-1].status == result.ticket.status


@pytest.mark.parametrize(
    "current",
    [TicketStatus.OPEN, TicketStatus.IN_PROGRESS, TicketStatus.CLOSED, TicketStatus.CANCELLED],
)
def test_closing_requires_resolved_status(make_ticket, actor, current):
    ticket = make_ticket(status=current)

    result = apply_transition(ticket, TicketStatus.CLOSED, actor, now=T1)

    assert not result.ok
    assert result.ticket is None
    assert result.failure.kind is FailureKind.INVALID_TRANSITION
    assert "resolved before closing" in result.failure.message
    assert ticket.status == current


def test_existing_history_is_never_altered(make_ticket, actor, id_factory):
    ticket = make_ticket(status=TicketStatus.IN_PROGRESS)
    before = ticket.status_history

    result = apply_transition(ticket, "resolved", actor, "fixed modem", now=T1, id_factory=id_factory)

    assert result.ticket.status_history[: len(before)] == before
    assert ticket.status_history is before
    entry = result.ticket.status_history[-1]
    assert entry.id == "h-1"
    assert entry.timestamp == T1
    assert (entry.user_id, entry.user_name) == ("u-1", "Rina CS")
    assert entry.notes == "fixed modem"


def test_notes_default_to_empty_string(make_ticket, actor):
    result = apply_transition(make_ticket(), TicketStatus.IN_PROGRESS, actor, now=T1)

    assert result.ticket.status_history[-1].notes == ""


def test_missing_actor_falls_back_to_system(make_ticket):
    result = apply_transition(make_ticket(), TicketStatus.IN_PROGRESS, None, now=T1)

    entry = result.ticket.status_history[-1]
    assert (entry.user_id, entry.user_name) == ("system", "System")


def test_resolved_at_is_set_only_once(make_ticket, actor):
    ticket = make_ticket(status=TicketStatus.RESOLVED, resolved_at=T0)

    reopened = apply_transition(ticket, TicketStatus.OPEN, actor, now=T1).ticket
    resolved_again = apply_transition(reopened, TicketStatus.RESOLVED, actor, now=T2).ticket

    assert resolved_again.resolved_at == T0
    assert resolved_again.updated_at == T2


def test_other_fields_are_carried_over(make_ticket, actor):
    ticket = make_ticket(assigned_to="u-9", notes="call first")

    updated = apply_transition(ticket, TicketStatus.IN_PROGRESS, actor, now=T1).ticket

    assert replace(updated, status=ticket.status, updated_at=ticket.updated_at, status_history=ticket.status_history) == ticket


def test_scenario_open_to_closed_is_rejected(make_ticket, actor):
    result = apply_transition(make_ticket(status=TicketStatus.OPEN), "closed", actor, now=T1)

    assert result.failure.kind is FailureKind.INVALID_TRANSITION


def test_scenario_resolve_then_close(make_ticket, actor):
    ticket = make_ticket(status=TicketStatus.OPEN)

    resolved = apply_transition(ticket, "resolved", actor, now=T1).ticket
    assert resolved.status is TicketStatus.RESOLVED
    assert resolved.resolved_at == T1
    assert len(resolved.status_history) == len(ticket.status_history) + 1

    closed = apply_transition(resolved, "closed", actor, now=T2)
    assert closed.ok
    assert closed.ticket.status is TicketStatus.CLOSED
    assert closed.ticket.closed_at == T2
    assert closed.ticket.resolved_at == T1


def test_scenario_unknown_status_is_rejected(make_ticket, actor):
    ticket = make_ticket()

    result = apply_transition(ticket, "archived", actor, now=T1)

    assert result.failure.kind is FailureKind.INVALID_STATUS
    assert result.ticket is None


def test_create_ticket_seeds_open_history(actor, id_factory):
    form = TicketFormData(title="Lambat", description="Speed drop", customer_id="c-7", customer_name="Sari")

    result = create_ticket(form, actor, T0, id_factory=id_factory)

    ticket = result.ticket
    assert ticket.status is TicketStatus.OPEN
    assert ticket.created_at == ticket.updated_at == T0
    assert ticket.priority is TicketPriority.MEDIUM
    assert ticket.category is TicketCategory.OTHER
    assert ticket.created_by == "u-1"
    assert len(ticket.status_history) == 1
    seed = ticket.status_history[0]
    assert seed.status == ticket.status
    assert seed.notes == CREATED_NOTE
    assert (seed.id, seed.user_name) == ("h-1", "Rina CS")


def test_create_ticket_lists_every_missing_field(actor):
    result = create_ticket(TicketFormData(title="  ", description="x"), actor, T0)

    assert result.failure.kind is FailureKind.VALIDATION_ERROR
    assert result.failure.fields == ("title", "customer_id")


def test_create_ticket_rejects_unknown_priority(actor):
    form = TicketFormData(title="a", description="b", customer_id="c", priority="urgent", category="billing")

    result = create_ticket(form, actor, T0)

    assert result.failure.kind is FailureKind.VALIDATION_ERROR
    assert result.failure.fields == ("priority",)


def test_apply_edits_keeps_status_and_history(make_ticket):
    ticket = make_ticket(status=TicketStatus.IN_PROGRESS)
    form = TicketFormData(
        title="Modem rusak",
        description="Ganti modem",
        customer_id="c-1",
        priority="critical",
        category="hardware",
        assigned_to="u-4",
    )

    edited = apply_edits(ticket, form).ticket

    assert edited.title == "Modem rusak"
    assert edited.priority is TicketPriority.CRITICAL
    assert edited.category is TicketCategory.HARDWARE
    assert edited.assigned_to == "u-4"
    assert edited.customer_name == "Budi"
    assert edited.status is ticket.status
    assert edited.status_history == ticket.status_history


def test_system_actor_identity():
    assert Actor.system() == Actor(id="system", name="System")
