"""Pure ticket lifecycle rules.

Nothing here performs I/O or reads the clock: callers pass the acting user and
the current time, and receive either a complete new :class:`Ticket` or a
:class:`LifecycleFailure`. A failed call never yields a partially updated
ticket, so callers persist only when ``result.ok`` is true.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable

from .models import Actor, StatusHistoryEntry, Ticket, TicketFormData
from .state import TicketCategory, TicketPriority, TicketStateMachine, TicketStatus

CREATED_NOTE = "Tiket dibuat"
REQUIRED_FIELDS = ("title", "description", "customer_id")

IdFactory = Callable[[], str]


def new_id() -> str:
    return str(uuid.uuid4())


class FailureKind(str, Enum):
    VALIDATION_ERROR = "ValidationError"
    INVALID_STATUS = "InvalidStatus"
    INVALID_TRANSITION = "InvalidTransition"


@dataclass(frozen=True, slots=True)
class LifecycleFailure:
    """Tagged reason a lifecycle operation was rejected."""

    kind: FailureKind
    message: str
    fields: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LifecycleResult:
    ticket: Ticket | None = None
    failure: LifecycleFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, ticket: Ticket) -> "LifecycleResult":
        return cls(ticket=ticket)

    @classmethod
    def fail(cls, kind: FailureKind, message: str, fields: tuple[str, ...] = ()) -> "LifecycleResult":
        return cls(failure=LifecycleFailure(kind=kind, message=message, fields=fields))


def parse_status(value: TicketStatus | str | None) -> TicketStatus | None:
    if isinstance(value, TicketStatus):
        return value
    try:
        return TicketStatus(str(value))
    except ValueError:
        return None


def apply_transition(
    ticket: Ticket,
    requested_status: TicketStatus | str,
    actor: Actor | None,
    notes: str | None = None,
    *,
    now: datetime,
    id_factory: IdFactory = new_id,
) -> LifecycleResult:
    """Move ``ticket`` to ``requested_status`` and append the audit entry."""

    status = parse_status(requested_status)
    if status is None:
        return LifecycleResult.fail(
            FailureKind.INVALID_STATUS,
            f"Unsupported ticket status: {requested_status!r}",
        )

    if not TicketStateMachine.can_transition(ticket.status, status):
        return LifecycleResult.fail(
            FailureKind.INVALID_TRANSITION,
            "Ticket must be resolved before closing",
        )

    actor = actor or Actor.system()
    entry = StatusHistoryEntry(
        id=id_factory(),
        status=status,
        timestamp=now,
        user_id=actor.id,
        user_name=actor.name,
        notes=notes or "",
    )

    resolved_at = ticket.resolved_at
    if status is TicketStatus.RESOLVED and resolved_at is None:
        resolved_at = now
    closed_at = now if status is TicketStatus.CLOSED else ticket.closed_at

    return LifecycleResult.success(
        replace(
            ticket,
            status=status,
            updated_at=now,
            resolved_at=resolved_at,
            closed_at=closed_at,
            status_history=(*ticket.status_history, entry),
        )
    )


def missing_fields(form: TicketFormData) -> tuple[str, ...]:
    return tuple(name for name in REQUIRED_FIELDS if not str(getattr(form, name) or "").strip())


def _parse_choice(value, enum_type, default):
    if value is None or value == "":
        return default
    try:
        return enum_type(value)
    except ValueError:
        return None


def _validate_form(
    form: TicketFormData,
    *,
    default_priority: TicketPriority,
    default_category: TicketCategory,
) -> tuple[TicketPriority, TicketCategory, LifecycleResult | None]:
    missing = missing_fields(form)
    if missing:
        failure = LifecycleResult.fail(
            FailureKind.VALIDATION_ERROR,
            f"Missing required fields: {', '.join(missing)}",
            fields=missing,
        )
        return default_priority, default_category, failure

    priority = _parse_choice(form.priority, TicketPriority, default_priority)
    category = _parse_choice(form.category, TicketCategory, default_category)
    invalid = tuple(name for name, value in (("priority", priority), ("category", category)) if value is None)
    if invalid:
        failure = LifecycleResult.fail(
            FailureKind.VALIDATION_ERROR,
            f"Invalid values for: {', '.join(invalid)}",
            fields=invalid,
        )
        return default_priority, default_category, failure
    return priority, category, None


def create_ticket(
    form: TicketFormData,
    actor: Actor | None,
    now: datetime,
    *,
    id_factory: IdFactory = new_id,
) -> LifecycleResult:
    """Build a new ``open`` ticket seeded with its first history entry.

    The ticket id is left empty; the record store assigns it on insert.
    """

    priority, category, failure = _validate_form(
        form,
        default_priority=TicketPriority.MEDIUM,
        default_category=TicketCategory.OTHER,
    )
    if failure is not None:
        return failure

    actor = actor or Actor.system()
    initial = TicketStateMachine.initial_state()
    seed = StatusHistoryEntry(
        id=id_factory(),
        status=initial,
        timestamp=now,
        user_id=actor.id,
        user_name=actor.name,
        notes=CREATED_NOTE,
    )
    return LifecycleResult.success(
        Ticket(
            id="",
            title=form.title.strip(),
            description=form.description,
            customer_id=str(form.customer_id),
            customer_name=form.customer_name,
            created_by=actor.id,
            status=initial,
            priority=priority,
            category=category,
            created_at=now,
            updated_at=now,
            status_history=(seed,),
            assigned_to=form.assigned_to or None,
            notes=form.notes or "",
            resolution=form.resolution,
            attachments=tuple(form.attachments),
        )
    )


def apply_edits(ticket: Ticket, form: TicketFormData) -> LifecycleResult:
    """Copy descriptive form fields onto ``ticket`` without touching its status."""

    priority, category, failure = _validate_form(
        form,
        default_priority=ticket.priority,
        default_category=ticket.category,
    )
    if failure is not None:
        return failure

    return LifecycleResult.success(
        replace(
            ticket,
            title=form.title.strip(),
            description=form.description,
            customer_id=str(form.customer_id),
            customer_name=form.customer_name or ticket.customer_name,
            priority=priority,
            category=category,
            assigned_to=form.assigned_to or None,
            notes=form.notes if form.notes is not None else ticket.notes,
            resolution=form.resolution if form.resolution is not None else ticket.resolution,
            attachments=tuple(form.attachments) if form.attachments else ticket.attachments,
        )
    )
