from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Sequence

from opentelemetry import trace

from helpdesk.core.timestamps import utcnow

from .lifecycle import (
    FailureKind,
    IdFactory,
    LifecycleFailure,
    LifecycleResult,
    apply_edits,
    apply_transition,
    create_ticket,
    new_id,
)
from .models import Actor, StatusHistoryEntry, Ticket, TicketFilters, TicketFormData
from .repository import TicketRepository
from .state import TicketStatus

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class TicketServiceError(RuntimeError):
    """Base error for ticket service issues."""


class TicketNotFoundError(TicketServiceError):
    """Raised when a ticket could not be located."""


class TicketValidationError(TicketServiceError):
    """Raised when required ticket fields are missing or malformed."""

    def __init__(self, message: str, fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.fields = tuple(fields)


class InvalidTicketStatusError(TicketServiceError):
    """Raised when an unknown status value is requested."""


class InvalidTicketTransitionError(TicketServiceError):
    """Raised when attempting to transition to an invalid state."""


_FAILURE_ERRORS: dict[FailureKind, type[TicketServiceError]] = {
    FailureKind.INVALID_STATUS: InvalidTicketStatusError,
    FailureKind.INVALID_TRANSITION: InvalidTicketTransitionError,
}


def _raise_for(failure: LifecycleFailure) -> None:
    if failure.kind is FailureKind.VALIDATION_ERROR:
        raise TicketValidationError(failure.message, failure.fields)
    raise _FAILURE_ERRORS[failure.kind](failure.message)


def _unwrap(result: LifecycleResult) -> Ticket:
    if result.failure is not None:
        _raise_for(result.failure)
    if result.ticket is None:
        raise TicketServiceError("Lifecycle step returned neither a ticket nor a failure")
    return result.ticket


@dataclass(slots=True)
class BulkDeleteResult:
    deleted: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


class TicketService:
    """High level orchestration for ticket lifecycle operations.

    Every mutation is one read-modify-write cycle: fetch the stored ticket,
    compute the next state with the pure lifecycle functions, and persist only
    when that computation succeeded. Concurrent editors race; the last write
    wins.
    """

    def __init__(
        self,
        repository: TicketRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
        id_factory: IdFactory = new_id,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._id_factory = id_factory

    async def create_ticket(self, form: TicketFormData, *, actor: Actor | None) -> Ticket:
        ticket = _unwrap(create_ticket(form, actor, self._clock(), id_factory=self._id_factory))
        created = await self._repository.create(ticket)
        logger.info("Ticket %s created by %s", created.id, created.created_by)
        return created

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self._repository.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        return ticket

    async def list_tickets(self, filters: TicketFilters | None = None) -> list[Ticket]:
        return await self._repository.list(filters)

    async def get_history(self, ticket_id: str) -> tuple[StatusHistoryEntry, ...]:
        ticket = await self.get_ticket(ticket_id)
        return ticket.status_history

    async def change_status(
        self,
        ticket_id: str,
        *,
        new_status: TicketStatus | str,
        actor: Actor | None,
        notes: str | None = None,
    ) -> Ticket:
        with tracer.start_as_current_span("tickets.change_status") as span:
            span.set_attribute("ticket.id", ticket_id)
            current = await self.get_ticket(ticket_id)
            result = apply_transition(
                current, new_status, actor, notes, now=self._clock(), id_factory=self._id_factory
            )
            if result.failure is not None:
                span.set_attribute("ticket.rejected", result.failure.kind.value)
                logger.warning(
                    "Rejected transition of ticket %s from %s to %s: %s",
                    ticket_id,
                    current.status.value,
                    getattr(new_status, "value", new_status),
                    result.failure.message,
                )
            return await self._persist(ticket_id, _unwrap(result))

    async def update_ticket(
        self,
        ticket_id: str,
        form: TicketFormData,
        *,
        status: TicketStatus | str,
        actor: Actor | None,
    ) -> Ticket:
        """Save the edit form: descriptive fields plus one status transition.

        Saving always records a history entry, even when ``status`` is the
        current one; the form notes become the entry's notes.
        """

        current = await self.get_ticket(ticket_id)
        edited = _unwrap(apply_edits(current, form))
        result = apply_transition(
            edited, status, actor, form.notes, now=self._clock(), id_factory=self._id_factory
        )
        return await self._persist(ticket_id, _unwrap(result))

    async def delete_ticket(self, ticket_id: str) -> None:
        deleted = await self._repository.delete(ticket_id)
        if not deleted:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        logger.info("Ticket %s deleted", ticket_id)

    async def bulk_delete(self, ticket_ids: Iterable[str]) -> BulkDeleteResult:
        result = BulkDeleteResult()
        for ticket_id in dict.fromkeys(ticket_ids):
            if await self._repository.delete(ticket_id):
                result.deleted.append(ticket_id)
            else:
                result.missing.append(ticket_id)
        logger.info("Bulk delete removed %d tickets (%d missing)", len(result.deleted), len(result.missing))
        return result

    async def _persist(self, ticket_id: str, ticket: Ticket) -> Ticket:
        updated = await self._repository.put(ticket_id, ticket)
        if updated is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        logger.info("Ticket %s moved to %s", ticket_id, updated.status.value)
        return updated
