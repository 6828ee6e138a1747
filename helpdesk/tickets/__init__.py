"""Ticket domain models, lifecycle rules and services."""

from .lifecycle import FailureKind, LifecycleFailure, LifecycleResult, apply_transition, create_ticket
from .models import Actor, StatusHistoryEntry, Ticket, TicketFilters, TicketFormData
from .repository import TicketRepository
from .service import (
    InvalidTicketStatusError,
    InvalidTicketTransitionError,
    TicketNotFoundError,
    TicketService,
    TicketValidationError,
)
from .state import TicketCategory, TicketPriority, TicketStateMachine, TicketStatus

__all__ = [
    "Actor",
    "FailureKind",
    "InvalidTicketStatusError",
    "InvalidTicketTransitionError",
    "LifecycleFailure",
    "LifecycleResult",
    "StatusHistoryEntry",
    "Ticket",
    "TicketCategory",
    "TicketFilters",
    "TicketFormData",
    "TicketNotFoundError",
    "TicketPriority",
    "TicketRepository",
    "TicketService",
    "TicketStateMachine",
    "TicketStatus",
    "TicketValidationError",
    "apply_transition",
    "create_ticket",
]
