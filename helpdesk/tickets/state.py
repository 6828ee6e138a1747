from __future__ import annotations

from enum import Enum


class TicketStatus(str, Enum):
    """Supported states for a ticket's lifecycle."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketCategory(str, Enum):
    CONNECTION = "connection"
    SPEED = "speed"
    BILLING = "billing"
    HARDWARE = "hardware"
    OTHER = "other"


class TicketStateMachine:
    """Validate ticket lifecycle transitions.

    Every edge is open except entering ``closed``, which is only reachable from
    ``resolved``. ``closed`` and ``cancelled`` are terminal by convention; the
    machine does not block leaving them.
    """

    _GUARDS: dict[TicketStatus, frozenset[TicketStatus]] = {
        TicketStatus.CLOSED: frozenset({TicketStatus.RESOLVED}),
    }

    @classmethod
    def initial_state(cls) -> TicketStatus:
        return TicketStatus.OPEN

    @classmethod
    def can_transition(cls, current: TicketStatus, new: TicketStatus) -> bool:
        required = cls._GUARDS.get(new)
        if required is None:
            return True
        return current in required

    @classmethod
    def allowed_targets(cls, current: TicketStatus) -> list[TicketStatus]:
        """Statuses selectable from ``current``, in declaration order."""

        return [status for status in TicketStatus if cls.can_transition(current, status)]
