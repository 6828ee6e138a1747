"""API route modules."""

from . import auth, customers, dashboard, ping, reports, tickets, users

__all__ = ["auth", "customers", "dashboard", "ping", "reports", "tickets", "users"]
