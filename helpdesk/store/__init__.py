"""Mock JSON-document record store backing the helpdesk."""

from .app import create_store_app
from .database import JsonFileDatabase

__all__ = ["JsonFileDatabase", "create_store_app"]
