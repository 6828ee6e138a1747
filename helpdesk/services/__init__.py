"""Service layer talking to the record store."""

from .record_store import RecordNotFoundError, RecordStoreClient, RecordStoreError

__all__ = ["RecordNotFoundError", "RecordStoreClient", "RecordStoreError"]
