"""Flat JSON file holding every collection of the mock record store."""

from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import date, datetime, time, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Mapping, MutableMapping

from helpdesk.core.timestamps import format_timestamp, parse_timestamp, utcnow

logger = logging.getLogger(__name__)

Document = dict[str, Any]

RESERVED_PARAMS = frozenset({"q", "dateFrom", "dateTo", "_sort", "_order", "_limit"})


def _as_query_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _iter_strings(value: Any):
    if isinstance(value, str):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _iter_strings(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _iter_strings(item)
    elif value is not None and not isinstance(value, bool):
        yield str(value)


def _date_bound(text: str, *, upper: bool) -> datetime | None:
    if len(text) == 10:
        try:
            day = date.fromisoformat(text)
        except ValueError:
            return None
        return datetime.combine(day, time.max if upper else time.min, tzinfo=timezone.utc)
    return parse_timestamp(text)


class JsonFileDatabase:
    """Collections of loosely-typed documents persisted to one JSON file.

    Every call reads the file, applies the change and writes it back under a
    process-local lock. There is no conflict detection: the last write wins.
    Writes stamp ``updatedAt`` unless the document carries its own, so a
    ticket keeps the time of its latest transition.
    """

    def __init__(self, path: str | os.PathLike[str], *, clock: Callable[[], datetime] = utcnow) -> None:
        self._path = Path(path)
        self._clock = clock
        self._lock = Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> MutableMapping[str, list[Document]]:
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Database file {self._path} must contain a JSON object")
        return data

    def _save(self, data: Mapping[str, list[Document]]) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def list(self, collection: str, params: Mapping[str, str] | None = None) -> list[Document]:
        params = dict(params or {})
        with self._lock:
            documents = list(self._load().get(collection, []))

        for key, expected in params.items():
            if key in RESERVED_PARAMS:
                continue
            documents = [doc for doc in documents if _as_query_text(doc.get(key)) == expected]

        search = params.get("q")
        if search:
            needle = search.casefold()
            documents = [
                doc for doc in documents if any(needle in text.casefold() for text in _iter_strings(doc))
            ]

        lower = _date_bound(params["dateFrom"], upper=False) if params.get("dateFrom") else None
        upper = _date_bound(params["dateTo"], upper=True) if params.get("dateTo") else None
        if lower is not None or upper is not None:
            documents = [doc for doc in documents if _within(parse_timestamp(doc.get("createdAt")), lower, upper)]

        sort_key = params.get("_sort")
        if sort_key:
            reverse = params.get("_order", "asc").lower() == "desc"
            documents.sort(key=lambda doc: _as_query_text(doc.get(sort_key)), reverse=reverse)

        limit = _as_limit(params.get("_limit"))
        if limit is not None:
            documents = documents[:limit]
        return documents

    def get(self, collection: str, document_id: str) -> Document | None:
        with self._lock:
            for document in self._load().get(collection, []):
                if _as_query_text(document.get("id")) == str(document_id):
                    return document
        return None

    def insert(self, collection: str, document: Mapping[str, Any]) -> Document:
        stamp = format_timestamp(self._clock())
        created = dict(document)
        if not created.get("id"):
            created["id"] = uuid.uuid4().hex[:8]
        created["createdAt"] = created.get("createdAt") or stamp
        created["updatedAt"] = created.get("updatedAt") or stamp
        with self._lock:
            data = self._load()
            items = data.setdefault(collection, [])
            if any(_as_query_text(item.get("id")) == str(created["id"]) for item in items):
                raise KeyError(f"Duplicate id {created['id']} in {collection}")
            items.append(created)
            self._save(data)
        logger.info("Inserted %s/%s", collection, created["id"])
        return created

    def replace(self, collection: str, document_id: str, document: Mapping[str, Any]) -> Document | None:
        return self._update(collection, document_id, document, merge=False)

    def patch(self, collection: str, document_id: str, changes: Mapping[str, Any]) -> Document | None:
        return self._update(collection, document_id, changes, merge=True)

    def _update(
        self, collection: str, document_id: str, values: Mapping[str, Any], *, merge: bool
    ) -> Document | None:
        stamp = format_timestamp(self._clock())
        with self._lock:
            data = self._load()
            items = data.get(collection, [])
            for index, current in enumerate(items):
                if _as_query_text(current.get("id")) != str(document_id):
                    continue
                updated = {**current, **values} if merge else dict(values)
                updated["id"] = current["id"]
                updated["updatedAt"] = values.get("updatedAt") or stamp
                items[index] = updated
                self._save(data)
                break
            else:
                return None
        logger.info("Updated %s/%s", collection, document_id)
        return updated

    def delete(self, collection: str, document_id: str) -> bool:
        with self._lock:
            data = self._load()
            items = data.get(collection, [])
            remaining = [item for item in items if _as_query_text(item.get("id")) != str(document_id)]
            if len(remaining) == len(items):
                return False
            data[collection] = remaining
            self._save(data)
        logger.info("Deleted %s/%s", collection, document_id)
        return True


def _within(value: datetime | None, lower: datetime | None, upper: datetime | None) -> bool:
    if value is None:
        return False
    if lower is not None and value < lower:
        return False
    if upper is not None and value > upper:
        return False
    return True


def _as_limit(text: str | None) -> int | None:
    if not text:
        return None
    try:
        limit = int(text)
    except ValueError:
        return None
    return limit if limit >= 0 else None
