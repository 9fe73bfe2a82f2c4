"""
Document store over SQLite.

Documents are JSON maps grouped in slash-separated collection paths
(``ships``, ``ships/<ship_id>/ratings``, ``users``, ...). The API mirrors a
hosted document database: get, query-by-field, add, set (optionally merging),
update and delete, each committed on its own with last-write-wins semantics.
"""

from __future__ import annotations

import json
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint, case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Mapped, mapped_column, Session

from shiprate_app.repositories.database import Base
from shiprate_app.services.errors import InvalidArgument, NotFound, StoreUnavailable

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


class _ServerTimestamp:
    def __repr__(self) -> str:  # pragma: no cover - trivial
        return "SERVER_TIMESTAMP"


# Placeholder replaced by the store's own clock when a document is written
SERVER_TIMESTAMP = _ServerTimestamp()


class DocumentORM(Base):
    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
        UniqueConstraint("collection", "unique_key", name="uq_documents_collection_unique_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    doc_id: Mapped[str] = mapped_column(String(64), nullable=False)
    data_json: Mapped[str] = mapped_column(Text, default="{}")
    # Optional dedup key for conditional creates; NULLs never collide
    unique_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


@dataclass(slots=True)
class Document:
    collection: str
    id: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return f"{self.collection}/{self.id}"


def collection_path(*parts: str) -> str:
    """Join collection/document ids into a collection path."""
    return "/".join(p.strip("/") for p in parts)


def _parse_data(json_str: str | None) -> Dict[str, Any]:
    try:
        if not json_str:
            return {}
        d = json.loads(json_str)
        return d if isinstance(d, dict) else {}
    except (json.JSONDecodeError, TypeError, ValueError):
        return {}


def _serialize_data(data: Dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, sort_keys=True)


def _resolve_sentinels(value: Any, now: str) -> Any:
    if value is SERVER_TIMESTAMP:
        return now
    if isinstance(value, dict):
        return {k: _resolve_sentinels(v, now) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_sentinels(v, now) for v in value]
    return value


def _same_value(stored: Any, wanted: Any) -> bool:
    # True == 1 in Python as well, so booleans only match booleans
    if isinstance(stored, bool) or isinstance(wanted, bool):
        return type(stored) is type(wanted) and stored == wanted
    return stored == wanted


def _deep_merge(target: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``patch`` into ``target``; nested maps merge, everything else overwrites."""
    merged = dict(target)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class DocumentStore:
    """Collection/document API on top of a SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def _guard(self, operation: str, path: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.error("Store %s failed for %s: %s", operation, path, exc)
            raise StoreUnavailable(f"Document store {operation} failed for {path}") from exc

    def _find(self, collection: str, doc_id: str) -> Optional[DocumentORM]:
        return (
            self._db.query(DocumentORM)
            .filter(DocumentORM.collection == collection, DocumentORM.doc_id == doc_id)
            .one_or_none()
        )

    def _prepare(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return _resolve_sentinels(data, _utc_now().isoformat())

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._guard("get", f"{collection}/{doc_id}"):
            obj = self._find(collection, doc_id)
        if obj is None:
            return None
        return Document(collection=collection, id=obj.doc_id, data=_parse_data(obj.data_json))

    def list(self, collection: str) -> List[Document]:
        """All documents of a collection in creation order."""
        with self._guard("list", collection):
            rows = (
                self._db.query(DocumentORM)
                .filter(DocumentORM.collection == collection)
                .order_by(DocumentORM.id)
                .all()
            )
        return [
            Document(collection=collection, id=obj.doc_id, data=_parse_data(obj.data_json))
            for obj in rows
        ]

    def query(
        self,
        collection: str,
        field_name: str,
        equals: Any,
        limit: int | None = None,
    ) -> List[Document]:
        """
        Documents whose top-level ``field_name`` equals ``equals``, oldest first.

        SQLite filters on ``json_extract`` so only candidate rows are loaded;
        the exact comparison is repeated in Python because SQLite compares
        JSON booleans as integers.
        """
        path = '$."%s"' % field_name.replace('"', '\\"')
        extracted = case(
            (func.json_valid(DocumentORM.data_json) == 1, func.json_extract(DocumentORM.data_json, path)),
            else_=None,
        )
        with self._guard("query", collection):
            rows = (
                self._db.query(DocumentORM)
                .filter(DocumentORM.collection == collection, extracted == equals)
                .order_by(DocumentORM.id)
                .all()
            )

        matches: List[Document] = []
        for obj in rows:
            data = _parse_data(obj.data_json)
            if field_name in data and _same_value(data[field_name], equals):
                matches.append(Document(collection=collection, id=obj.doc_id, data=data))
                if limit is not None and len(matches) >= limit:
                    break
        return matches

    def add(self, collection: str, data: Dict[str, Any]) -> Document:
        """Create a document with a generated id."""
        doc_id = uuid.uuid4().hex
        payload = self._prepare(data)
        with self._guard("add", collection):
            obj = DocumentORM(
                collection=collection,
                doc_id=doc_id,
                data_json=_serialize_data(payload),
            )
            self._db.add(obj)
            self._db.commit()
        logger.debug("Added %s/%s", collection, doc_id)
        return Document(collection=collection, id=doc_id, data=payload)

    def create_if_absent(
        self,
        collection: str,
        unique_key: str,
        data: Dict[str, Any],
    ) -> Tuple[Document, bool]:
        """
        Create a document unless one with ``unique_key`` already exists.

        Returns the stored document and whether it was created by this call.
        The unique index makes the check-then-create atomic across writers.
        """
        existing = self._find_by_unique_key(collection, unique_key)
        if existing is not None:
            return existing, False

        doc_id = uuid.uuid4().hex
        payload = self._prepare(data)
        try:
            obj = DocumentORM(
                collection=collection,
                doc_id=doc_id,
                data_json=_serialize_data(payload),
                unique_key=unique_key,
            )
            self._db.add(obj)
            self._db.commit()
        except IntegrityError:
            # Lost the race to another writer: use the winner's document
            self._db.rollback()
            existing = self._find_by_unique_key(collection, unique_key)
            if existing is None:
                raise StoreUnavailable(
                    f"Conditional create failed for {collection} ({unique_key})"
                )
            return existing, False
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StoreUnavailable(f"Document store add failed for {collection}") from exc
        return Document(collection=collection, id=doc_id, data=payload), True

    def _find_by_unique_key(self, collection: str, unique_key: str) -> Optional[Document]:
        with self._guard("get", f"{collection}[{unique_key}]"):
            obj = (
                self._db.query(DocumentORM)
                .filter(
                    DocumentORM.collection == collection,
                    DocumentORM.unique_key == unique_key,
                )
                .one_or_none()
            )
        if obj is None:
            return None
        return Document(collection=collection, id=obj.doc_id, data=_parse_data(obj.data_json))

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False,
        unique_key: str | None = None,
    ) -> Document:
        """
        Create or overwrite a document; with ``merge`` only the given keys change.

        A ``unique_key`` replaces the document's dedup key. When another
        document of the collection already holds it, nothing is written and
        :class:`InvalidArgument` is raised.
        """
        payload = self._prepare(data)
        path = f"{collection}/{doc_id}"
        with self._guard("set", path):
            obj = self._find(collection, doc_id)
            if obj is None:
                obj = DocumentORM(collection=collection, doc_id=doc_id, data_json="{}")
                self._db.add(obj)
                current: Dict[str, Any] = {}
            else:
                current = _parse_data(obj.data_json)
            new_data = _deep_merge(current, payload) if merge else payload
            obj.data_json = _serialize_data(new_data)
            obj.updated_at = _utc_now()
            if unique_key is not None:
                obj.unique_key = unique_key
            try:
                self._db.commit()
            except IntegrityError as exc:
                if unique_key is None:
                    raise
                self._db.rollback()
                raise InvalidArgument(
                    f"{unique_key} is already used by another document in {collection}"
                ) from exc
        return Document(collection=collection, id=doc_id, data=new_data)

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> Document:
        """Replace the given top-level fields of an existing document."""
        payload = self._prepare(data)
        path = f"{collection}/{doc_id}"
        with self._guard("update", path):
            obj = self._find(collection, doc_id)
            if obj is None:
                raise NotFound(f"Document {path} not found")
            new_data = _parse_data(obj.data_json)
            new_data.update(payload)
            obj.data_json = _serialize_data(new_data)
            obj.updated_at = _utc_now()
            self._db.commit()
        return Document(collection=collection, id=doc_id, data=new_data)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._guard("delete", f"{collection}/{doc_id}"):
            obj = self._find(collection, doc_id)
            if obj is None:
                return
            self._db.delete(obj)
            self._db.commit()
