"""Document database with real-time snapshot listeners.

Documents are JSON objects grouped in collections addressed by slash-separated
paths (``devices/<device_id>/todos``) and persisted in a single SQLite table.
Listeners registered with :meth:`CollectionReference.on_snapshot` receive the
full ordered contents of their collection right away and again after every
committed write. Writes made by other processes are picked up by
:meth:`DocumentStore.poll`.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

from bunny_todo.adapters.utils import generate_document_id, now_iso
from bunny_todo.utils.logger import get_logger


class _ServerTimestamp:
    """Sentinel replaced by the commit time when a document is written."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    doc_id TEXT NOT NULL,
    data TEXT NOT NULL,
    PRIMARY KEY (collection, doc_id)
)
"""


class DocumentNotFoundError(LookupError):
    """Raised when updating a document that does not exist."""


@dataclass
class DocumentSnapshot:
    """A document's id and data at read time."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.data}


SnapshotListener = Callable[[list[DocumentSnapshot]], None]
ErrorListener = Callable[[Exception], None]

# Failures reading documents back: a broken database or a corrupt JSON body
READ_ERRORS = (sqlite3.Error, ValueError)


@dataclass
class _Listener:
    callback: SnapshotListener
    on_error: ErrorListener | None
    order_by: str | None
    descending: bool


def _resolve_timestamps(data: dict[str, Any], commit_time: str) -> dict[str, Any]:
    return {
        key: commit_time if value is SERVER_TIMESTAMP else value
        for key, value in data.items()
    }


def default_document_db() -> Path:
    return Path(user_data_dir("bunny_todo")) / "documents.db"


class DocumentStore:
    """SQLite-backed document database."""

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path else default_document_db()
        self._connection: sqlite3.Connection | None = None
        self._listeners: dict[str, list[_Listener]] = {}
        self._data_version: int | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(str(self.db_path), timeout=10.0)
            connection.row_factory = sqlite3.Row
            connection.execute(SCHEMA)
            connection.commit()
            self._connection = connection
            self._data_version = self._read_data_version()
        return self._connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def collection(self, path: str) -> CollectionReference:
        return CollectionReference(self, path.strip("/"))

    # ------------------------------------------------------------------
    # Reads and writes
    # ------------------------------------------------------------------

    def _query(
        self, collection: str, order_by: str | None, descending: bool
    ) -> list[DocumentSnapshot]:
        rows = self.connection.execute(
            "SELECT doc_id, data FROM documents WHERE collection = ?",
            (collection,),
        ).fetchall()
        docs = [DocumentSnapshot(id=row["doc_id"], data=json.loads(row["data"])) for row in rows]
        if order_by:
            docs.sort(
                key=lambda doc: (doc.data.get(order_by) is not None, doc.data.get(order_by) or ""),
                reverse=descending,
            )
        return docs

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
        resolved = _resolve_timestamps(data, now_iso())
        with self.connection:
            self.connection.execute(
                "INSERT OR REPLACE INTO documents (collection, doc_id, data) VALUES (?, ?, ?)",
                (collection, doc_id, json.dumps(resolved)),
            )
        self._after_commit(collection)
        return resolved

    def _update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        resolved = _resolve_timestamps(fields, now_iso())
        with self.connection:
            row = self.connection.execute(
                "SELECT data FROM documents WHERE collection = ? AND doc_id = ?",
                (collection, doc_id),
            ).fetchone()
            if row is None:
                raise DocumentNotFoundError(f"{collection}/{doc_id}")
            data = {**json.loads(row["data"]), **resolved}
            self.connection.execute(
                "UPDATE documents SET data = ? WHERE collection = ? AND doc_id = ?",
                (json.dumps(data), collection, doc_id),
            )
        self._after_commit(collection)
        return data

    def _delete(self, collection: str, doc_id: str) -> bool:
        with self.connection:
            cursor = self.connection.execute(
                "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
                (collection, doc_id),
            )
        if cursor.rowcount:
            self._after_commit(collection)
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def _listen(self, collection: str, listener: _Listener) -> Callable[[], None]:
        logger = get_logger()
        try:
            docs = self._query(collection, listener.order_by, listener.descending)
        except READ_ERRORS as e:
            self._fail(collection, listener, e)
            return lambda: None

        self._listeners.setdefault(collection, []).append(listener)
        logger.debug("listening on %s", collection)
        self._deliver(listener, docs)

        def unsubscribe() -> None:
            listeners = self._listeners.get(collection, [])
            if listener in listeners:
                listeners.remove(listener)
                logger.debug("stopped listening on %s", collection)

        return unsubscribe

    def _deliver(self, listener: _Listener, docs: list[DocumentSnapshot]) -> None:
        try:
            listener.callback(docs)
        except Exception:
            # The write has already committed.
            get_logger().exception("snapshot callback raised")

    def _fail(self, collection: str, listener: _Listener, error: Exception) -> None:
        """Drop a listener whose query failed and hand it the error."""
        get_logger().error("snapshot listener on %s failed: %s", collection, error)
        listeners = self._listeners.get(collection, [])
        if listener in listeners:
            listeners.remove(listener)
        if listener.on_error is not None:
            listener.on_error(error)

    def _notify(self, collection: str) -> None:
        for listener in list(self._listeners.get(collection, [])):
            try:
                docs = self._query(collection, listener.order_by, listener.descending)
            except READ_ERRORS as e:
                self._fail(collection, listener, e)
                continue
            self._deliver(listener, docs)

    def _after_commit(self, collection: str) -> None:
        self._data_version = self._read_data_version()
        self._notify(collection)

    def _read_data_version(self) -> int:
        return self.connection.execute("PRAGMA data_version").fetchone()[0]

    def poll(self) -> bool:
        """Notify every listener if another connection has committed.

        Returns:
            True if a change from another process was detected
        """
        try:
            version = self._read_data_version()
        except sqlite3.Error as e:
            for collection, listeners in list(self._listeners.items()):
                for listener in list(listeners):
                    self._fail(collection, listener, e)
            return False
        if version == self._data_version:
            return False
        self._data_version = version
        for collection in list(self._listeners):
            self._notify(collection)
        return True


class CollectionReference:
    """A collection of documents at a path."""

    def __init__(self, store: DocumentStore, path: str):
        self.store = store
        self.path = path

    def document(self, doc_id: str | None = None) -> DocumentReference:
        return DocumentReference(self, doc_id or generate_document_id())

    def stream(
        self, order_by: str | None = None, descending: bool = False
    ) -> list[DocumentSnapshot]:
        return self.store._query(self.path, order_by, descending)

    def on_snapshot(
        self,
        callback: SnapshotListener,
        on_error: ErrorListener | None = None,
        *,
        order_by: str | None = "created_at",
        descending: bool = True,
    ) -> Callable[[], None]:
        """Listen for changes to this collection.

        Returns:
            Unsubscribe handle
        """
        listener = _Listener(callback, on_error, order_by, descending)
        return self.store._listen(self.path, listener)


class DocumentReference:
    """A single document in a collection."""

    def __init__(self, collection: CollectionReference, doc_id: str):
        self.collection = collection
        self.id = doc_id

    @property
    def path(self) -> str:
        return f"{self.collection.path}/{self.id}"

    def set(self, data: dict[str, Any]) -> dict[str, Any]:
        return self.collection.store._write(self.collection.path, self.id, data)

    def update(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge fields into the document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        return self.collection.store._update(self.collection.path, self.id, fields)

    def delete(self) -> bool:
        return self.collection.store._delete(self.collection.path, self.id)
