"""SQLite-based storage for documents and their blocks.

Documents are stored as one row each; blocks as rows carrying ``type``,
``content``, ``level``, an explicit ``position`` and a JSON ``metadata`` bag
with the per-type extras. The bag is only a storage detail: rows are
normalized into typed blocks by ``doc.blocks_wire`` on the way out.

A document and its full block list are always written in one transaction.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator
from uuid import uuid4

from .doc.blocks_models import Block
from .doc.blocks_wire import block_from_dict, block_from_row, block_to_row
from .doc.document import Document
from .errors import NotFoundError, StorageError, ValidationError
from .settings import db_path

logger = logging.getLogger(__name__)

# Thread-local storage for connections
_local = threading.local()

# Schema version for migrations
# v1: documents and blocks tables
SCHEMA_VERSION = 1


def _get_connection() -> sqlite3.Connection:
    """Get a thread-local database connection."""
    if not hasattr(_local, "conn") or _local.conn is None:
        path = db_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        _local.conn = sqlite3.connect(str(path), check_same_thread=False)
        _local.conn.row_factory = sqlite3.Row
        # Enable foreign keys
        _local.conn.execute("PRAGMA foreign_keys = ON")
        # WAL mode for better concurrent access
        _local.conn.execute("PRAGMA journal_mode = WAL")
        _local.initialized = False
    return _local.conn


def close_connection() -> None:
    """Close the thread-local database connection.

    This is primarily used for testing to ensure clean state between tests.
    """
    if hasattr(_local, "conn") and _local.conn is not None:
        try:
            _local.conn.close()
        except sqlite3.Error as e:
            logger.debug("Error closing connection: %s", e)
        _local.conn = None
        _local.initialized = False


@contextmanager
def _transaction() -> Iterator[sqlite3.Connection]:
    """Context manager for database transactions."""
    conn = _get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def _init_schema(conn: sqlite3.Connection) -> None:
    """Initialize the database schema."""
    conn.executescript("""
        -- Schema version tracking
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY
        );

        CREATE TABLE IF NOT EXISTS documents (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- Block ids are unique across all documents
        CREATE TABLE IF NOT EXISTS blocks (
            id TEXT PRIMARY KEY,
            document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
            type TEXT NOT NULL,
            content TEXT,
            level INTEGER,
            metadata TEXT NOT NULL DEFAULT '{}',
            position INTEGER NOT NULL,
            created_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_blocks_document_position
            ON blocks(document_id, position);
    """)
    row = conn.execute("SELECT version FROM schema_version LIMIT 1").fetchone()
    if row is None:
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))


def init_db() -> None:
    """Initialize the database once per connection."""
    _get_connection()
    if getattr(_local, "initialized", False):
        return
    with _transaction() as conn:
        _init_schema(conn)
    _local.initialized = True


def _now_iso() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Row Helpers
# =============================================================================


def _load_blocks(conn: sqlite3.Connection, document_id: str) -> tuple[Block, ...]:
    cursor = conn.execute("""
        SELECT id, type, content, level, metadata, position, created_at
        FROM blocks WHERE document_id = ?
        ORDER BY position ASC
    """, (document_id,))
    return tuple(block_from_row(row) for row in cursor)


def _document_from_row(conn: sqlite3.Connection, row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        blocks=_load_blocks(conn, row["id"]),
    )


def _conflicting_block_id(conn: sqlite3.Connection, document_id: str, ids: list[str]) -> str | None:
    """The id that broke a block insert: repeated in the batch, or owned elsewhere."""
    seen: set[str] = set()
    for block_id in ids:
        if block_id in seen:
            return block_id
        seen.add(block_id)
    for block_id in ids:
        owner = conn.execute(
            "SELECT 1 FROM blocks WHERE id = ? AND document_id != ?",
            (block_id, document_id),
        ).fetchone()
        if owner:
            return block_id
    return None


def _insert_block_rows(
    conn: sqlite3.Connection,
    document_id: str,
    rows: Iterable[dict[str, Any]],
    created_at: Mapping[str, str] | None = None,
) -> None:
    now = _now_iso()
    created_at = created_at or {}
    rows = list(rows)
    try:
        conn.executemany("""
            INSERT INTO blocks (id, document_id, type, content, level, metadata, position, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, [
            (
                row["id"],
                document_id,
                row["type"],
                row["content"],
                row["level"],
                json.dumps(row["metadata"]),
                row["position"],
                created_at.get(row["id"], now),
            )
            for row in rows
        ])
    except sqlite3.IntegrityError as e:
        block_id = _conflicting_block_id(conn, document_id, [row["id"] for row in rows])
        raise StorageError(
            "Block identifier already in use",
            operation="insert_blocks",
            context={"document_id": document_id, "block_id": block_id, "reason": str(e)},
        ) from e


def _require_document_row(conn: sqlite3.Connection, document_id: str) -> sqlite3.Row:
    row = conn.execute(
        "SELECT id, name, description, created_at, updated_at FROM documents WHERE id = ?",
        (document_id,),
    ).fetchone()
    if row is None:
        raise NotFoundError(
            f"Document {document_id} not found",
            resource_type="document",
            resource_id=document_id,
        )
    return row


# =============================================================================
# Document Operations
# =============================================================================


def list_documents() -> list[Document]:
    """List all documents with their blocks, most recently updated first."""
    init_db()
    conn = _get_connection()

    cursor = conn.execute("""
        SELECT id, name, description, created_at, updated_at
        FROM documents
        ORDER BY updated_at DESC
    """)
    return [_document_from_row(conn, row) for row in cursor.fetchall()]


def get_document(document_id: str) -> Document | None:
    """Get a document by ID, or None if not found."""
    init_db()
    conn = _get_connection()

    row = conn.execute(
        "SELECT id, name, description, created_at, updated_at FROM documents WHERE id = ?",
        (document_id,),
    ).fetchone()
    if row is None:
        return None
    return _document_from_row(conn, row)


def create_document(name: str, description: str | None = None) -> Document:
    """Create an empty document; assigns its id and timestamps.

    Raises:
        ValidationError: If the name is blank.
    """
    if not name or not name.strip():
        raise ValidationError("Document name is required", field="name")

    init_db()
    document_id = str(uuid4())
    now = _now_iso()

    with _transaction() as conn:
        conn.execute("""
            INSERT INTO documents (id, name, description, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
        """, (document_id, name.strip(), description or None, now, now))

    logger.info("Created document %s (%s)", document_id, name.strip())
    return Document(
        id=document_id,
        name=name.strip(),
        description=description or None,
        created_at=now,
        updated_at=now,
    )


def update_document_metadata(
    document_id: str,
    *,
    name: str | None = None,
    description: str | None = None,
    clear_description: bool = False,
) -> Document:
    """Update the name and/or description of a stored document.

    Raises:
        NotFoundError: If the document does not exist.
        ValidationError: If ``name`` is given but blank.
    """
    init_db()
    updates = ["updated_at = ?"]
    params: list[Any] = [_now_iso()]

    if name is not None:
        if not name.strip():
            raise ValidationError("Document name is required", field="name")
        updates.append("name = ?")
        params.append(name.strip())
    if description is not None or clear_description:
        updates.append("description = ?")
        params.append(None if clear_description else (description or None))

    with _transaction() as conn:
        _require_document_row(conn, document_id)
        params.append(document_id)
        conn.execute(f"UPDATE documents SET {', '.join(updates)} WHERE id = ?", params)
        return _document_from_row(conn, _require_document_row(conn, document_id))


def insert_blocks(document_id: str, block_inputs: Iterable[Mapping[str, Any]]) -> list[Block]:
    """Append blocks given in the document JSON shape, without identifiers.

    Identifiers and creation timestamps are assigned here; any ``id`` in the
    input is ignored.

    Raises:
        NotFoundError: If the document does not exist.
    """
    init_db()
    blocks = [block_from_dict({**data, "id": None}) for data in block_inputs]

    with _transaction() as conn:
        _require_document_row(conn, document_id)
        start = conn.execute(
            "SELECT COALESCE(MAX(position), -1) + 1 FROM blocks WHERE document_id = ?",
            (document_id,),
        ).fetchone()[0]
        _insert_block_rows(
            conn,
            document_id,
            (block_to_row(block, start + i) for i, block in enumerate(blocks)),
        )
        conn.execute(
            "UPDATE documents SET updated_at = ? WHERE id = ?",
            (_now_iso(), document_id),
        )

    logger.info("Inserted %d blocks into document %s", len(blocks), document_id)
    return blocks


def save_document(document: Document) -> Document:
    """Write a document's metadata and full block list in one transaction.

    Existing blocks of the document are replaced; positions are rewritten to
    match the block order, and blocks that were already stored keep their
    creation timestamp.

    Raises:
        StorageError: If a block id repeats within the document or is already
            used by another document.
    """
    init_db()

    with _transaction() as conn:
        conn.execute("""
            INSERT INTO documents (id, name, description, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                description = excluded.description,
                updated_at = excluded.updated_at
        """, (
            document.id,
            document.name,
            document.description,
            document.created_at,
            document.updated_at,
        ))

        created_at = {
            row["id"]: row["created_at"]
            for row in conn.execute(
                "SELECT id, created_at FROM blocks WHERE document_id = ?",
                (document.id,),
            )
        }
        conn.execute("DELETE FROM blocks WHERE document_id = ?", (document.id,))
        _insert_block_rows(
            conn,
            document.id,
            (block_to_row(block, i) for i, block in enumerate(document.blocks)),
            created_at,
        )

    logger.debug("Saved document %s with %d blocks", document.id, len(document.blocks))
    return document


def delete_document(document_id: str) -> bool:
    """Delete a document and its blocks. Returns False if it did not exist."""
    init_db()
    with _transaction() as conn:
        cursor = conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))
    deleted = cursor.rowcount > 0
    if deleted:
        logger.info("Deleted document %s", document_id)
    return deleted
