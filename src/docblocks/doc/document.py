"""Documents: ordered block collections with title and timestamps.

Documents are immutable values. Every operation here returns a new
``Document`` with ``updated_at`` refreshed and leaves its input untouched, so
a failed operation can never leave a half-applied change behind.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from ..errors import DuplicateBlockIdentifier, NotFoundError, ValidationError
from .blocks_models import Block

_UNSET: Any = object()


def _now_iso() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Document:
    """A document ("project"): metadata plus blocks in rendering order."""

    id: str
    name: str
    created_at: str
    updated_at: str
    description: str | None = None
    blocks: tuple[Block, ...] = ()

    def block_ids(self) -> list[str]:
        return [block.id for block in self.blocks]

    def find_block(self, block_id: str) -> Block | None:
        for block in self.blocks:
            if block.id == block_id:
                return block
        return None

    def index_of(self, block_id: str) -> int:
        """Position of a block.

        Raises:
            NotFoundError: If no block has ``block_id``.
        """
        for i, block in enumerate(self.blocks):
            if block.id == block_id:
                return i
        raise NotFoundError(
            f"Block {block_id} not found in document {self.id}",
            resource_type="block",
            resource_id=block_id,
        )

    def touched(self, **changes: Any) -> Document:
        """Copy with ``changes`` applied and ``updated_at`` refreshed."""
        return dataclasses.replace(self, updated_at=_now_iso(), **changes)


def _check_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("Document name is required", field="name")
    return name


def create_document(
    name: str,
    description: str | None = None,
    blocks: tuple[Block, ...] | list[Block] = (),
    *,
    document_id: str | None = None,
) -> Document:
    """Create a new in-memory document, optionally seeded with blocks.

    Raises:
        ValidationError: If the name is blank.
        DuplicateBlockIdentifier: If the seed blocks repeat an identifier.
    """
    seen: set[str] = set()
    for block in blocks:
        if block.id in seen:
            raise DuplicateBlockIdentifier(block.id, within_batch=True)
        seen.add(block.id)

    now = _now_iso()
    return Document(
        id=document_id or str(uuid4()),
        name=_check_name(name),
        description=description or None,
        created_at=now,
        updated_at=now,
        blocks=tuple(blocks),
    )


def add_block(document: Document, block: Block, index: int | None = None) -> Document:
    """Insert a block at ``index`` (appended when ``None``).

    Raises:
        DuplicateBlockIdentifier: If the document already has a block with that id.
    """
    if document.find_block(block.id) is not None:
        raise DuplicateBlockIdentifier(block.id)

    blocks = list(document.blocks)
    if index is None:
        blocks.append(block)
    else:
        blocks.insert(index, block)
    return document.touched(blocks=tuple(blocks))


def update_block(document: Document, block_id: str, **changes: Any) -> Document:
    """Replace fields of one block, keeping its identifier and position.

    Args:
        document: The document to update.
        block_id: Block to change.
        **changes: Field values, e.g. ``content="New text"``.

    Raises:
        NotFoundError: If no block has ``block_id``.
        ValidationError: If ``changes`` touches ``id`` or names an unknown field.
    """
    if "id" in changes:
        raise ValidationError("Block identifiers are immutable", field="id")

    index = document.index_of(block_id)
    block = document.blocks[index]

    valid = {f.name for f in dataclasses.fields(block)}
    for key in changes:
        if key not in valid:
            raise ValidationError(
                f"{type(block).__name__} has no field {key!r}",
                field=key,
            )

    blocks = list(document.blocks)
    blocks[index] = dataclasses.replace(block, **changes)
    return document.touched(blocks=tuple(blocks))


def remove_block(document: Document, block_id: str) -> Document:
    """Remove one block.

    Raises:
        NotFoundError: If no block has ``block_id``.
    """
    index = document.index_of(block_id)
    blocks = document.blocks[:index] + document.blocks[index + 1:]
    return document.touched(blocks=blocks)


def move_block(document: Document, block_id: str, new_index: int) -> Document:
    """Move a block to ``new_index`` (clamped to the valid range).

    Raises:
        NotFoundError: If no block has ``block_id``.
    """
    index = document.index_of(block_id)
    blocks = list(document.blocks)
    block = blocks.pop(index)
    new_index = max(0, min(new_index, len(blocks)))
    blocks.insert(new_index, block)
    return document.touched(blocks=tuple(blocks))


def update_metadata(
    document: Document,
    *,
    name: str | None = None,
    description: str | None = _UNSET,
) -> Document:
    """Change the title and/or description.

    Passing ``description=None`` (or ``""``) clears it; omitting it keeps it.
    """
    changes: dict[str, Any] = {}
    if name is not None:
        changes["name"] = _check_name(name)
    if description is not _UNSET:
        changes["description"] = description or None
    return document.touched(**changes)


def simplify_documents(documents: list[Document]) -> list[dict[str, Any]]:
    """Reduce documents to ``{id, name, description}`` for project selection."""
    simplified = []
    for document in documents:
        entry: dict[str, Any] = {"id": document.id, "name": document.name}
        if document.description:
            entry["description"] = document.description
        simplified.append(entry)
    return simplified
