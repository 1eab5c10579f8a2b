"""Conversions between blocks and their wire shapes.

Two shapes are supported:

- The document JSON shape, used for import/export and by the content
  generator: one flat camelCase object per block (``imageUrl``,
  ``codeLanguage``, ``showLineNumbers``...).
- The persisted row shape: ``type``, ``content``, ``level`` and ``position``
  columns plus a generic ``metadata`` map holding the per-type extras.

Both decoders are lenient. They never reject a block for its shape:
missing text becomes ``""``, unusable optional values are dropped and an
unrecognized ``type`` produces an ``UnknownBlock``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .blocks_models import (
    Block,
    BlockType,
    BulletedListBlock,
    CodeBlock,
    HeadingBlock,
    ImageAlignment,
    ImageBlock,
    NumberedListBlock,
    ParagraphBlock,
    QuoteBlock,
    SubheadingBlock,
    TextFormatting,
    UnknownBlock,
    new_block_id,
    type_name,
)
from .document import Document, _now_iso

logger = logging.getLogger(__name__)

# Row columns that are not part of the metadata bag
ROW_COLUMNS = frozenset({"id", "document_id", "type", "content", "level", "metadata", "position", "created_at"})

# Row columns that also exist in the document JSON shape
_SHARED_COLUMNS = frozenset({"id", "type", "content", "level"})


# =============================================================================
# Value Coercion
# =============================================================================


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _opt_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def _level(value: Any, default: int) -> int:
    """Integer level as given; range is enforced at render time, not here."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _formatting(value: Any) -> TextFormatting | None:
    if not isinstance(value, Mapping):
        return None
    return TextFormatting(
        bold=bool(value.get("bold", False)),
        italic=bool(value.get("italic", False)),
        underline=bool(value.get("underline", False)),
    )


def _items(data: Mapping[str, Any]) -> tuple[str, ...]:
    items = data.get("items")
    if isinstance(items, (list, tuple)):
        return tuple(_text(item) for item in items)
    content = data.get("content")
    if isinstance(content, str) and content:
        return tuple(line for line in content.split("\n") if line.strip())
    return ()


def _alignment(value: Any) -> ImageAlignment | None:
    try:
        return ImageAlignment(value)
    except ValueError:
        return None


def _block_id(value: Any, new_id: Callable[[], str]) -> str:
    if isinstance(value, str) and value:
        return value
    if value is not None and not isinstance(value, (bool, dict, list)):
        return str(value)
    return new_id()


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def _formatting_dict(formatting: TextFormatting) -> dict[str, bool]:
    return {
        "bold": formatting.bold,
        "italic": formatting.italic,
        "underline": formatting.underline,
    }


# =============================================================================
# Document JSON Shape
# =============================================================================


def block_from_dict(data: Mapping[str, Any], *, new_id: Callable[[], str] = new_block_id) -> Block:
    """Decode one block from the document JSON shape.

    A missing or empty ``id`` gets a fresh identifier. ``children`` is
    accepted and ignored.
    """
    block_id = _block_id(data.get("id"), new_id)
    raw_type = data.get("type")

    try:
        block_type = BlockType(raw_type)
    except ValueError:
        logger.debug("Keeping block %s with unknown type %r", block_id, raw_type)
        return UnknownBlock(
            id=block_id,
            raw_type=_text(raw_type),
            content=_opt_text(data.get("content")),
            raw=dict(data),
        )

    content = _text(data.get("content"))

    if block_type == BlockType.HEADING:
        return HeadingBlock(id=block_id, content=content, level=_level(data.get("level"), 1))
    if block_type == BlockType.SUBHEADING:
        return SubheadingBlock(id=block_id, content=content, level=_level(data.get("level"), 1))
    if block_type == BlockType.PARAGRAPH:
        return ParagraphBlock(id=block_id, content=content, formatting=_formatting(data.get("formatting")))
    if block_type == BlockType.QUOTE:
        return QuoteBlock(id=block_id, content=content, formatting=_formatting(data.get("formatting")))
    if block_type == BlockType.BULLETED_LIST:
        return BulletedListBlock(id=block_id, items=_items(data))
    if block_type == BlockType.NUMBERED_LIST:
        return NumberedListBlock(id=block_id, items=_items(data))
    if block_type == BlockType.CODE:
        return CodeBlock(
            id=block_id,
            content=content,
            language=_opt_text(data.get("codeLanguage", data.get("language"))),
            show_line_numbers=bool(data.get("showLineNumbers", False)),
            theme=_opt_text(data.get("theme")),
            collapsible=bool(data.get("collapsible", False)),
            copy_button=bool(data.get("copyButton", False)),
        )
    return ImageBlock(
        id=block_id,
        image_url=_text(data.get("imageUrl")),
        alt_text=_opt_text(data.get("altText")),
        width=_opt_text(data.get("width")),
        height=_opt_text(data.get("height")),
        alignment=_alignment(data.get("alignment")),
        caption=_opt_text(data.get("caption")),
    )


def _unknown_to_dict(block: UnknownBlock) -> dict[str, Any]:
    """Export an opaque block.

    A stored row's metadata bag is flattened into the object and its
    bookkeeping columns (document, position, timestamps) are left out.
    """
    result: dict[str, Any] = {}
    metadata = block.raw.get("metadata")
    if isinstance(metadata, Mapping):
        result.update(metadata)
    for key, value in block.raw.items():
        if key in ROW_COLUMNS and (key not in _SHARED_COLUMNS or value is None):
            continue
        result[key] = value
    result["id"] = block.id
    result["type"] = block.raw_type
    return result


def block_to_dict(block: Block) -> dict[str, Any]:
    """Encode one block into the document JSON shape."""
    if isinstance(block, UnknownBlock):
        return _unknown_to_dict(block)

    result: dict[str, Any] = {"id": block.id, "type": type_name(block)}

    if isinstance(block, (HeadingBlock, SubheadingBlock)):
        result["content"] = block.content
        result["level"] = block.level
    elif isinstance(block, (ParagraphBlock, QuoteBlock)):
        result["content"] = block.content
        if block.formatting is not None:
            result["formatting"] = _formatting_dict(block.formatting)
    elif isinstance(block, (BulletedListBlock, NumberedListBlock)):
        result["items"] = list(block.items)
    elif isinstance(block, CodeBlock):
        result.update(_compact({
            "content": block.content,
            "codeLanguage": block.language,
            "showLineNumbers": block.show_line_numbers,
            "theme": block.theme,
            "collapsible": block.collapsible,
            "copyButton": block.copy_button,
        }))
    elif isinstance(block, ImageBlock):
        result.update(_compact({
            "imageUrl": block.image_url,
            "altText": block.alt_text,
            "width": block.width,
            "height": block.height,
            "alignment": block.alignment.value if block.alignment else None,
            "caption": block.caption,
        }))
    return result


def blocks_from_list(items: Any, *, new_id: Callable[[], str] = new_block_id) -> list[Block]:
    """Decode a JSON array of blocks, skipping entries that are not objects."""
    if not isinstance(items, list):
        return []
    blocks = []
    for item in items:
        if isinstance(item, Mapping):
            blocks.append(block_from_dict(item, new_id=new_id))
        else:
            logger.debug("Skipping non-object block entry: %r", item)
    return blocks


def document_to_dict(document: Document) -> dict[str, Any]:
    """Encode a document into the JSON export shape."""
    return {
        "id": document.id,
        "name": document.name,
        "description": document.description,
        "createdAt": document.created_at,
        "updatedAt": document.updated_at,
        "blocks": [block_to_dict(block) for block in document.blocks],
    }


def document_from_dict(data: Mapping[str, Any]) -> Document:
    """Decode a document from the JSON export shape.

    Accepts camelCase or snake_case timestamp keys; missing timestamps are
    filled with the current time.
    """
    now = _now_iso()
    return Document(
        id=_text(data.get("id")) or new_block_id(),
        name=_text(data.get("name")),
        description=_opt_text(data.get("description")),
        created_at=_text(data.get("createdAt", data.get("created_at"))) or now,
        updated_at=_text(data.get("updatedAt", data.get("updated_at"))) or now,
        blocks=tuple(blocks_from_list(data.get("blocks", []))),
    )


# =============================================================================
# Persisted Row Shape
# =============================================================================


def block_to_row(block: Block, position: int) -> dict[str, Any]:
    """Encode a block as a storage row (without ``document_id``).

    ``metadata`` is returned as a dict; the store serializes it.
    """
    content: str | None
    level: int | None = None
    metadata: dict[str, Any] = {}

    if isinstance(block, UnknownBlock):
        raw_meta = block.raw.get("metadata")
        if isinstance(raw_meta, Mapping):
            metadata = dict(raw_meta)
        else:
            metadata = {k: v for k, v in block.raw.items() if k not in ROW_COLUMNS}
        raw_level = block.raw.get("level")
        level = raw_level if isinstance(raw_level, int) and not isinstance(raw_level, bool) else None
        content = block.content
    elif isinstance(block, (HeadingBlock, SubheadingBlock)):
        content = block.content
        level = block.level
    elif isinstance(block, (ParagraphBlock, QuoteBlock)):
        content = block.content
        if block.formatting is not None:
            metadata["formatting"] = _formatting_dict(block.formatting)
    elif isinstance(block, (BulletedListBlock, NumberedListBlock)):
        content = "\n".join(block.items)
        metadata["items"] = list(block.items)
    elif isinstance(block, CodeBlock):
        content = block.content
        metadata = _compact({
            "language": block.language,
            "showLineNumbers": block.show_line_numbers,
            "theme": block.theme,
            "collapsible": block.collapsible,
            "copyButton": block.copy_button,
        })
    else:
        content = None
        metadata = block_to_dict(block)
        del metadata["id"], metadata["type"]

    return {
        "id": block.id,
        "type": type_name(block),
        "content": content,
        "level": level,
        "metadata": metadata,
        "position": position,
    }


def decode_metadata(value: Any) -> dict[str, Any]:
    """Metadata column value (JSON text or mapping) as a dict."""
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (str, bytes)) and value:
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Ignoring undecodable block metadata: %.80r", value)
            return {}
        return decoded if isinstance(decoded, dict) else {}
    return {}


def block_from_row(row: Mapping[str, Any]) -> Block:
    """Decode a storage row, normalizing the metadata bag into typed fields."""
    metadata = decode_metadata(row["metadata"] if "metadata" in row.keys() else None)
    flat: dict[str, Any] = {
        **metadata,
        "id": row["id"],
        "type": row["type"],
        "content": row["content"],
    }
    if row["level"] is not None:
        flat["level"] = row["level"]

    block = block_from_dict(flat)
    if isinstance(block, UnknownBlock):
        raw = {key: row[key] for key in row.keys()}
        raw["metadata"] = metadata
        return UnknownBlock(id=block.id, raw_type=block.raw_type, content=block.content, raw=raw)
    return block
