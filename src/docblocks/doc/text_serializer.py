"""Serialize blocks back into the plain-text editing dialect.

This is the inverse of ``text_parser``: for every block shape the parser can
produce, ``parse_text(serialize_blocks(blocks))`` gives the same types,
contents and list items back. Images have no text form and are left out,
as are unknown blocks.
"""

from __future__ import annotations

from collections.abc import Iterable

from .blocks_models import (
    Block,
    BulletedListBlock,
    CodeBlock,
    HeadingBlock,
    NumberedListBlock,
    ParagraphBlock,
    QuoteBlock,
    SubheadingBlock,
)
from .text_parser import BULLET_PREFIX, FENCE, HEADING_PREFIX, QUOTE_PREFIX, SUBHEADING_PREFIX


def serialize_blocks(blocks: Iterable[Block]) -> str:
    """Render blocks as an editable text buffer.

    Args:
        blocks: Blocks in document order.

    Returns:
        The text buffer.
    """
    return "".join(serialize_block(block) for block in blocks)


def serialize_block(block: Block) -> str:
    """Render a single block; blocks with no text form render as ``""``."""
    if isinstance(block, HeadingBlock):
        return f"{HEADING_PREFIX}{block.content}\n"
    if isinstance(block, SubheadingBlock):
        return f"{SUBHEADING_PREFIX}{block.content}\n"
    if isinstance(block, ParagraphBlock):
        return f"{block.content}\n\n"
    if isinstance(block, BulletedListBlock):
        return _serialize_items(f"{BULLET_PREFIX}{item}" for item in block.items)
    if isinstance(block, NumberedListBlock):
        return _serialize_items(f"{n}. {item}" for n, item in enumerate(block.items, start=1))
    if isinstance(block, QuoteBlock):
        return f"{QUOTE_PREFIX}{block.content}\n\n"
    if isinstance(block, CodeBlock):
        return _serialize_code(block)
    # Images and unknown blocks are edited outside the text buffer
    return ""


def _serialize_items(lines: Iterable[str]) -> str:
    return "".join(f"{line}\n" for line in lines) + "\n"


def _serialize_code(block: CodeBlock) -> str:
    content = block.content
    if content and not content.endswith("\n"):
        content += "\n"
    return f"{FENCE}{block.language or ''}\n{content}{FENCE}\n\n"
