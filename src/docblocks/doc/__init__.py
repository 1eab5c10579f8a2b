"""Block-based document core.

Pure, synchronous building blocks shared by the CLI and the storage and
content-generation collaborators.

Key components:
- blocks_models: Block variants, BlockType, create_empty_block
- document: Document and its block operations
- text_parser: plain-text dialect -> Blocks
- text_serializer: Blocks -> plain-text dialect
- merge: replace/append merges with identifier checks
- html_renderer: Blocks -> HTML preview
- blocks_wire: document JSON and storage row shapes
"""

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
    create_empty_block,
    new_block_id,
)
from .blocks_wire import block_from_dict, block_to_dict, document_from_dict, document_to_dict
from .document import (
    Document,
    add_block,
    create_document,
    move_block,
    remove_block,
    simplify_documents,
    update_block,
    update_metadata,
)
from .html_renderer import render_block_html, render_blocks_html, render_document_html
from .merge import MergeMode, merge_blocks
from .text_parser import parse_text
from .text_serializer import serialize_blocks

__all__ = [
    "Block",
    "BlockType",
    "BulletedListBlock",
    "CodeBlock",
    "Document",
    "HeadingBlock",
    "ImageAlignment",
    "ImageBlock",
    "MergeMode",
    "NumberedListBlock",
    "ParagraphBlock",
    "QuoteBlock",
    "SubheadingBlock",
    "TextFormatting",
    "UnknownBlock",
    "add_block",
    "block_from_dict",
    "block_to_dict",
    "create_document",
    "create_empty_block",
    "document_from_dict",
    "document_to_dict",
    "merge_blocks",
    "move_block",
    "new_block_id",
    "parse_text",
    "remove_block",
    "render_block_html",
    "render_blocks_html",
    "render_document_html",
    "serialize_blocks",
    "simplify_documents",
    "update_block",
    "update_metadata",
]
