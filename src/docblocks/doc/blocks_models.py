"""Data models for the block-based document system.

A document is an ordered list of blocks. Each block is one of a closed set
of frozen variants; anything that arrives from outside with a type we do not
know becomes an ``UnknownBlock`` so it can be carried along and skipped at
render time instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar
from uuid import uuid4


class BlockType(str, Enum):
    """Supported block types."""

    # Text blocks
    HEADING = "heading"
    SUBHEADING = "subheading"
    PARAGRAPH = "paragraph"
    QUOTE = "quote"

    # List blocks (flat, items are plain text)
    BULLETED_LIST = "bulleted_list"
    NUMBERED_LIST = "numbered_list"

    # Special blocks
    CODE = "code"
    IMAGE = "image"


class ImageAlignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


MIN_LEVEL = 1
MAX_LEVEL = 6


def new_block_id() -> str:
    """Generate a fresh block identifier.

    Plain UUID4 strings, the same identifier space the persistence layer
    assigns, so client-side blocks never collide with stored ones.
    """
    return str(uuid4())


def clamp_level(level: Any) -> int:
    """Level to use when rendering: 1-6, anything else falls back to 1."""
    if isinstance(level, bool) or not isinstance(level, int):
        return MIN_LEVEL
    if MIN_LEVEL <= level <= MAX_LEVEL:
        return level
    return MIN_LEVEL


@dataclass(frozen=True)
class TextFormatting:
    """Whole-block text attributes for paragraphs and quotes."""

    bold: bool = False
    italic: bool = False
    underline: bool = False

    def is_plain(self) -> bool:
        return not (self.bold or self.italic or self.underline)


@dataclass(frozen=True)
class HeadingBlock:
    id: str
    content: str
    level: int = 1

    type: ClassVar[BlockType] = BlockType.HEADING

    def render_level(self) -> int:
        return clamp_level(self.level)


@dataclass(frozen=True)
class SubheadingBlock:
    id: str
    content: str
    level: int = 1

    type: ClassVar[BlockType] = BlockType.SUBHEADING

    def render_level(self) -> int:
        return clamp_level(self.level)


@dataclass(frozen=True)
class ParagraphBlock:
    id: str
    content: str
    formatting: TextFormatting | None = None

    type: ClassVar[BlockType] = BlockType.PARAGRAPH


@dataclass(frozen=True)
class QuoteBlock:
    id: str
    content: str
    formatting: TextFormatting | None = None

    type: ClassVar[BlockType] = BlockType.QUOTE


@dataclass(frozen=True)
class BulletedListBlock:
    id: str
    items: tuple[str, ...] = ()

    type: ClassVar[BlockType] = BlockType.BULLETED_LIST


@dataclass(frozen=True)
class NumberedListBlock:
    """Ordered list. Numbering is positional; source numerals are not kept."""

    id: str
    items: tuple[str, ...] = ()

    type: ClassVar[BlockType] = BlockType.NUMBERED_LIST


@dataclass(frozen=True)
class CodeBlock:
    id: str
    content: str
    language: str | None = None
    show_line_numbers: bool = False
    theme: str | None = None
    collapsible: bool = False
    copy_button: bool = False

    type: ClassVar[BlockType] = BlockType.CODE


@dataclass(frozen=True)
class ImageBlock:
    """An image reference. Bytes live in the image store; only the URL is kept."""

    id: str
    image_url: str
    alt_text: str | None = None
    width: str | None = None
    height: str | None = None
    alignment: ImageAlignment | None = None
    caption: str | None = None

    type: ClassVar[BlockType] = BlockType.IMAGE


@dataclass(frozen=True)
class UnknownBlock:
    """A block whose type is not one of ``BlockType``.

    Kept opaque so it survives a load/save cycle; renderers skip it and the
    text serializer omits it.
    """

    id: str
    raw_type: str
    content: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    type: ClassVar[None] = None


Block = (
    HeadingBlock
    | SubheadingBlock
    | ParagraphBlock
    | QuoteBlock
    | BulletedListBlock
    | NumberedListBlock
    | CodeBlock
    | ImageBlock
    | UnknownBlock
)


def type_name(block: Block) -> str:
    """The wire ``type`` string of a block, including unknown ones."""
    if isinstance(block, UnknownBlock):
        return block.raw_type
    return block.type.value


def create_empty_block(block_type: BlockType | str, block_id: str | None = None) -> Block:
    """Create a new empty block of the given type with editor defaults.

    Raises:
        ValueError: If ``block_type`` is not a known block type.
    """
    block_type = BlockType(block_type)
    block_id = block_id or new_block_id()

    if block_type == BlockType.HEADING:
        return HeadingBlock(id=block_id, content="", level=1)
    if block_type == BlockType.SUBHEADING:
        return SubheadingBlock(id=block_id, content="", level=2)
    if block_type == BlockType.PARAGRAPH:
        return ParagraphBlock(id=block_id, content="")
    if block_type == BlockType.QUOTE:
        return QuoteBlock(id=block_id, content="")
    if block_type == BlockType.BULLETED_LIST:
        return BulletedListBlock(id=block_id, items=())
    if block_type == BlockType.NUMBERED_LIST:
        return NumberedListBlock(id=block_id, items=())
    if block_type == BlockType.CODE:
        return CodeBlock(
            id=block_id,
            content="",
            show_line_numbers=True,
            copy_button=True,
            theme="dark",
        )
    return ImageBlock(id=block_id, image_url="")
