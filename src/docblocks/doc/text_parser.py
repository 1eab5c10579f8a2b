"""Parse the plain-text editing dialect into blocks.

The dialect is a small, line-oriented subset of Markdown:

    # Heading
    ## Subheading
    > Quote
    • Bullet item
    1. Numbered item
    ```language
    code
    ```

Anything else is paragraph text; consecutive paragraph lines are folded into
one paragraph joined by single spaces, and a blank line ends the current
block.

The scanner is a single greedy pass with one block open at a time. Its state
is one of three explicit variants (``Idle``, ``Open``, ``Fenced``) and all
transitions live in ``step`` so they can be exercised without line
iteration. Parsing never fails: malformed input only degrades the structure
(an unterminated fence, for instance, becomes a code block running to the
end of the text).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from .blocks_models import (
    Block,
    BulletedListBlock,
    CodeBlock,
    HeadingBlock,
    NumberedListBlock,
    ParagraphBlock,
    QuoteBlock,
    SubheadingBlock,
    TextFormatting,
    new_block_id,
)

logger = logging.getLogger(__name__)

FENCE = "```"
HEADING_PREFIX = "# "
SUBHEADING_PREFIX = "## "
QUOTE_PREFIX = "> "
BULLET_PREFIX = "• "

_NUMBERED_ITEM = re.compile(r"^\d+\.\s")

IdFactory = Callable[[], str]


# =============================================================================
# Scanner State
# =============================================================================


@dataclass(frozen=True)
class Idle:
    """No block is open."""


@dataclass(frozen=True)
class Open:
    """A heading, paragraph, quote or list block is accumulating.

    ``block`` carries the identifier and fixed fields. Paragraph lines and
    list items collect in ``parts`` and are folded into the block on close.
    """

    block: Block
    parts: list[str] = field(default_factory=list)

    def close(self) -> Block:
        if not self.parts:
            return self.block
        if isinstance(self.block, ParagraphBlock):
            return replace(self.block, content=" ".join(self.parts))
        if isinstance(self.block, (BulletedListBlock, NumberedListBlock)):
            return replace(self.block, items=tuple(self.parts))
        return self.block


@dataclass(frozen=True)
class Fenced:
    """Inside a code fence; lines are collected verbatim."""

    block_id: str
    language: str | None = None
    lines: list[str] = field(default_factory=list)

    def close(self) -> CodeBlock:
        return CodeBlock(
            id=self.block_id,
            content="".join(f"{line}\n" for line in self.lines),
            language=self.language,
            show_line_numbers=True,
            copy_button=True,
        )


State = Idle | Open | Fenced

IDLE = Idle()


# =============================================================================
# Transitions
# =============================================================================


def flush(state: State) -> list[Block]:
    """Blocks to emit when ``state`` is closed (end of block or input)."""
    if isinstance(state, Open):
        return [state.close()]
    if isinstance(state, Fenced):
        return [state.close()]
    return []


def step(state: State, line: str, new_id: IdFactory = new_block_id) -> tuple[State, list[Block]]:
    """Consume one line.

    Continuation lines append to the accumulator of ``state`` in place, so
    a state value belongs to a single scan.

    Args:
        state: Current scanner state.
        line: The raw line, without its newline.
        new_id: Identifier source for blocks opened by this line.

    Returns:
        The next state and the blocks completed by this line, in order.
    """
    trimmed = line.strip()

    if isinstance(state, Fenced):
        if trimmed.startswith(FENCE):
            return IDLE, [state.close()]
        state.lines.append(line)
        return state, []

    if trimmed.startswith(FENCE):
        language = trimmed[len(FENCE):].strip() or None
        return Fenced(block_id=new_id(), language=language), flush(state)

    if not trimmed:
        return IDLE, flush(state)

    if trimmed.startswith(HEADING_PREFIX):
        heading = HeadingBlock(id=new_id(), content=trimmed[len(HEADING_PREFIX):], level=1)
        return Open(heading), flush(state)

    if trimmed.startswith(SUBHEADING_PREFIX):
        subheading = SubheadingBlock(
            id=new_id(), content=trimmed[len(SUBHEADING_PREFIX):], level=2
        )
        return Open(subheading), flush(state)

    if trimmed.startswith(QUOTE_PREFIX):
        quote = QuoteBlock(
            id=new_id(),
            content=trimmed[len(QUOTE_PREFIX):],
            formatting=TextFormatting(italic=True),
        )
        return Open(quote), flush(state)

    current = state.block if isinstance(state, Open) else None

    if trimmed.startswith(BULLET_PREFIX):
        item = trimmed[len(BULLET_PREFIX):]
        if isinstance(current, BulletedListBlock):
            state.parts.append(item)
            return state, []
        return Open(BulletedListBlock(id=new_id()), [item]), flush(state)

    if _NUMBERED_ITEM.match(trimmed):
        item = _NUMBERED_ITEM.sub("", trimmed, count=1)
        if isinstance(current, NumberedListBlock):
            state.parts.append(item)
            return state, []
        return Open(NumberedListBlock(id=new_id()), [item]), flush(state)

    if isinstance(current, ParagraphBlock):
        state.parts.append(trimmed)
        return state, []
    return Open(ParagraphBlock(id=new_id(), content=""), [trimmed]), flush(state)


# =============================================================================
# Entry Point
# =============================================================================


def parse_text(text: str, *, new_id: IdFactory = new_block_id) -> list[Block]:
    """Parse an editor text buffer into a list of new blocks.

    Args:
        text: The full text buffer. ``\\r\\n`` line endings are accepted.
        new_id: Identifier source; defaults to fresh UUID4 strings.

    Returns:
        Blocks in document order, each with a fresh identifier.
    """
    blocks: list[Block] = []
    state: State = IDLE

    for line in text.replace("\r\n", "\n").split("\n"):
        state, emitted = step(state, line, new_id)
        blocks.extend(emitted)
    blocks.extend(flush(state))

    if isinstance(state, Fenced):
        logger.debug("Unterminated code fence; closed at end of input")
    logger.debug("Parsed %d blocks from %d characters", len(blocks), len(text))
    return blocks
