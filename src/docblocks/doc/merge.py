"""Merge candidate blocks into a document.

Two modes:

- ``REPLACE``: the candidates become the document's blocks. Used after the
  user edits the serialized text and it is parsed again.
- ``APPEND``: the candidates are added after the existing blocks. Used for
  content that comes from outside the editor (e.g. the content generator),
  so every candidate identifier must be new to the document and unique
  within the batch.

Only append mode validates, and only identifiers. Unknown block types are carried through
untouched; rendering decides what to do with them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from ..errors import DuplicateBlockIdentifier
from .blocks_models import Block
from .document import Document

logger = logging.getLogger(__name__)


class MergeMode(str, Enum):
    REPLACE = "replace"
    APPEND = "append"


def check_new_identifiers(existing: Iterable[Block], candidates: Iterable[Block]) -> None:
    """Fail on the first candidate whose identifier is already taken.

    Raises:
        DuplicateBlockIdentifier: If a candidate id is in ``existing`` or
            repeats an earlier candidate.
    """
    taken = {block.id for block in existing}
    seen: set[str] = set()
    for block in candidates:
        if block.id in taken:
            raise DuplicateBlockIdentifier(block.id)
        if block.id in seen:
            raise DuplicateBlockIdentifier(block.id, within_batch=True)
        seen.add(block.id)


def merge_blocks(
    document: Document,
    candidates: Iterable[Block],
    mode: MergeMode | str = MergeMode.APPEND,
) -> Document:
    """Combine ``candidates`` with ``document`` according to ``mode``.

    The input document is never modified; on failure nothing is applied.

    Args:
        document: The current document.
        candidates: New blocks, in the order they should appear.
        mode: ``MergeMode.APPEND`` (default) or ``MergeMode.REPLACE``.

    Returns:
        A new document with the merged blocks and a refreshed ``updated_at``.

    Raises:
        DuplicateBlockIdentifier: In append mode, on any identifier collision.
    """
    mode = MergeMode(mode)
    batch = tuple(candidates)

    if mode == MergeMode.REPLACE:
        logger.debug("Replacing %d blocks of %s with %d", len(document.blocks), document.id, len(batch))
        return document.touched(blocks=batch)

    try:
        check_new_identifiers(document.blocks, batch)
    except DuplicateBlockIdentifier as e:
        logger.info("Rejected %d candidate blocks for %s: %s", len(batch), document.id, e.message)
        raise

    logger.debug("Appending %d blocks to %s", len(batch), document.id)
    return document.touched(blocks=document.blocks + batch)
