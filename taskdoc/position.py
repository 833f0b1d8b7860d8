"""Position conversion between absolute offsets and block-relative offsets.

Absolute positions index the document's flattened character stream: every
character of a text run counts 1, every atomic node counts 1, and block
boundaries cost nothing. Block-relative positions are ``BlockOffset``
pairs. Both are 0-based.

The host editor counts positions from 1. ``to_editor_position`` and
``from_editor_position`` are the only places that convention is applied.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Mapping
from typing import Any, Union

from .constants import DocumentConstants
from .model import Block, BlockOffset, Document, Inline
from .serialization import coerce_document

logger = logging.getLogger(__name__)

Position = Union[int, BlockOffset]


def inline_length(node: Inline) -> int:
    """Text runs count their characters; atomic nodes count 1."""
    return node.length


def block_length(block: Block) -> int:
    return sum(inline_length(n) for n in block.content)


def document_length(doc) -> int:
    doc = coerce_document(doc)
    return sum(block_length(b) for b in doc.blocks)


def block_spans(doc) -> list[tuple[int, int]]:
    """Return the (start, end) absolute span of every block."""
    doc = coerce_document(doc)
    spans = []
    start = 0
    for block in doc.blocks:
        end = start + block_length(block)
        spans.append((start, end))
        start = end
    return spans


def block_offset_to_absolute(doc, block_index: int, offset: int) -> int:
    """Convert a block index and in-block offset to an absolute position.

    The block index is clamped to the existing blocks and the offset to
    zero or more; an offset past the end of the block maps to the end of
    that block. A document without blocks maps everything to 0.
    """
    doc = coerce_document(doc)
    blocks = doc.blocks
    if not blocks:
        return document_length(doc)

    bi = max(0, min(block_index, len(blocks) - 1))
    ofs = max(0, offset)

    pos = sum(block_length(b) for b in blocks[:bi])

    accum = 0
    for node in blocks[bi].content:
        node_len = inline_length(node)
        if accum + node_len >= ofs:
            return pos + accum + max(0, min(node_len, ofs - accum))
        accum += node_len

    # Offset is past the end of the block
    return pos + accum


def absolute_to_block_offset(doc, absolute_pos: int) -> BlockOffset:
    """Convert an absolute position to a BlockOffset.

    A position on the boundary between two blocks belongs to the end of the
    earlier block. Positions are clamped into [0, total length].
    """
    doc = coerce_document(doc)
    blocks = doc.blocks
    if not blocks:
        return BlockOffset(0, 0)

    lengths = [block_length(b) for b in blocks]
    total = sum(lengths)
    pos = max(0, min(absolute_pos, total))

    if pos <= 0:
        return BlockOffset(0, 0)
    if pos >= total:
        return BlockOffset(len(blocks) - 1, lengths[-1])

    accumulated = 0
    for i, length in enumerate(lengths):
        if accumulated + length >= pos:
            return BlockOffset(i, pos - accumulated)
        accumulated += length

    return BlockOffset(len(blocks) - 1, lengths[-1])


def clamp_block_offset(doc, position: BlockOffset) -> BlockOffset:
    """Clamp a BlockOffset into the document without moving it across blocks."""
    doc = coerce_document(doc)
    if not doc.blocks:
        return BlockOffset(0, 0)
    bi = max(0, min(position.block_index, len(doc.blocks) - 1))
    ofs = max(0, min(position.offset, block_length(doc.blocks[bi])))
    return BlockOffset(bi, ofs)


def resolve_position(doc, position: Any) -> BlockOffset:
    """Turn any accepted position form into a BlockOffset.

    Accepts an absolute number (floats are truncated), a ``BlockOffset``, a
    ``(block_index, offset)`` tuple, or the host's ``{"blockIndex": ..,
    "offset": ..}`` mapping. The result is not clamped; the split engine
    clamps it. Values that cannot be read as positions fall back to the
    document start with a warning.
    """
    if isinstance(position, bool):
        logger.warning(f"Ignoring boolean position {position!r}")
        return BlockOffset(0, 0)
    if isinstance(position, BlockOffset):
        return position
    try:
        if isinstance(position, numbers.Real):
            return absolute_to_block_offset(doc, int(position))
        if isinstance(position, tuple) and len(position) == 2:
            return BlockOffset(int(position[0]), int(position[1]))
        if isinstance(position, Mapping):
            return BlockOffset(
                int(position.get("blockIndex", 0) or 0),
                int(position.get("offset", 0) or 0),
            )
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning(f"Unreadable position {position!r} ({e}), using document start")
        return BlockOffset(0, 0)
    logger.warning(f"Unrecognized position {position!r}, using document start")
    return BlockOffset(0, 0)


def absolute_position(doc, position: Any) -> int:
    """Turn any accepted position form into a clamped absolute position."""
    if isinstance(position, int) and not isinstance(position, bool):
        return max(0, min(position, document_length(doc)))
    target = resolve_position(doc, position)
    return block_offset_to_absolute(doc, target.block_index, target.offset)


def to_editor_position(pos: int) -> int:
    """Convert a 0-based core position to the host's 1-based position."""
    return max(0, pos) + DocumentConstants.EDITOR_POSITION_BASE


def from_editor_position(pos: int) -> int:
    """Convert a host 1-based position to a 0-based core position."""
    return max(0, pos - DocumentConstants.EDITOR_POSITION_BASE)
