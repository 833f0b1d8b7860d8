"""Splitting a document in two at a position."""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

from .model import AtomicNode, Block, Document, Inline, TextRun
from .merge import normalize_document
from .position import resolve_position
from .serialization import coerce_document


class SplitResult(NamedTuple):
    left: Document
    right: Document


def split_block(block: Block, offset: int) -> tuple[Block, Block]:
    """Split a block at a character offset within its inline content.

    Text runs cut in the middle keep their marks on both halves; empty
    halves are dropped. An atomic node is never divided: it goes left when
    at least one position of the offset remains, right otherwise.
    """
    left: list[Inline] = []
    right: list[Inline] = []
    remaining = offset

    for node in block.content:
        if remaining <= 0:
            right.append(node)
            continue

        if isinstance(node, TextRun):
            if len(node.text) <= remaining:
                left.append(node)
                remaining -= len(node.text)
            else:
                head = node.text[:remaining]
                tail = node.text[remaining:]
                if head:
                    left.append(node.with_text(head))
                if tail:
                    right.append(node.with_text(tail))
                remaining = 0
        elif isinstance(node, AtomicNode):
            left.append(node)
            remaining -= 1
        else:
            raise TypeError(f"Unknown inline node type: {type(node).__name__}")

    return (
        block.with_content(left),
        block.with_content(right),
    )


def split_document(doc, position: Any, ordered_marks: Optional[bool] = None) -> SplitResult:
    """Split a document into two documents at ``position``.

    Args:
        doc: Document to split, its JSON form, or None.
        position: Absolute offset, BlockOffset, ``(block_index, offset)``
            tuple or ``{"blockIndex": .., "offset": ..}`` mapping.
        ordered_marks: Mark comparison mode used when normalizing.

    Returns:
        SplitResult(left, right). The block that contains the position is
        split in two, so both halves share its kind and attributes. Never
        raises; out-of-range positions are clamped.
    """
    doc = coerce_document(doc)
    blocks = doc.blocks
    if not blocks:
        return SplitResult(Document.empty(), Document.empty())

    target = resolve_position(doc, position)
    block_index = max(0, min(target.block_index, len(blocks) - 1))
    offset = max(0, target.offset)

    left_block, right_block = split_block(blocks[block_index], offset)

    left = Document(blocks[:block_index] + (left_block,))
    right = Document((right_block,) + blocks[block_index + 1:])

    return SplitResult(
        normalize_document(left, ordered_marks),
        normalize_document(right, ordered_marks),
    )
