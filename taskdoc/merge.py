"""Merging documents and normalizing inline content.

Merging two documents joins the last block of the first with the first block
of the second when the two blocks have the same kind and attributes, and
concatenates the block lists otherwise. Adjacent text runs carrying equal
marks are always collapsed into one run.

Nodes are immutable, so unchanged nodes are shared between the inputs and
the result instead of being copied.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Optional

from .constants import DocumentConstants
from .model import Block, Document, Inline, Mark, TextRun
from .serialization import coerce_document


def _ordered(ordered_marks: Optional[bool]) -> bool:
    return DocumentConstants.ORDERED_MARKS if ordered_marks is None else ordered_marks


def marks_equal(a: Optional[Sequence[Mark]], b: Optional[Sequence[Mark]], ordered: bool = False) -> bool:
    """Compare two mark lists.

    With ``ordered=False`` the lists are compared as multisets, so
    ``[bold, underline]`` equals ``[underline, bold]``. With ``ordered=True``
    marks are compared index by index.
    """
    a = tuple(a or ())
    b = tuple(b or ())
    if len(a) != len(b):
        return False
    if ordered:
        return a == b
    return Counter(a) == Counter(b)


def _mergeable(prev: Optional[Inline], node: Inline, ordered: bool) -> bool:
    return (
        isinstance(prev, TextRun)
        and isinstance(node, TextRun)
        and marks_equal(prev.marks, node.marks, ordered)
    )


def merge_inline(
    left: Iterable[Inline],
    right: Iterable[Inline],
    ordered_marks: Optional[bool] = None,
) -> tuple[Inline, ...]:
    """Append ``right`` to ``left``, joining text runs at the seam.

    A text run is joined into the preceding one when both carry equal marks.
    Atomic nodes are always appended as separate nodes.
    """
    ordered = _ordered(ordered_marks)
    result: list[Inline] = list(left)
    for node in right:
        prev = result[-1] if result else None
        if _mergeable(prev, node, ordered):
            result[-1] = prev.with_text(prev.text + node.text)
        else:
            result.append(node)
    return tuple(result)


def normalize_inline(content: Iterable[Inline], ordered_marks: Optional[bool] = None) -> tuple[Inline, ...]:
    """Collapse adjacent text runs with equal marks."""
    return merge_inline((), content, ordered_marks)


def normalize_block(block: Block, ordered_marks: Optional[bool] = None) -> Block:
    content = normalize_inline(block.content, ordered_marks)
    if content == block.content:
        return block
    return block.with_content(content)


def normalize_document(doc, ordered_marks: Optional[bool] = None) -> Document:
    """Return the document with every block's inline content normalized."""
    doc = coerce_document(doc)
    return Document(tuple(normalize_block(b, ordered_marks) for b in doc.blocks))


def merge_documents(a, b, ordered_marks: Optional[bool] = None) -> Document:
    """Merge two documents into one.

    Args:
        a: First document, its JSON form, or None.
        b: Second document, its JSON form, or None.
        ordered_marks: Compare marks index by index when joining text runs.

    Returns:
        A new normalized document. Never raises; malformed or missing
        inputs count as empty documents.
    """
    doc_a = coerce_document(a)
    doc_b = coerce_document(b)

    if not doc_a.blocks:
        return normalize_document(doc_b, ordered_marks)
    if not doc_b.blocks:
        return normalize_document(doc_a, ordered_marks)

    last_a = doc_a.blocks[-1]
    first_b = doc_b.blocks[0]

    if last_a.compatible_with(first_b):
        merged = last_a.with_content(
            merge_inline(last_a.content, first_b.content, ordered_marks),
        )
        blocks = doc_a.blocks[:-1] + (merged,) + doc_b.blocks[1:]
    else:
        blocks = doc_a.blocks + doc_b.blocks

    return normalize_document(Document(blocks), ordered_marks)
