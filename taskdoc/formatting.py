"""Applying and querying formatting marks over ranges."""

from __future__ import annotations

from typing import Callable, Optional

from .model import Block, Document, Inline, Mark, TextRun
from .merge import normalize_document
from .position import absolute_to_block_offset, document_length
from .serialization import coerce_document

MarksTransform = Callable[[tuple[Mark, ...]], tuple[Mark, ...]]


def _ordered_range(doc: Document, start: int, end: int) -> tuple[int, int]:
    if start > end:
        start, end = end, start
    total = document_length(doc)
    return max(0, min(start, total)), max(0, min(end, total))


def _map_text_in_range(doc: Document, start: int, end: int, transform: MarksTransform) -> Document:
    """Rewrite the marks of every text character inside [start, end).

    Runs crossing a range boundary are cut there first; atomic nodes are
    left untouched.
    """
    blocks: list[Block] = []
    block_start = 0
    for block in doc.blocks:
        content: list[Inline] = []
        node_start = block_start
        for node in block.content:
            node_end = node_start + node.length
            if isinstance(node, TextRun) and node_start < end and node_end > start:
                lo = max(start, node_start) - node_start
                hi = min(end, node_end) - node_start
                if lo > 0:
                    content.append(node.with_text(node.text[:lo]))
                content.append(TextRun(node.text[lo:hi], transform(node.marks)))
                if hi < len(node.text):
                    content.append(node.with_text(node.text[hi:]))
            else:
                content.append(node)
            node_start = node_end
        blocks.append(block.with_content(content))
        block_start = node_start
    return normalize_document(Document(tuple(blocks)))


def add_mark(doc, start: int, end: int, mark: Mark) -> Document:
    """Apply ``mark`` to the text in [start, end).

    A run that already has a mark of the same type gets it replaced, so a
    run carries at most one link.
    """
    doc = coerce_document(doc)
    start, end = _ordered_range(doc, start, end)

    def transform(marks):
        return tuple(m for m in marks if m.type != mark.type) + (mark,)

    return _map_text_in_range(doc, start, end, transform)


def remove_mark(doc, start: int, end: int, mark_type: str) -> Document:
    doc = coerce_document(doc)
    start, end = _ordered_range(doc, start, end)
    return _map_text_in_range(
        doc, start, end,
        lambda marks: tuple(m for m in marks if m.type != mark_type),
    )


def text_runs_in_range(doc, start: int, end: int) -> list[TextRun]:
    """Return the pieces of text runs that fall inside [start, end)."""
    doc = coerce_document(doc)
    start, end = _ordered_range(doc, start, end)
    runs = []
    node_start = 0
    for block in doc.blocks:
        for node in block.content:
            node_end = node_start + node.length
            if isinstance(node, TextRun) and node_start < end and node_end > start:
                lo = max(start, node_start) - node_start
                hi = min(end, node_end) - node_start
                runs.append(node.with_text(node.text[lo:hi]))
            node_start = node_end
    return runs


def marks_at(doc, position: int) -> tuple[Mark, ...]:
    """Return the marks a character typed at ``position`` would take.

    Marks are inherited from the character to the left within the same
    block, falling back to the character to the right.
    """
    doc = coerce_document(doc)
    if not doc.blocks:
        return ()
    target = absolute_to_block_offset(doc, position)
    block = doc.blocks[target.block_index]

    def node_at(index: int) -> Optional[Inline]:
        accum = 0
        for node in block.content:
            if accum <= index < accum + node.length:
                return node
            accum += node.length
        return None

    node = node_at(target.offset - 1) if target.offset > 0 else None
    if node is None:
        node = node_at(target.offset)
    if isinstance(node, TextRun):
        return node.marks
    return ()


def is_mark_active(doc, start: int, end: int, mark_type: str) -> bool:
    """Return True if all text in [start, end) carries a mark of this type.

    For an empty range the marks at the caret position are checked.
    """
    doc = coerce_document(doc)
    if start == end:
        return any(m.type == mark_type for m in marks_at(doc, start))
    runs = [r for r in text_runs_in_range(doc, start, end) if r.text]
    return bool(runs) and all(r.has_mark(mark_type) for r in runs)


def toggle_mark(doc, start: int, end: int, mark: Mark) -> Document:
    """Remove ``mark`` from the range if it is active throughout, else add it."""
    doc = coerce_document(doc)
    if is_mark_active(doc, start, end, mark.type):
        return remove_mark(doc, start, end, mark.type)
    return add_mark(doc, start, end, mark)
