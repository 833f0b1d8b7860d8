"""Extracting display text from a range of a document.

Atomic reference nodes have no text of their own. When a range is turned
into text they are replaced by a label obtained from a ``LabelResolver``,
e.g. a project chip becomes ``#AP Gov``.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from .constants import DocumentConstants
from .model import AtomicNode, TextRun
from .position import document_length
from .projects import get_directory
from .serialization import coerce_document

logger = logging.getLogger(__name__)


class LabelResolver(Protocol):
    def __call__(
        self,
        kind: str,
        reference_id: Optional[str],
        fallback_name: Optional[str] = None,
    ) -> str:
        ...


def _label_for(node: AtomicNode, resolver: LabelResolver) -> str:
    try:
        label = resolver(node.kind, node.reference_id, node.fallback_name)
    except Exception as e:
        logger.warning(f"Label resolver failed for {node.kind} {node.reference_id!r}: {e}")
        return DocumentConstants.PLACEHOLDER_LABEL
    if label is None:
        return DocumentConstants.PLACEHOLDER_LABEL
    return str(label)


def extract_text(doc, start: int, end: int, resolver: Optional[LabelResolver] = None) -> str:
    """Return the display text of the range [start, end).

    Text runs contribute the characters inside the range. Atomic nodes whose
    position lies inside the range contribute their resolved label. The
    text of distinct blocks is joined with a newline; an empty block inside
    the range contributes an empty line.

    A reversed range (start > end) is read as the swapped range, and both
    ends are clamped into the document.
    """
    doc = coerce_document(doc)
    if resolver is None:
        resolver = get_directory()

    if start > end:
        start, end = end, start
    total = document_length(doc)
    start = max(0, min(start, total))
    end = max(0, min(end, total))
    if start == end:
        return ""

    parts: list[str] = []
    first_block = True
    block_start = 0
    for block in doc.blocks:
        block_end = block_start + block.length
        if block_end > block_start:
            in_range = block_start < end and block_end > start
        else:
            in_range = start < block_start < end

        if in_range:
            if not first_block:
                parts.append(DocumentConstants.BLOCK_SEPARATOR)
            first_block = False

            node_start = block_start
            for node in block.content:
                node_end = node_start + node.length
                if isinstance(node, TextRun):
                    lo = max(start, node_start)
                    hi = min(end, node_end)
                    if hi > lo:
                        parts.append(node.text[lo - node_start:hi - node_start])
                elif isinstance(node, AtomicNode):
                    if start <= node_start < end:
                        parts.append(_label_for(node, resolver))
                node_start = node_end

        block_start = block_end

    return "".join(parts)


def plain_text(doc, resolver: Optional[LabelResolver] = None) -> str:
    """Return the display text of the whole document."""
    return extract_text(doc, 0, document_length(doc), resolver)
