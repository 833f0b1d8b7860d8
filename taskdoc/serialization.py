"""Conversion between the node model and the host editor's JSON shape.

The host editor represents documents as plain JSON::

    {"type": "doc", "content": [
        {"type": "paragraph", "content": [
            {"type": "text", "text": "Call ", "marks": [{"type": "bold"}]},
            {"type": "projectChip", "attrs": {"projectId": "42"}}
        ]}
    ]}

Serialization follows the host's conventions so documents round-trip
unchanged: empty ``attrs``, empty ``marks`` and empty block ``content`` are
omitted unless the parsed input carried them explicitly, while the root
always carries ``content``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from .constants import DocumentConstants
from .errors import MalformedDocumentError
from .model import AtomicNode, Block, Document, Inline, Mark, TextRun

logger = logging.getLogger(__name__)


def _empty_keys(node: Mapping, *keys: str) -> frozenset:
    """Keys present in ``node`` with an empty object or array as value."""
    return frozenset(
        key for key in keys
        if isinstance(node.get(key), (Mapping, list)) and not node[key]
    )


class _Reader:
    """Walks a JSON tree, either raising or skipping on malformed nodes."""

    def __init__(self, strict: bool):
        self.strict = strict

    def fail(self, message: str, path: str) -> None:
        if self.strict:
            raise MalformedDocumentError(message, path)
        logger.warning(f"Skipping malformed node at {path}: {message}")

    def attrs(self, node: Mapping, path: str) -> Optional[dict[str, Any]]:
        raw = node.get("attrs")
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            self.fail("'attrs' must be an object", f"{path}.attrs")
            return None
        return dict(raw)

    def mark(self, node: Any, path: str) -> Optional[Mark]:
        if not isinstance(node, Mapping) or not isinstance(node.get("type"), str):
            self.fail("mark must be an object with a string 'type'", path)
            return None
        attrs = self.attrs(node, path)
        if attrs is None:
            return None
        return Mark(node["type"], attrs, _empty_keys(node, "attrs"))

    def inline(self, node: Any, path: str) -> Optional[Inline]:
        if not isinstance(node, Mapping) or not isinstance(node.get("type"), str):
            self.fail("inline node must be an object with a string 'type'", path)
            return None

        if node["type"] == DocumentConstants.TEXT_TYPE:
            text = node.get("text")
            if not isinstance(text, str):
                self.fail("text node must have a string 'text'", f"{path}.text")
                return None
            raw_marks = node.get("marks") or []
            if not isinstance(raw_marks, list):
                self.fail("'marks' must be an array", f"{path}.marks")
                return None
            marks = []
            for i, raw in enumerate(raw_marks):
                mark = self.mark(raw, f"{path}.marks[{i}]")
                if mark is not None:
                    marks.append(mark)
            return TextRun(text, tuple(marks), _empty_keys(node, "marks"))

        attrs = self.attrs(node, path)
        if attrs is None:
            return None
        return AtomicNode(node["type"], attrs, _empty_keys(node, "attrs"))

    def block(self, node: Any, path: str) -> Optional[Block]:
        if not isinstance(node, Mapping) or not isinstance(node.get("type"), str):
            self.fail("block must be an object with a string 'type'", path)
            return None
        attrs = self.attrs(node, path)
        if attrs is None:
            return None
        raw_content = node.get("content")
        if raw_content is None:
            raw_content = []
        if not isinstance(raw_content, list):
            self.fail("'content' must be an array", f"{path}.content")
            return None
        content = []
        for i, raw in enumerate(raw_content):
            inline = self.inline(raw, f"{path}.content[{i}]")
            if inline is not None:
                content.append(inline)
        return Block(node["type"], attrs, tuple(content), _empty_keys(node, "attrs", "content"))

    def document(self, data: Any) -> Document:
        if not isinstance(data, Mapping):
            self.fail("document must be an object", "$")
            return Document.empty()
        if data.get("type") != DocumentConstants.DOC_TYPE:
            self.fail(f"root 'type' must be '{DocumentConstants.DOC_TYPE}'", "$.type")
            return Document.empty()
        raw_blocks = data.get("content")
        if not isinstance(raw_blocks, list):
            self.fail("root 'content' must be an array", "$.content")
            return Document.empty()
        blocks = []
        for i, raw in enumerate(raw_blocks):
            block = self.block(raw, f"$.content[{i}]")
            if block is not None:
                blocks.append(block)
        return Document(tuple(blocks))


def document_from_json(data: Any, strict: bool = False) -> Document:
    """Build a Document from its JSON representation.

    Args:
        data: Parsed JSON (dicts and lists), e.g. the host editor's getJSON().
        strict: Raise MalformedDocumentError instead of normalizing.

    Returns:
        The parsed document. In lenient mode a malformed root yields an empty
        document and malformed children are dropped.
    """
    return _Reader(strict).document(data)


def validate_document(data: Any) -> None:
    """Raise MalformedDocumentError if data is not a well-formed document."""
    _Reader(strict=True).document(data)


def coerce_document(value: Any) -> Document:
    """Normalize anything a caller may pass as a document into a Document."""
    if value is None:
        return Document.empty()
    if isinstance(value, Document):
        return value
    if isinstance(value, Mapping):
        return document_from_json(value)
    logger.warning(f"Cannot interpret {type(value).__name__} as a document, using empty document")
    return Document.empty()


def mark_to_json(mark: Mark) -> dict[str, Any]:
    out: dict[str, Any] = {"type": mark.type}
    if mark.attrs or "attrs" in mark.empty_keys:
        out["attrs"] = mark.attrs.thaw()
    return out


def inline_to_json(node: Inline) -> dict[str, Any]:
    if isinstance(node, TextRun):
        out: dict[str, Any] = {"type": DocumentConstants.TEXT_TYPE, "text": node.text}
        if node.marks or "marks" in node.empty_keys:
            out["marks"] = [mark_to_json(m) for m in node.marks]
        return out
    if isinstance(node, AtomicNode):
        out = {"type": node.kind}
        if node.attrs or "attrs" in node.empty_keys:
            out["attrs"] = node.attrs.thaw()
        return out
    raise TypeError(f"Unknown inline node type: {type(node).__name__}")


def block_to_json(block: Block) -> dict[str, Any]:
    out: dict[str, Any] = {"type": block.kind}
    if block.attrs or "attrs" in block.empty_keys:
        out["attrs"] = block.attrs.thaw()
    if block.content or "content" in block.empty_keys:
        out["content"] = [inline_to_json(n) for n in block.content]
    return out


def block_from_json(data: Any, strict: bool = False) -> Optional[Block]:
    """Parse a single block; returns None for malformed input when lenient."""
    return _Reader(strict).block(data, "$")


def document_to_json(doc: Document) -> dict[str, Any]:
    return {
        "type": DocumentConstants.DOC_TYPE,
        "content": [block_to_json(b) for b in doc.blocks],
    }
