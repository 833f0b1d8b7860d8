"""Host-facing document API.

``DocumentAPI`` holds one task's document and its selection and exposes the
operations the host editor calls: JSON access, block access, content
insertion and deletion, formatting, cursor information, and the merge and
split engines. Each method is gated by the matching ``EditorConfig`` switch.

Selections are 0-based absolute positions. ``editor_selection`` and
``set_editor_selection`` translate to and from the host's 1-based positions.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from .config import DEFAULT_CONFIG, ConfigPersistence, EditorConfig, get_persistence, merge_config
from .constants import DocumentConstants
from .errors import FeatureDisabledError
from .formatting import add_mark, is_mark_active, marks_at, remove_mark, toggle_mark
from .merge import merge_documents
from .model import AtomicNode, Block, BlockOffset, Document, Mark, TextRun
from .position import (
    absolute_position,
    absolute_to_block_offset,
    document_length,
    from_editor_position,
    to_editor_position,
)
from .projects import get_directory
from .selection import LabelResolver, extract_text, plain_text
from .serialization import block_from_json, block_to_json, coerce_document, document_from_json, document_to_json
from .split import SplitResult, split_document


@dataclass
class CharacterCount:
    characters: int
    words: int
    limit: Optional[int]
    percentage: int


@dataclass
class CursorInfo:
    start: int
    end: int
    empty: bool
    start_block: BlockOffset
    end_block: BlockOffset
    selected_text: str


class DocumentAPI:
    document: Document
    config: EditorConfig

    def __init__(
        self,
        document=None,
        config: Union[EditorConfig, Mapping, None] = None,
        resolver: Optional[LabelResolver] = None,
    ):
        self.document = coerce_document(document)
        if isinstance(config, EditorConfig):
            self.config = config
        else:
            self.config = merge_config(config) if config else DEFAULT_CONFIG
        self.resolver = resolver or get_directory()
        self.selection_start = 0
        self.selection_end = 0

    @classmethod
    def with_user_config(
        cls,
        document=None,
        resolver: Optional[LabelResolver] = None,
        persistence: Optional[ConfigPersistence] = None,
    ) -> "DocumentAPI":
        """Create an API configured from the user's stored overrides."""
        persistence = persistence or get_persistence()
        return cls(document, persistence.load_config(), resolver)

    @staticmethod
    def _require(enabled: bool, feature: str) -> None:
        if not enabled:
            raise FeatureDisabledError(feature)

    def _clamp_selection(self):
        total = document_length(self.document)
        self.selection_start = max(0, min(self.selection_start, total))
        self.selection_end = max(0, min(self.selection_end, total))

    def _ordered_selection(self) -> tuple[int, int]:
        start, end = self.selection_start, self.selection_end
        if start > end:
            start, end = end, start
        return start, end

    def _range(self, start, end) -> tuple[int, int]:
        if start is None and end is None:
            return self._ordered_selection()
        start = absolute_position(self.document, start if start is not None else end)
        end = absolute_position(self.document, end if end is not None else start)
        return (start, end) if start <= end else (end, start)

    # --- Metadata ---

    def get_plain_text(self) -> str:
        """Return the concatenated text of all text runs, without labels or separators."""
        return "".join(
            node.text
            for block in self.document.blocks
            for node in block.content
            if isinstance(node, TextRun)
        )

    def get_display_text(self) -> str:
        """Return the document as display text, with chip labels and newlines."""
        return plain_text(self.document, self.resolver)

    def is_empty(self) -> bool:
        """True for a document with no blocks or a single empty block."""
        blocks = self.document.blocks
        return not blocks or (len(blocks) == 1 and blocks[0].length == 0)

    def get_block_count(self) -> int:
        """Number of top-level blocks."""
        return self.document.block_count

    def get_character_count(self) -> CharacterCount:
        """Count characters (atomic nodes count 1) and words.

        Returns:
            CharacterCount with the configured limit (None when unlimited)
            and the percentage of the limit used.
        """
        characters = document_length(self.document)
        words = 0
        for block in self.document.blocks:
            text = "".join(n.text for n in block.content if isinstance(n, TextRun))
            words += len(text.split())
        limit = self.config.character_limit
        return CharacterCount(
            characters=characters,
            words=words,
            limit=limit if limit > 0 else None,
            percentage=round(characters / limit * 100) if limit > 0 else 0,
        )

    # --- JSON ---

    def get_json(self) -> dict[str, Any]:
        """Return the document in the host editor's JSON shape.

        Raises:
            FeatureDisabledError: If ``document.get_json`` is turned off.
        """
        self._require(self.config.document.get_json, "document.get_json")
        return document_to_json(self.document)

    def set_json(self, data: Any) -> None:
        """Replace the document from host JSON.

        Malformed input becomes an empty document (see
        ``document_from_json``). The selection is clamped into the new
        content.

        Args:
            data: Parsed JSON, e.g. the host editor's getJSON() output.
        """
        self._require(self.config.document.set_json, "document.set_json")
        self.document = document_from_json(data)
        self._clamp_selection()

    def clear(self) -> None:
        """Replace the content with a single empty paragraph."""
        self._require(self.config.document.clear, "document.clear")
        self.document = Document((Block(DocumentConstants.DEFAULT_BLOCK_KIND),))
        self.selection_start = self.selection_end = 0

    # --- Blocks ---

    def get_block(self, index: int) -> Optional[dict[str, Any]]:
        """Return block ``index`` as JSON, or None when out of range."""
        self._require(self.config.document.blocks, "document.blocks")
        if index < 0 or index >= self.document.block_count:
            return None
        return block_to_json(self.document.blocks[index])

    def replace_block(self, index: int, block: Union[Block, Mapping]) -> bool:
        """Replace one top-level block.

        Args:
            index: Index of the block to replace.
            block: A Block, or its JSON form.

        Returns:
            True if the block was replaced, False if the index is out of
            range or the JSON could not be parsed.
        """
        self._require(self.config.document.blocks, "document.blocks")
        if index < 0 or index >= self.document.block_count:
            return False
        if not isinstance(block, Block):
            block = block_from_json(block)
            if block is None:
                return False
        blocks = list(self.document.blocks)
        blocks[index] = block
        self.document = Document(tuple(blocks))
        self._clamp_selection()
        return True

    # --- Content ---

    def _insert_blocks(self, pos: int, make_content) -> None:
        """Insert one block per content tuple at ``pos`` and merge the seams."""
        left, right = split_document(self.document, pos)
        if left.blocks:
            kind, attrs = left.blocks[-1].kind, left.blocks[-1].attrs
        else:
            kind, attrs = DocumentConstants.DEFAULT_BLOCK_KIND, {}
        inserted = Document(tuple(
            Block(kind, attrs, content) for content in make_content
        ))
        self.document = merge_documents(merge_documents(left, inserted), right)

    def _insertion_point(self, position) -> int:
        if position is not None:
            return absolute_position(self.document, position)
        start, end = self._ordered_selection()
        if start != end:
            self._delete(start, end)
        return start

    def insert_text(self, text: str, position=None) -> bool:
        """Insert text at ``position``, or replace the selection.

        Each newline starts a new block of the same kind. The inserted text
        takes the marks in effect at the insertion point.
        """
        self._require(self.config.content.insert_text, "content.insert_text")
        pos = self._insertion_point(position)
        marks = marks_at(self.document, pos)
        pieces = text.split("\n")
        self._insert_blocks(pos, [(TextRun(p, marks),) if p else () for p in pieces])
        caret = pos + sum(len(p) for p in pieces)
        self.selection_start = self.selection_end = caret
        return True

    def insert_project_chip(self, project_id: str, position=None) -> bool:
        """Insert a project chip at ``position``, or in place of the selection.

        Args:
            project_id: Id of the referenced project; stored as a string.
            position: Any accepted position form; defaults to the selection.

        Returns:
            False if ``project_id`` is empty, True otherwise. The caret ends
            just after the chip.
        """
        self._require(self.config.project_chips, "project_chips")
        if not project_id:
            return False
        pos = self._insertion_point(position)
        chip = AtomicNode(DocumentConstants.PROJECT_CHIP_KIND, {"projectId": str(project_id)})
        self._insert_blocks(pos, [(chip,)])
        self.selection_start = self.selection_end = pos + 1
        return True

    def delete_range(self, start, end) -> bool:
        """Delete the content between two positions, joining blocks as needed.

        Args:
            start: Any accepted position form.
            end: Any accepted position form; the two ends may be reversed.

        Returns:
            True if anything was deleted, False for an empty range.
        """
        self._require(self.config.content.delete_range, "content.delete_range")
        start, end = self._range(start, end)
        if start == end:
            return False
        self._delete(start, end)
        return True

    def _delete(self, start: int, end: int) -> None:
        left = split_document(self.document, start).left
        right = split_document(self.document, end).right
        self.document = merge_documents(left, right)
        self.selection_start = self.selection_end = start

    def delete_selection(self) -> bool:
        """Delete the selected content; False when the selection is empty."""
        start, end = self._ordered_selection()
        return self.delete_range(start, end)

    # --- Formatting ---

    def _formatting_enabled(self, mark_type: str) -> bool:
        if mark_type == DocumentConstants.BOLD:
            return self.config.formatting.bold
        if mark_type == DocumentConstants.UNDERLINE:
            return self.config.formatting.underline
        if mark_type == DocumentConstants.LINK:
            return self.config.links
        return True

    def toggle_mark(self, mark_type: str, start=None, end=None, attrs: Optional[dict] = None) -> bool:
        """Toggle a mark over a range, or over the selection.

        The mark is removed if every text run in the range already carries
        it, and added everywhere otherwise.

        Args:
            mark_type: Mark name, e.g. ``"bold"``.
            start: Range start; defaults to the selection.
            end: Range end; defaults to the selection.
            attrs: Attributes for the added mark.

        Returns:
            False for an empty range, True otherwise.

        Raises:
            FeatureDisabledError: If formatting with this mark is turned off.
        """
        self._require(self._formatting_enabled(mark_type), f"formatting.{mark_type}")
        start, end = self._range(start, end)
        if start == end:
            return False
        self.document = toggle_mark(self.document, start, end, Mark(mark_type, attrs or {}))
        return True

    def is_mark_active(self, mark_type: str, start=None, end=None) -> bool:
        """True if the mark covers the range, or applies at a collapsed caret."""
        start, end = self._range(start, end)
        return is_mark_active(self.document, start, end, mark_type)

    def toggle_bold(self, start=None, end=None) -> bool:
        return self.toggle_mark(DocumentConstants.BOLD, start, end)

    def toggle_underline(self, start=None, end=None) -> bool:
        return self.toggle_mark(DocumentConstants.UNDERLINE, start, end)

    def set_link(self, href: str, start=None, end=None) -> bool:
        """Link a range, or the selection, to ``href``.

        Returns:
            False if ``href`` is empty or the range is empty.
        """
        self._require(self.config.links, "links")
        start, end = self._range(start, end)
        if not href or start == end:
            return False
        self.document = add_mark(self.document, start, end, Mark(DocumentConstants.LINK, {"href": href}))
        return True

    def unset_link(self, start=None, end=None) -> bool:
        self._require(self.config.links, "links")
        start, end = self._range(start, end)
        if start == end:
            return False
        self.document = remove_mark(self.document, start, end, DocumentConstants.LINK)
        return True

    # --- Cursor ---

    def set_selection(self, start, end=None) -> None:
        """Select [start, end); with one argument, place a collapsed caret."""
        self._require(self.config.cursor.set, "cursor.set")
        self.selection_start = absolute_position(self.document, start)
        self.selection_end = (
            absolute_position(self.document, end) if end is not None else self.selection_start
        )

    def select_all(self) -> bool:
        """Select the whole document."""
        self._require(self.config.cursor.select_all, "cursor.select_all")
        self.selection_start = 0
        self.selection_end = document_length(self.document)
        return True

    def get_cursor(self) -> CursorInfo:
        """Describe the selection.

        Returns:
            CursorInfo with ordered absolute ends, their block offsets and
            the selected display text (chip labels resolved).
        """
        start, end = self._ordered_selection()
        return CursorInfo(
            start=start,
            end=end,
            empty=start == end,
            start_block=absolute_to_block_offset(self.document, start),
            end_block=absolute_to_block_offset(self.document, end),
            selected_text=extract_text(self.document, start, end, self.resolver) if start != end else "",
        )

    def is_at_start(self) -> bool:
        return self.selection_start == self.selection_end == 0

    def is_at_end(self) -> bool:
        total = document_length(self.document)
        return self.selection_start == self.selection_end and self.selection_end >= total

    def editor_selection(self) -> tuple[int, int]:
        """Return the selection in the host editor's 1-based positions."""
        start, end = self._ordered_selection()
        return to_editor_position(start), to_editor_position(end)

    def set_editor_selection(self, start: int, end: Optional[int] = None) -> None:
        """Set the selection from the host editor's 1-based positions."""
        self.set_selection(
            from_editor_position(start),
            from_editor_position(end) if end is not None else None,
        )

    # --- Merge and split ---

    def merge(self, a, b) -> Document:
        """Merge two documents; see ``merge_documents``."""
        self._require(self.config.document.merge, "document.merge")
        return merge_documents(a, b)

    def split(self, doc, position) -> SplitResult:
        """Split a document at ``position``; see ``split_document``."""
        self._require(self.config.document.split, "document.split")
        return split_document(doc, position)
