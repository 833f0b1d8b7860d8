"""Node model for task documents.

A document is an ordered tuple of blocks; a block holds inline nodes, which
are either text runs carrying formatting marks or atomic reference nodes.
All node types are frozen dataclasses: operations build new trees instead of
mutating the ones they were given. Attribute mappings are frozen as well, so
nodes can be shared between documents and used as set members or dict keys.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Union

from .constants import DocumentConstants


def _freeze(items) -> tuple:
    return tuple(items) if items is not None else ()


def _freeze_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return FrozenAttrs(value)
    if isinstance(value, (list, tuple)):
        return tuple(_freeze_value(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze_value(v) for v in value)
    return value


def _thaw_value(value: Any) -> Any:
    if isinstance(value, FrozenAttrs):
        return value.thaw()
    if isinstance(value, (tuple, frozenset)):
        return [_thaw_value(v) for v in value]
    return value


class FrozenAttrs(Mapping):
    """Read-only, hashable attribute mapping.

    Nested mappings become FrozenAttrs and nested lists become tuples.
    Compares equal to a plain dict with the same items.
    """

    __slots__ = ("_data", "_hash")

    def __init__(self, data: Optional[Mapping] = None):
        self._data = {key: _freeze_value(value) for key, value in (data or {}).items()}
        self._hash = None

    def __getitem__(self, key):
        return self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __hash__(self):
        if self._hash is None:
            self._hash = hash(frozenset(self._data.items()))
        return self._hash

    def __repr__(self):
        return f"FrozenAttrs({self._data!r})"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def thaw(self) -> dict[str, Any]:
        """Return a plain, mutable deep copy (dicts and lists)."""
        return {key: _thaw_value(value) for key, value in self._data.items()}


def freeze_attrs(attrs: Optional[Mapping]) -> FrozenAttrs:
    if isinstance(attrs, FrozenAttrs):
        return attrs
    return FrozenAttrs(attrs)


@dataclass(frozen=True, order=True)
class BlockOffset:
    """A block-relative position: block index plus character offset."""

    block_index: int = 0
    offset: int = 0


@dataclass(frozen=True)
class Mark:
    """A formatting annotation on a text run, e.g. bold or a link."""

    type: str
    attrs: FrozenAttrs = field(default_factory=FrozenAttrs)
    # JSON keys the host sent explicitly empty, re-emitted on serialization.
    empty_keys: frozenset = field(default=frozenset(), compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "attrs", freeze_attrs(self.attrs))
        object.__setattr__(self, "empty_keys", frozenset(self.empty_keys))


@dataclass(frozen=True)
class TextRun:
    text: str
    marks: tuple[Mark, ...] = ()
    empty_keys: frozenset = field(default=frozenset(), compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "marks", _freeze(self.marks))
        object.__setattr__(self, "empty_keys", frozenset(self.empty_keys))

    @property
    def length(self) -> int:
        return len(self.text)

    def with_text(self, text: str) -> "TextRun":
        return replace(self, text=text)

    def has_mark(self, mark_type: str) -> bool:
        return any(m.type == mark_type for m in self.marks)


@dataclass(frozen=True)
class AtomicNode:
    """An indivisible inline reference, such as a project chip.

    Atomic nodes have no text and count as a single character in position
    arithmetic. They are never merged with neighbours, not even with an
    identical atomic node.
    """

    kind: str
    attrs: FrozenAttrs = field(default_factory=FrozenAttrs)
    empty_keys: frozenset = field(default=frozenset(), compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "attrs", freeze_attrs(self.attrs))
        object.__setattr__(self, "empty_keys", frozenset(self.empty_keys))

    @property
    def length(self) -> int:
        return 1

    @property
    def reference_id(self) -> Optional[str]:
        for key in DocumentConstants.REFERENCE_ATTRS:
            value = self.attrs.get(key)
            if value is not None:
                return str(value)
        return None

    @property
    def fallback_name(self) -> Optional[str]:
        value = self.attrs.get(DocumentConstants.FALLBACK_NAME_ATTR)
        return str(value) if value is not None else None


Inline = Union[TextRun, AtomicNode]


@dataclass(frozen=True)
class Block:
    """A paragraph-like structural unit.

    Blocks of different kinds, or with different attributes, are never merged
    into each other.
    """

    kind: str = DocumentConstants.DEFAULT_BLOCK_KIND
    attrs: FrozenAttrs = field(default_factory=FrozenAttrs)
    content: tuple[Inline, ...] = ()
    empty_keys: frozenset = field(default=frozenset(), compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "attrs", freeze_attrs(self.attrs))
        object.__setattr__(self, "content", _freeze(self.content))
        object.__setattr__(self, "empty_keys", frozenset(self.empty_keys))

    @property
    def length(self) -> int:
        return sum(node.length for node in self.content)

    @property
    def is_empty(self) -> bool:
        return not self.content

    def with_content(self, content) -> "Block":
        return replace(self, content=_freeze(content))

    def compatible_with(self, other: "Block") -> bool:
        """Return True if the two blocks may be merged into one."""
        return self.kind == other.kind and self.attrs == other.attrs


@dataclass(frozen=True)
class Document:
    blocks: tuple[Block, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "blocks", _freeze(self.blocks))

    @classmethod
    def empty(cls) -> "Document":
        return cls(())

    @classmethod
    def from_text(cls, *paragraphs: str, kind: str = DocumentConstants.DEFAULT_BLOCK_KIND) -> "Document":
        """Build a plain document with one block per paragraph string."""
        return cls(tuple(
            Block(kind, {}, (TextRun(p),) if p else ())
            for p in paragraphs
        ))

    @property
    def length(self) -> int:
        return sum(block.length for block in self.blocks)

    @property
    def block_count(self) -> int:
        return len(self.blocks)
