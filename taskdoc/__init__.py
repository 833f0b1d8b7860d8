"""Taskdoc - rich-text document model for a block-based task editor."""

from .model import AtomicNode, Block, BlockOffset, Document, FrozenAttrs, Mark, TextRun
from .position import absolute_to_block_offset, block_offset_to_absolute
from .merge import merge_documents, merge_inline, normalize_document
from .split import SplitResult, split_block, split_document
from .selection import LabelResolver, extract_text
from .serialization import document_from_json, document_to_json
from .api import DocumentAPI

__all__ = [
    'AtomicNode',
    'Block',
    'BlockOffset',
    'Document',
    'FrozenAttrs',
    'Mark',
    'TextRun',
    'absolute_to_block_offset',
    'block_offset_to_absolute',
    'merge_documents',
    'merge_inline',
    'normalize_document',
    'SplitResult',
    'split_block',
    'split_document',
    'LabelResolver',
    'extract_text',
    'document_from_json',
    'document_to_json',
    'DocumentAPI',
]
