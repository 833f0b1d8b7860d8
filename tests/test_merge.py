"""Tests for document merging and normalization."""

import pytest

from taskdoc.merge import marks_equal, merge_documents, merge_inline, normalize_document
from taskdoc.model import AtomicNode, Block, Document, Mark, TextRun
from taskdoc.serialization import document_from_json, document_to_json

BOLD = Mark("bold")
ITALIC = Mark("italic")
CHIP = AtomicNode("projectChip", {"projectId": "42"})


def para(*content, **attrs):
    return Block("paragraph", attrs, content)


def doc(*blocks):
    return Document(blocks)


def test_merge_joins_compatible_boundary_blocks():
    merged = merge_documents(Document.from_text("Hello "), Document.from_text("world"))
    assert merged == doc(para(TextRun("Hello world")))


def test_merge_joins_only_the_boundary_blocks():
    a = Document.from_text("one", "two")
    b = Document.from_text("three", "four")
    merged = merge_documents(a, b)
    assert merged == Document.from_text("one", "twothree", "four")


def test_incompatible_kinds_are_concatenated():
    a = doc(Block("heading", {"level": 1}, (TextRun("Title"),)))
    b = Document.from_text("body")
    assert merge_documents(a, b).blocks == a.blocks + b.blocks


def test_different_block_attributes_are_concatenated():
    a = doc(Block("heading", {"level": 1}, (TextRun("A"),)))
    b = doc(Block("heading", {"level": 2}, (TextRun("B"),)))
    assert merge_documents(a, b).blocks == a.blocks + b.blocks


def test_equal_block_attributes_merge():
    a = doc(Block("heading", {"level": 2}, (TextRun("A"),)))
    b = doc(Block("heading", {"level": 2}, (TextRun("B"),)))
    assert merge_documents(a, b) == doc(Block("heading", {"level": 2}, (TextRun("AB"),)))


def test_runs_with_different_marks_stay_separate():
    a = doc(para(TextRun("foo", (BOLD,))))
    b = doc(para(TextRun("bar")))
    assert merge_documents(a, b) == doc(para(TextRun("foo", (BOLD,)), TextRun("bar")))


def test_atomic_nodes_are_never_merged():
    a = doc(para(TextRun("a"), CHIP))
    b = doc(para(CHIP, TextRun("b")))
    merged = merge_documents(a, b)
    assert merged.blocks[0].content == (TextRun("a"), CHIP, CHIP, TextRun("b"))


def test_missing_and_malformed_inputs_count_as_empty():
    d = Document.from_text("x")
    assert merge_documents(None, None) == Document.empty()
    assert merge_documents(None, d) == d
    assert merge_documents(d, None) == d
    assert merge_documents(d, {"type": "nope"}) == d
    assert merge_documents(Document.empty(), Document.empty()) == Document.empty()


def test_merge_accepts_json_documents():
    a = {"type": "doc", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "Hi "}]}]}
    b = {"type": "doc", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "there"}]}]}
    assert document_to_json(merge_documents(a, b)) == {
        "type": "doc",
        "content": [{"type": "paragraph", "content": [{"type": "text", "text": "Hi there"}]}],
    }


def test_merge_normalizes_an_unmerged_input():
    a = doc(para(TextRun("a"), TextRun("b"), CHIP, TextRun("c", (BOLD,)), TextRun("d", (BOLD,))))
    merged = merge_documents(a, Document.empty())
    assert merged == doc(para(TextRun("ab"), CHIP, TextRun("cd", (BOLD,))))


def test_merge_does_not_mutate_inputs():
    a_json = {"type": "doc", "content": [
        {"type": "paragraph", "attrs": {"id": "t1"}, "content": [{"type": "text", "text": "a"}]},
    ]}
    a = document_from_json(a_json)
    b = document_from_json(a_json)
    before = document_to_json(a)
    merged = merge_documents(a, b)
    with pytest.raises(TypeError):
        merged.blocks[0].attrs["id"] = "changed"
    assert document_to_json(a) == before
    assert document_to_json(b) == before


def test_shared_blocks_and_chips_are_read_only():
    a = doc(Block("heading", {"level": 1}, (TextRun("Title"), CHIP)))
    b = doc(para(TextRun("body")))
    merged = merge_documents(a, b)
    assert merged.blocks[0] is a.blocks[0]
    with pytest.raises(TypeError):
        merged.blocks[0].attrs["level"] = 9
    with pytest.raises(TypeError):
        merged.blocks[0].content[1].attrs["projectId"] = "99"
    assert a.blocks[0].attrs == {"level": 1}
    assert a.blocks[0].content[1].attrs == {"projectId": "42"}


def test_marks_can_be_collected_in_a_set():
    assert {BOLD, Mark("bold"), Mark("link", {"href": "https://a"})} == {
        BOLD,
        Mark("link", {"href": "https://a"}),
    }


def test_repeated_merges_keep_single_run():
    result = Document.empty()
    for word in ["a", "b", "c", "d"]:
        result = merge_documents(result, Document.from_text(word))
    assert result == Document.from_text("abcd")


def test_concatenation_when_no_boundary_is_mergeable():
    a = doc(para(TextRun("x")), Block("heading", {}, (TextRun("h"),)))
    b = doc(para(TextRun("y")), Block("quote"))
    assert merge_documents(a, b).blocks == a.blocks + b.blocks


class TestMergeInline:

    def test_joins_runs_at_the_seam(self):
        result = merge_inline((TextRun("a"),), (TextRun("b"), CHIP, TextRun("c")))
        assert result == (TextRun("ab"), CHIP, TextRun("c"))

    def test_empty_sides(self):
        assert merge_inline((), ()) == ()
        assert merge_inline((), (TextRun("x"),)) == (TextRun("x"),)
        assert merge_inline((CHIP,), ()) == (CHIP,)

    def test_chips_with_equal_attributes_stay_distinct(self):
        assert merge_inline((CHIP,), (CHIP,)) == (CHIP, CHIP)

    def test_mark_order_is_ignored_by_default(self):
        result = merge_inline((TextRun("a", (BOLD, ITALIC)),), (TextRun("b", (ITALIC, BOLD)),))
        assert result == (TextRun("ab", (BOLD, ITALIC)),)

    def test_ordered_mark_comparison(self):
        left = (TextRun("a", (BOLD, ITALIC)),)
        right = (TextRun("b", (ITALIC, BOLD)),)
        assert merge_inline(left, right, ordered_marks=True) == left + right


class TestMarksEqual:

    def test_empty_and_missing(self):
        assert marks_equal(None, None)
        assert marks_equal((), None)
        assert not marks_equal((BOLD,), None)

    def test_attributes_are_compared(self):
        a = Mark("link", {"href": "https://a"})
        b = Mark("link", {"href": "https://b"})
        assert marks_equal((a,), (Mark("link", {"href": "https://a"}),))
        assert not marks_equal((a,), (b,))

    def test_order(self):
        assert marks_equal((BOLD, ITALIC), (ITALIC, BOLD))
        assert not marks_equal((BOLD, ITALIC), (ITALIC, BOLD), ordered=True)
        assert marks_equal((BOLD, ITALIC), (BOLD, ITALIC), ordered=True)

    def test_multiset_counts_matter(self):
        assert not marks_equal((BOLD, BOLD), (BOLD, ITALIC))


def test_normalize_document_respects_ordered_marks():
    d = doc(para(TextRun("a", (BOLD, ITALIC)), TextRun("b", (ITALIC, BOLD))))
    assert normalize_document(d).blocks[0].content == (TextRun("ab", (BOLD, ITALIC)),)
    assert normalize_document(d, ordered_marks=True) == d
