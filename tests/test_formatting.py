from taskdoc.formatting import (
    add_mark,
    is_mark_active,
    marks_at,
    remove_mark,
    text_runs_in_range,
    toggle_mark,
)
from taskdoc.model import AtomicNode, Block, Document, Mark, TextRun

BOLD = Mark("bold")
CHIP = AtomicNode("projectChip", {"projectId": "42"})


def para(*content):
    return Block("paragraph", {}, content)


def test_add_mark_cuts_runs_at_range_boundaries():
    d = add_mark(Document.from_text("hello world"), 0, 5, BOLD)
    assert d.blocks[0].content == (TextRun("hello", (BOLD,)), TextRun(" world"))


def test_add_mark_inside_a_run():
    d = add_mark(Document.from_text("abcde"), 1, 3, BOLD)
    assert d.blocks[0].content == (TextRun("a"), TextRun("bc", (BOLD,)), TextRun("de"))


def test_toggle_twice_restores_document():
    d = Document.from_text("hello world")
    assert toggle_mark(toggle_mark(d, 0, 5, BOLD), 0, 5, BOLD) == d


def test_toggle_adds_when_partially_marked():
    d = add_mark(Document.from_text("hello"), 0, 2, BOLD)
    d = toggle_mark(d, 0, 5, BOLD)
    assert d.blocks[0].content == (TextRun("hello", (BOLD,)),)


def test_mark_skips_atomic_nodes():
    d = Document((para(TextRun("ab"), CHIP, TextRun("cd")),))
    d = add_mark(d, 0, 5, BOLD)
    assert d.blocks[0].content == (TextRun("ab", (BOLD,)), CHIP, TextRun("cd", (BOLD,)))


def test_mark_across_blocks():
    d = add_mark(Document.from_text("ab", "cd"), 1, 3, BOLD)
    assert d.blocks[0].content == (TextRun("a"), TextRun("b", (BOLD,)))
    assert d.blocks[1].content == (TextRun("c", (BOLD,)), TextRun("d"))


def test_link_replaces_existing_link():
    d = Document.from_text("site")
    d = add_mark(d, 0, 4, Mark("link", {"href": "https://a"}))
    d = add_mark(d, 0, 4, Mark("link", {"href": "https://b"}))
    assert d.blocks[0].content == (TextRun("site", (Mark("link", {"href": "https://b"}),)),)


def test_remove_mark():
    d = Document((para(TextRun("bold", (BOLD,))),))
    d = remove_mark(d, 2, 4, "bold")
    assert d.blocks[0].content == (TextRun("bo", (BOLD,)), TextRun("ld"))


def test_reversed_range():
    d = Document.from_text("hello")
    assert add_mark(d, 5, 0, BOLD) == add_mark(d, 0, 5, BOLD)


def test_is_mark_active():
    d = add_mark(Document.from_text("hello world"), 0, 5, BOLD)
    assert is_mark_active(d, 0, 5, "bold")
    assert not is_mark_active(d, 0, 6, "bold")
    assert not is_mark_active(d, 6, 11, "bold")


def test_is_mark_active_at_caret_inherits_from_left():
    d = add_mark(Document.from_text("hello world"), 0, 5, BOLD)
    assert is_mark_active(d, 3, 3, "bold")
    assert is_mark_active(d, 5, 5, "bold")
    assert not is_mark_active(d, 6, 6, "bold")


def test_is_mark_active_with_only_atomic_nodes():
    d = Document((para(CHIP),))
    assert not is_mark_active(d, 0, 1, "bold")


def test_marks_at():
    d = Document((para(TextRun("ab", (BOLD,)), CHIP, TextRun("cd")),))
    assert marks_at(d, 0) == (BOLD,)
    assert marks_at(d, 2) == (BOLD,)
    assert marks_at(d, 3) == ()
    assert marks_at(d, 5) == ()
    assert marks_at(Document.empty(), 0) == ()


def test_text_runs_in_range():
    d = Document((para(TextRun("ab", (BOLD,)), CHIP, TextRun("cd")),))
    assert text_runs_in_range(d, 1, 4) == [TextRun("b", (BOLD,)), TextRun("c")]
