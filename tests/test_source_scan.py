"""Unit tests for the literal/comment/escape scanner and the nesting matcher."""
import pytest

import source_scan as sscan

NESTED = sscan.DiffOptions()
FLAT = sscan.DiffOptions(nested_comments=False)


def kinds(items):
    return [it.kind for it in items]


def test_match_quote_plain_literal():
    buf = 'x = "abc"; y'
    assert sscan.match_quote(buf, 4) == 9


def test_match_quote_escaped_quote_continues():
    buf = r'"a\"b" rest'
    assert sscan.match_quote(buf, 0) == 6


def test_match_quote_doubled_backslash_closes():
    buf = r'"a\\" rest'
    assert sscan.match_quote(buf, 0) == 5


def test_match_quote_three_backslashes_is_escaped():
    buf = r'"a\\\"b" rest'
    assert sscan.match_quote(buf, 0) == 8


def test_unterminated_literal_runs_to_end():
    buf = 'int s = "never closed;\n}'
    items = sscan.find_items(buf, NESTED)
    assert len(items) == 1
    assert items[0].kind == sscan.KIND_STRING
    assert items[0].begin == 8
    assert items[0].end == len(buf)


def test_find_items_in_discovery_order():
    buf = "a = \"s\"; /* c */ b = 'x';"
    items = sscan.find_items(buf, NESTED)
    assert kinds(items) == [sscan.KIND_STRING, sscan.KIND_COMMENT, sscan.KIND_CHAR]
    assert [it.text(buf) for it in items] == ['"s"', "/* c */", "'x'"]


def test_quote_inside_comment_is_not_a_literal():
    buf = "/* don't */ int x;"
    items = sscan.find_items(buf, NESTED)
    assert kinds(items) == [sscan.KIND_COMMENT]


def test_comment_marker_inside_literal_is_not_a_comment():
    buf = 'char *p = "/* not a comment";'
    items = sscan.find_items(buf, NESTED)
    assert kinds(items) == [sscan.KIND_STRING]


def test_record_only_requested_kinds():
    buf = "a = \"s\"; /* c */"
    assert kinds(sscan.find_literals(buf, NESTED)) == [sscan.KIND_STRING]
    assert kinds(sscan.find_comments(buf, NESTED)) == [sscan.KIND_COMMENT]


def test_nested_comment_ends_at_outermost_closer():
    buf = "/* outer /* inner */ still-outer */ int x;"
    items = sscan.find_comments(buf, NESTED)
    assert len(items) == 1
    assert items[0].text(buf) == "/* outer /* inner */ still-outer */"


def test_flat_comment_ends_at_first_closer():
    buf = "/* outer /* inner */ still-outer */ int x;"
    items = sscan.find_comments(buf, FLAT)
    assert items[0].text(buf) == "/* outer /* inner */"


def test_unterminated_nested_comment_is_fatal():
    with pytest.raises(SystemExit) as exc:
        sscan.find_items("int x;\n/* never closes", NESTED)
    assert "line 2" in str(exc.value)


def test_unterminated_flat_comment_runs_to_end():
    buf = "int x; /* never closes"
    items = sscan.find_comments(buf, FLAT)
    assert items[0].end == len(buf)


def test_escape_outside_literal_skips_next_character():
    # the backslash swallows the quote, so no literal starts here
    buf = 'x \\" y'
    assert sscan.find_literals(buf, NESTED) == []
    escapes = sscan.find_items(buf, NESTED, literals=False, comments=False, escapes=True)
    assert [(it.begin, it.end) for it in escapes] == [(2, 4)]


def test_scan_from_start_offset():
    buf = '"a" "b"'
    items = sscan.find_literals(buf, NESTED)
    later = sscan.find_items(buf, NESTED, start=3, comments=False)
    assert len(items) == 2
    assert later == items[1:]


def test_match_nested_generic_pair():
    buf = "(a (b) (c (d))) tail"
    assert sscan.match_nested(buf, 0, "(", ")") == 15


def test_match_nested_without_closer_returns_none():
    assert sscan.match_nested("(a (b)", 0, "(", ")") is None


def test_match_nested_requires_opener():
    with pytest.raises(ValueError):
        sscan.match_nested("x(a)", 0, "(", ")")


def test_span_rejects_reversed_range():
    with pytest.raises(ValueError):
        sscan.Span(5, 2, sscan.KIND_STRING)


def test_span_rejects_unknown_kind():
    with pytest.raises(ValueError):
        sscan.Span(0, 1, "bogus")


def test_add_item_checks_buffer_length():
    items = []
    with pytest.raises(ValueError):
        sscan.add_item(items, 3, 0, 4, sscan.KIND_COMMENT)
    assert items == []


def test_line_number():
    buf = "a\nb\nc"
    assert sscan.line_number(buf, 0) == 1
    assert sscan.line_number(buf, 2) == 2
    assert sscan.line_number(buf, len(buf)) == 3
    assert sscan.line_number(buf, -1) == -1
    with pytest.raises(ValueError):
        sscan.line_number(buf, len(buf) + 1)
