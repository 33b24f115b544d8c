"""Delimiter-level lexing: text/action/comment segments and trim markers."""

import pytest

from tmplschema.errors import TemplateSyntaxError
from tmplschema.parser.lexer import lex_template


def _kinds(segments):
	return [(s.kind, s.text) for s in segments]


def test_text_and_action_segments():
	segs = lex_template("a {{ .X }} b")
	assert _kinds(segs) == [("text", "a "), ("action", " .X "), ("text", " b")]
	assert segs[1].span.line == 1
	assert segs[1].span.column == 5


def test_trim_markers_strip_adjacent_whitespace():
	segs = lex_template("a  \n {{- .X -}} \n\t b")
	assert _kinds(segs) == [("text", "a"), ("action", ".X "), ("text", "b")]


def test_dash_without_space_is_not_a_trim_marker():
	segs = lex_template("a {{-3}} b")
	assert _kinds(segs) == [("text", "a "), ("action", "-3"), ("text", " b")]


def test_comment_segments():
	segs = lex_template("{{/* hi */}}x{{- /* trimmed */ -}}  y")
	assert _kinds(segs) == [("comment", " hi "), ("text", "x"), ("comment", " trimmed "), ("text", "y")]


def test_lenient_comment_without_space_after_dash():
	segs = lex_template("{{-/* @param X int */-}}")
	assert _kinds(segs) == [("comment", " @param X int ")]


def test_comment_must_end_at_delimiter():
	with pytest.raises(TemplateSyntaxError) as exc:
		lex_template("{{/* x */ y }}")
	assert "comment ends before closing delimiter" in exc.value.message


def test_unclosed_comment():
	with pytest.raises(TemplateSyntaxError) as exc:
		lex_template("ok\n{{/* never closed")
	assert exc.value.message == "unclosed comment"
	assert exc.value.span.line == 2


def test_unclosed_action_reports_opening_position():
	with pytest.raises(TemplateSyntaxError) as exc:
		lex_template("line1\n  {{ .X ")
	assert exc.value.message == "unclosed action"
	assert (exc.value.span.line, exc.value.span.column) == (2, 3)


def test_quoted_delimiters_do_not_close_action():
	segs = lex_template('{{ printf "}}" .X }}{{ `}}` }}')
	assert _kinds(segs) == [("action", ' printf "}}" .X '), ("action", " `}}` ")]


def test_unterminated_string_in_action():
	with pytest.raises(TemplateSyntaxError) as exc:
		lex_template('{{ printf "oops }}')
	assert "unterminated quoted string" in exc.value.message


def test_action_span_on_later_line():
	segs = lex_template("first\nsecond {{ .X }}")
	action = segs[-1]
	assert action.kind == "action"
	assert (action.span.line, action.span.column) == (2, 10)
