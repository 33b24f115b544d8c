# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Template lexer: splits source text into text, action and comment segments.

Only delimiters are handled here (`{{`, `}}`, trim markers, `/* */` comments);
the contents of each action are parsed by the lark grammar in `parser.py`.
Quoted strings inside actions may contain `}}`, so the scanner tracks
`"..."`, `` `...` `` and `'c'` literals while looking for the closing
delimiter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from tmplschema.core.span import Span
from tmplschema.errors import TemplateSyntaxError

LEFT_DELIM = "{{"
RIGHT_DELIM = "}}"
LEFT_COMMENT = "/*"
RIGHT_COMMENT = "*/"

_SPACE = " \t\r\n"


@dataclass(frozen=True)
class Segment:
	"""
	One lexical unit of template text.

	kind is "text", "action" or "comment". For actions, `text` is the raw
	action body (delimiters and trim markers removed) and `span` is the
	position of its first character, so fragment-relative lark positions can
	be shifted back onto the template.
	"""

	kind: str
	text: str
	span: Span


class _Cursor:
	"""Maps offsets to 1-based line/column, caching line starts."""

	def __init__(self, src: str) -> None:
		self._starts = [0]
		for i, ch in enumerate(src):
			if ch == "\n":
				self._starts.append(i + 1)

	def span(self, offset: int) -> Span:
		lo, hi = 0, len(self._starts) - 1
		while lo < hi:
			mid = (lo + hi + 1) // 2
			if self._starts[mid] <= offset:
				lo = mid
			else:
				hi = mid - 1
		return Span(line=lo + 1, column=offset - self._starts[lo] + 1)


def _has_left_trim(src: str, pos: int) -> bool:
	return src.startswith("-", pos) and pos + 1 < len(src) and src[pos + 1] in _SPACE


def _find_action_end(src: str, pos: int, cursor: _Cursor, start: int) -> int:
	"""Return the offset of the `}}` closing the action body starting at `pos`."""
	i = pos
	n = len(src)
	while i < n:
		ch = src[i]
		if src.startswith(RIGHT_DELIM, i):
			return i
		if ch in "\"'":
			j = i + 1
			while j < n and src[j] != ch:
				if src[j] == "\\":
					j += 1
				elif src[j] == "\n":
					raise TemplateSyntaxError("unterminated quoted string", span=cursor.span(i))
				j += 1
			if j >= n:
				raise TemplateSyntaxError("unterminated quoted string", span=cursor.span(i))
			i = j + 1
			continue
		if ch == "`":
			j = src.find("`", i + 1)
			if j < 0:
				raise TemplateSyntaxError("unterminated raw quoted string", span=cursor.span(i))
			i = j + 1
			continue
		i += 1
	raise TemplateSyntaxError("unclosed action", span=cursor.span(start))


def lex_template(src: str) -> List[Segment]:
	"""Split `src` into segments, applying trim markers to adjacent text."""
	cursor = _Cursor(src)
	segments: List[Segment] = []
	pos = 0
	trim_next_text = False

	def emit_text(start: int, end: int, trim_right: bool) -> None:
		nonlocal trim_next_text
		text = src[start:end]
		if trim_next_text:
			stripped = text.lstrip(_SPACE)
			start += len(text) - len(stripped)
			text = stripped
		if trim_right:
			text = text.rstrip(_SPACE)
		trim_next_text = False
		if text:
			segments.append(Segment("text", text, cursor.span(start)))

	while True:
		open_at = src.find(LEFT_DELIM, pos)
		if open_at < 0:
			emit_text(pos, len(src), False)
			break
		body = open_at + len(LEFT_DELIM)
		trim_left = _has_left_trim(src, body)
		after_marker = body + 2 if trim_left else body
		emit_text(pos, open_at, trim_left)

		# Comments: `{{/*`, `{{- /*`, and the lenient `{{-/*`.
		comment_at = None
		if src.startswith(LEFT_COMMENT, after_marker):
			comment_at = after_marker
		elif src.startswith("-" + LEFT_COMMENT, body):
			comment_at = body + 1
		if comment_at is not None:
			close = src.find(RIGHT_COMMENT, comment_at + len(LEFT_COMMENT))
			if close < 0:
				raise TemplateSyntaxError("unclosed comment", span=cursor.span(open_at))
			rest = close + len(RIGHT_COMMENT)
			j = rest
			while j < len(src) and src[j] in " \t":
				j += 1
			trim_right = src.startswith("-", j)
			if trim_right:
				j += 1
			if not src.startswith(RIGHT_DELIM, j):
				raise TemplateSyntaxError("comment ends before closing delimiter", span=cursor.span(close))
			segments.append(
				Segment("comment", src[comment_at + len(LEFT_COMMENT):close], cursor.span(comment_at))
			)
			pos = j + len(RIGHT_DELIM)
			trim_next_text = trim_right
			continue

		close = _find_action_end(src, after_marker, cursor, open_at)
		inner = src[after_marker:close]
		trim_right = inner.endswith("-") and len(inner) >= 2 and inner[-2] in _SPACE
		if trim_right:
			inner = inner[:-1]
		segments.append(Segment("action", inner, cursor.span(after_marker)))
		pos = close + len(RIGHT_DELIM)
		trim_next_text = trim_right

	return segments


__all__ = ["Segment", "lex_template"]
