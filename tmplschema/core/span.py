# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

Lines and columns are 1-based. A Span with no line denotes an unknown
location (e.g. errors raised after parsing, such as override conflicts).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source location (best-effort file/line/column)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	def with_file(self, file: Optional[str]) -> "Span":
		"""Return a copy carrying `file` (used once the unit name is known)."""
		return Span(file=file, line=self.line, column=self.column)

	def shifted(self, line: int, column: int) -> "Span":
		"""
		Translate a span relative to an embedded fragment into absolute terms.

		`line`/`column` are the fragment's own 1-based start position in the
		enclosing text. Columns only shift on the fragment's first line.
		"""
		if self.line is None:
			return Span(file=self.file, line=line, column=column)
		abs_line = line + self.line - 1
		if self.line == 1 and self.column is not None:
			abs_col: Optional[int] = column + self.column - 1
		else:
			abs_col = self.column
		return Span(file=self.file, line=abs_line, column=abs_col)

	def __str__(self) -> str:
		f = self.file or "<template>"
		l = self.line if self.line is not None else "?"
		c = self.column if self.column is not None else "?"
		return f"{f}:{l}:{c}"


__all__ = ["Span"]
