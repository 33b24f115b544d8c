# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
User-facing analyzer errors.

Every error is fatal for the template unit that raised it, except
`UndefinedFunctionError`, which the parser driver recovers from by registering
a placeholder function and retrying (see `tmplschema.parser.parse_template`).

All errors are `ValueError` subclasses carrying a best-effort `span`, so the
CLI can turn them into pinned diagnostics instead of tracebacks.
"""

from __future__ import annotations

from typing import Optional

from tmplschema.core.diagnostics import Diagnostic
from tmplschema.core.paths import FieldPath, format_path
from tmplschema.core.span import Span


class TemplateError(ValueError):
	"""Base class for per-unit analysis failures."""

	phase = "analyze"

	def __init__(self, message: str, *, span: Optional[Span] = None) -> None:
		super().__init__(message)
		self.message = message
		self.span = span or Span()

	def to_diagnostic(self, file: Optional[str] = None) -> Diagnostic:
		span = self.span.with_file(file) if file is not None else self.span
		return Diagnostic(message=self.message, phase=self.phase, span=span)


class TemplateSyntaxError(TemplateError):
	"""Source text is not valid template syntax."""

	phase = "parser"

	def __str__(self) -> str:
		if self.span.line is None:
			return self.message
		return f"{self.span.line}:{self.span.column or '?'}: {self.message}"


class UndefinedFunctionError(TemplateSyntaxError):
	"""A call names a function that is not in the parser's registry."""

	def __init__(self, name: str, *, span: Optional[Span] = None) -> None:
		super().__init__(f'function "{name}" not defined', span=span)
		self.name = name


class DirectiveSyntaxError(TemplateError):
	"""A `@param` directive has a malformed path or type expression."""

	phase = "directive"

	def __init__(self, message: str, *, line: int) -> None:
		super().__init__(f"line {line}: {message}", span=Span(line=line, column=None))
		self.line = line


class OverridePathConflict(TemplateError):
	"""An override path runs through a node that cannot host child fields."""

	phase = "resolve"

	def __init__(self, path: FieldPath, blocker: FieldPath, *, line: Optional[int] = None) -> None:
		super().__init__(
			f"@param {format_path(path)}: '{format_path(blocker)}' is not a record and cannot have field '{path[len(blocker)]}'",
			span=Span(line=line),
		)
		self.path = path
		self.blocker = blocker


__all__ = [
	"DirectiveSyntaxError",
	"OverridePathConflict",
	"TemplateError",
	"TemplateSyntaxError",
	"UndefinedFunctionError",
]
