# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the analyzer front-end and CLI.

Errors raised by the pipeline stages are exceptions (see `tmplschema.errors`);
the CLI converts them into Diagnostics for text and JSON rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""Represents an analyzer diagnostic (error/warning)."""

	message: str
	# Pipeline phase that produced the diagnostic: parser, directive, resolve.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def to_json(self) -> dict[str, object]:
		return {
			"phase": self.phase,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}

	def render(self) -> str:
		"""Format as `file:line:col: severity: message` for stderr."""
		return f"{self.span}: {self.severity}: {self.message}"


__all__ = ["Diagnostic"]
