# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared building blocks: source spans, diagnostics and field paths.
"""

from .diagnostics import Diagnostic
from .paths import FieldPath, export_name, format_path, parse_path
from .span import Span

__all__ = ["Diagnostic", "FieldPath", "Span", "export_name", "format_path", "parse_path"]
