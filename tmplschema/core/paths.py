# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Field paths: positional keys into the template's data graph.

A FieldPath is a tuple of identifier segments relative to the template root;
the empty tuple is the root itself.
"""

from __future__ import annotations

import re
from typing import Tuple

FieldPath = Tuple[str, ...]

ROOT: FieldPath = ()

_SEGMENT_RE = re.compile(r"^[^\W\d]\w*$")


def format_path(path: FieldPath) -> str:
	return ".".join(path)


def parse_path(text: str) -> FieldPath | None:
	"""Split a dotted path (`User.Address.City`); None if any segment is invalid."""
	if not text:
		return None
	parts = tuple(text.split("."))
	if not all(_SEGMENT_RE.match(p) for p in parts):
		return None
	return parts


def export_name(name: str) -> str:
	"""Upper-case the first character so the name can label a generated type."""
	if not name:
		return name
	return name[0].upper() + name[1:]


__all__ = ["FieldPath", "ROOT", "export_name", "format_path", "parse_path"]
