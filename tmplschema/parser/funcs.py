# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Function-name registry used while parsing.

Go's template parser rejects calls to functions it was not told about. The
analyzer never calls anything, so unknown names only need a placeholder entry;
the registry is an immutable value built per parse so concurrent analyses
never share it.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable

# text/template builtins.
BUILTIN_FUNCS: FrozenSet[str] = frozenset(
	{
		"and",
		"call",
		"html",
		"index",
		"slice",
		"js",
		"len",
		"not",
		"or",
		"print",
		"printf",
		"println",
		"urlquery",
		"eq",
		"ge",
		"gt",
		"le",
		"lt",
		"ne",
	}
)

# Common custom helpers pre-registered so typical templates parse first time.
PRESET_FUNCS: FrozenSet[str] = frozenset(
	{
		"upper",
		"lower",
		"title",
		"trim",
		"trimSpace",
		"formatDate",
		"formatDateTime",
		"formatTime",
		"nl2br",
		"default",
		"join",
		"split",
		"add",
		"sub",
		"mul",
		"div",
		"mod",
		"comma",
		"json",
		"yaml",
		"base64",
		"urlEncode",
		"urlDecode",
		"htmlEscape",
		"htmlUnescape",
		"contains",
		"hasPrefix",
		"hasSuffix",
		"replace",
		"repeat",
		"reverse",
		"truncate",
	}
)

# Key-lookup builtin whose first argument is treated as a mapping.
INDEX_FUNC = "index"


def base_registry(extra: Iterable[str] = ()) -> FrozenSet[str]:
	"""Builtins + presets + caller-supplied names."""
	return BUILTIN_FUNCS | PRESET_FUNCS | frozenset(extra)


__all__ = ["BUILTIN_FUNCS", "INDEX_FUNC", "PRESET_FUNCS", "base_registry"]
