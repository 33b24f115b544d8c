# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`@param` directives: explicit type overrides written in template comments.

	{{/* @param User.Age int */}}
	{{- /* @param Items []struct{ID int64; Title string} */ -}}

Each directive names a field path and a type expression. Type expressions
are parsed by a small recursive-descent parser:

	type     := "*" type                      optional
	          | "[" "]" type                  sequence
	          | "map" "[" "string" "]" type   mapping
	          | "struct" "{" fields "}"       anonymous record
	          | IDENT ["." IDENT]             scalar or qualified name
	fields   := [IDENT type {";" IDENT type} [";"]]
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from tmplschema.core.paths import FieldPath, format_path, parse_path
from tmplschema.errors import DirectiveSyntaxError

from .type_expr import (
	SCALAR_NAMES,
	AnonymousRecord,
	MappingOf,
	NamedRef,
	OptionalOf,
	SequenceOf,
	TypeExpr,
)

logger = logging.getLogger(__name__)

PARAM_RE = re.compile(r"\{\{-?\s*/\*\s*@param\s+(\S+)\s+(.+?)\s*\*/\s*-?\}\}")

_TOKEN_RE = re.compile(r"\s*(?:([*\[\]{};.])|([^\W\d]\w*))")


@dataclass(frozen=True)
class OverrideDirective:
	path: FieldPath
	type: TypeExpr
	line: int  # 1-based line of the directive comment
	raw: str = ""


class TypeExprError(ValueError):
	"""Malformed type expression; `parse_directives` adds the line number."""


class _TypeParser:
	def __init__(self, text: str) -> None:
		self.text = text
		self.tokens = self._tokenize(text)
		self.pos = 0

	@staticmethod
	def _tokenize(text: str) -> List[Tuple[str, int]]:
		tokens: List[Tuple[str, int]] = []
		pos = 0
		while pos < len(text):
			if text[pos:].strip() == "":
				break
			m = _TOKEN_RE.match(text, pos)
			if m is None:
				offset = len(text) - len(text[pos:].lstrip())
				raise TypeExprError(f"unexpected character {text[offset]!r} at offset {offset}")
			tokens.append((m.group(1) or m.group(2), m.start(1) if m.group(1) else m.start(2)))
			pos = m.end()
		return tokens

	def _peek(self) -> Optional[str]:
		if self.pos < len(self.tokens):
			return self.tokens[self.pos][0]
		return None

	def _next(self) -> str:
		tok = self._peek()
		if tok is None:
			raise TypeExprError("unexpected end of type expression")
		self.pos += 1
		return tok

	def _expect(self, want: str) -> None:
		tok = self._next()
		if tok != want:
			raise TypeExprError(f"expected {want!r}, got {tok!r}")

	def _ident(self, what: str) -> str:
		tok = self._next()
		if not (tok[0].isalpha() or tok[0] == "_"):
			raise TypeExprError(f"expected {what}, got {tok!r}")
		return tok

	def parse(self) -> TypeExpr:
		typ = self._type()
		if self._peek() is not None:
			raise TypeExprError(f"unexpected {self._peek()!r} after type")
		return typ

	def _type(self) -> TypeExpr:
		tok = self._peek()
		if tok == "*":
			self.pos += 1
			return OptionalOf(self._type())
		if tok == "[":
			self.pos += 1
			if self._peek() != "]":
				raise TypeExprError("fixed-size arrays are not supported; use []T")
			self.pos += 1
			return SequenceOf(self._type())
		if tok == "map":
			return self._mapping()
		if tok == "struct":
			return self._record()
		name = self._ident("a type")
		if self._peek() == ".":
			self.pos += 1
			member = self._ident("a qualified type name")
			return NamedRef(f"{name}.{member}")
		if name not in SCALAR_NAMES:
			raise TypeExprError(f"unknown type {name!r}; expected a builtin scalar or a qualified name such as time.Time")
		return NamedRef(name)

	def _mapping(self) -> TypeExpr:
		self.pos += 1
		self._expect("[")
		key = self._ident("a map key type")
		if key != "string":
			raise TypeExprError(f"map keys must be string, got {key!r}")
		self._expect("]")
		return MappingOf(self._type())

	def _record(self) -> TypeExpr:
		self.pos += 1
		self._expect("{")
		fields: List[Tuple[str, TypeExpr]] = []
		seen = set()
		while self._peek() != "}":
			name = self._ident("a field name")
			if name in seen:
				raise TypeExprError(f"duplicate field {name!r} in struct")
			seen.add(name)
			fields.append((name, self._type()))
			sep = self._peek()
			if sep == ";":
				self.pos += 1
			elif sep != "}":
				raise TypeExprError(f"expected ';' or '}}' after field {name!r}, got {sep!r}")
		self._expect("}")
		return AnonymousRecord(tuple(fields))


def parse_type_expr(text: str) -> TypeExpr:
	"""Parse a directive type expression; raises TypeExprError."""
	return _TypeParser(text).parse()


def parse_directives(source: str) -> List[OverrideDirective]:
	"""Extract every `@param` directive in source order."""
	directives: List[OverrideDirective] = []
	for line_no, line in enumerate(source.split("\n"), start=1):
		for m in PARAM_RE.finditer(line):
			raw_path, raw_type = m.group(1), m.group(2)
			path = parse_path(raw_path)
			if path is None:
				raise DirectiveSyntaxError(f"invalid @param path {raw_path!r}", line=line_no)
			try:
				typ = parse_type_expr(raw_type)
			except TypeExprError as exc:
				raise DirectiveSyntaxError(f"invalid type expression {raw_type!r}: {exc}", line=line_no) from exc
			logger.debug("directive: line=%d path=%s type=%s", line_no, format_path(path), typ)
			directives.append(OverrideDirective(path=path, type=typ, line=line_no, raw=raw_type))
	return directives


__all__ = ["OverrideDirective", "PARAM_RE", "TypeExprError", "parse_directives", "parse_type_expr"]
