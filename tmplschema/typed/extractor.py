# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Named-type extractor: lifts inline records out of the typed field tree.

Fields are visited in sorted order, children before parents, so a record's
own field types already carry their final names when it is compared with
records extracted earlier.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Set

from tmplschema.core.paths import FieldPath, export_name, format_path

from .schema import NamedType, TypedField, TypedSchema
from .type_expr import AnonymousRecord, NamedRef, innermost, iter_named, replace_innermost

logger = logging.getLogger(__name__)


class NamedTypeExtractor:
	def __init__(self) -> None:
		self.types: Dict[str, NamedType] = {}

	def extract(self, fields: Dict[str, TypedField]) -> TypedSchema:
		top = {name: self._visit((name,), fields[name]) for name in sorted(fields)}
		named = tuple(self.types[name] for name in sorted(self.types))
		requirements = frozenset(_requirements(top, named))
		logger.debug("extract: named_types=%s requirements=%s", [nt.name for nt in named], sorted(requirements))
		return TypedSchema(fields=top, named_types=named, requirements=requirements)

	def _visit(self, path: FieldPath, f: TypedField) -> TypedField:
		if f.children is None:
			return TypedField(f.name, f.type)
		if not f.children:
			return TypedField(f.name, replace_innermost(f.type, AnonymousRecord(())))
		children = {name: self._visit(path + (name,), f.children[name]) for name in sorted(f.children)}
		placeholder = innermost(f.type)
		assert isinstance(placeholder, NamedRef), f"record field {format_path(path)} has no placeholder"
		name = self._register(path, placeholder.name, children)
		return TypedField(f.name, replace_innermost(f.type, NamedRef(name)))

	def _register(self, path: FieldPath, base: str, fields: Dict[str, TypedField]) -> str:
		candidates: List[str] = [base]
		prefix = "".join(export_name(seg) for seg in path[:-1])
		if prefix:
			candidates.append(prefix + base)
		for candidate in _numbered(candidates):
			existing = self.types.get(candidate)
			if existing is None:
				self.types[candidate] = NamedType(candidate, fields)
				logger.debug("extract: %s -> %s", format_path(path), candidate)
				return candidate
			if existing.fields == fields:
				return candidate
		raise AssertionError("unreachable")


def _numbered(candidates: List[str]) -> Iterator[str]:
	yield from candidates
	n = 2
	while True:
		yield f"{candidates[-1]}{n}"
		n += 1


def _requirements(fields: Dict[str, TypedField], named: tuple) -> Set[str]:
	tags: Set[str] = set()
	all_fields = list(fields.values())
	for nt in named:
		all_fields.extend(nt.fields.values())
	for f in all_fields:
		for ref in iter_named(f.type):
			if ref.qualifier is not None:
				tags.add(ref.qualifier)
	return tags


def extract_named_types(fields: Dict[str, TypedField]) -> TypedSchema:
	return NamedTypeExtractor().extract(fields)


__all__ = ["NamedTypeExtractor", "extract_named_types"]
