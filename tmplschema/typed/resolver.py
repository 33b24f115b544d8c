# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type resolver: raw schema + `@param` overrides → typed field tree.

Default inference gives every scalar the `string` descriptor and every record
a placeholder name derived from its field name:

	Record              -> User            (children kept on the field)
	Sequence<Record>    -> []ItemsItem
	Mapping<Record>     -> map[string]UsersValue
	Sequence<Scalar>    -> []string

Overrides are then applied shallowest path first, so `@param User ...`
never throws away a `@param User.Age ...` that follows it.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from tmplschema.core.paths import export_name, format_path
from tmplschema.errors import OverridePathConflict
from tmplschema.infer.model import ContainerKind, RawField, RawSchema

from .directives import OverrideDirective
from .schema import TypedField
from .type_expr import (
	STRING,
	AnonymousRecord,
	MappingOf,
	NamedRef,
	SequenceOf,
	TypeExpr,
	innermost,
	replace_innermost,
)

logger = logging.getLogger(__name__)

ITEM_SUFFIX = "Item"
VALUE_SUFFIX = "Value"


def _container_suffix(typ: TypeExpr) -> str:
	"""Suffix of the container closest to the record, if any."""
	suffix = ""
	while not isinstance(typ, (NamedRef, AnonymousRecord)):
		if isinstance(typ, SequenceOf):
			suffix = ITEM_SUFFIX
		elif isinstance(typ, MappingOf):
			suffix = VALUE_SUFFIX
		typ = typ.inner
	return suffix


class TypeResolver:
	def __init__(self, raw: RawSchema, directives: Iterable[OverrideDirective] = ()) -> None:
		self.raw = raw
		self.directives = list(directives)

	def resolve(self) -> Dict[str, TypedField]:
		fields = {name: self._infer(node) for name, node in sorted(self.raw.fields.items())}
		for directive in self._ordered_directives():
			self._apply(fields, directive)
		return fields

	# -- default inference ---------------------------------------------------

	def _infer(self, node: RawField) -> TypedField:
		if node.kind is ContainerKind.RECORD:
			children = {name: self._infer(child) for name, child in sorted(node.children.items())}
			return TypedField(node.name, NamedRef(export_name(node.name)), children=children)
		if node.kind in (ContainerKind.SEQUENCE, ContainerKind.MAPPING):
			wrap = SequenceOf if node.kind is ContainerKind.SEQUENCE else MappingOf
			elem = node.element
			if elem is not None and elem.kind is ContainerKind.RECORD:
				suffix = ITEM_SUFFIX if wrap is SequenceOf else VALUE_SUFFIX
				children = {name: self._infer(child) for name, child in sorted(elem.children.items())}
				return TypedField(node.name, wrap(NamedRef(export_name(node.name) + suffix)), children=children)
			return TypedField(node.name, wrap(STRING))
		return TypedField(node.name, STRING)

	# -- overrides -----------------------------------------------------------

	def _ordered_directives(self) -> List[OverrideDirective]:
		latest: Dict[tuple, OverrideDirective] = {}
		for directive in self.directives:
			previous = latest.get(directive.path)
			if previous is not None:
				logger.warning(
					"@param %s on line %d replaces the one on line %d",
					format_path(directive.path),
					directive.line,
					previous.line,
				)
			latest[directive.path] = directive
		# sorted() is stable: equal depths keep source order.
		return sorted(latest.values(), key=lambda d: len(d.path))

	def _apply(self, fields: Dict[str, TypedField], directive: OverrideDirective) -> None:
		path = directive.path
		level = fields
		for i, seg in enumerate(path[:-1]):
			node = level.get(seg)
			if node is None:
				node = TypedField(seg, NamedRef(export_name(seg)), children={})
				level[seg] = node
			if node.children is None:
				raise OverridePathConflict(path, path[: i + 1], line=directive.line)
			level = node.children
		name = path[-1]
		level[name] = self.field_from_type(name, directive.type)
		logger.debug("override: path=%s type=%s", format_path(path), directive.type)

	@classmethod
	def field_from_type(cls, name: str, typ: TypeExpr) -> TypedField:
		"""Typed field for an explicit type; inline records become placeholders."""
		record = innermost(typ)
		if not isinstance(record, AnonymousRecord):
			return TypedField(name, typ)
		children = {fname: cls.field_from_type(fname, ftype) for fname, ftype in record.fields}
		placeholder = NamedRef(export_name(name) + _container_suffix(typ))
		return TypedField(name, replace_innermost(typ, placeholder), children=children)


def resolve_types(raw: RawSchema, directives: Iterable[OverrideDirective] = ()) -> Dict[str, TypedField]:
	return TypeResolver(raw, directives).resolve()


__all__ = ["ITEM_SUFFIX", "TypeResolver", "VALUE_SUFFIX", "resolve_types"]
