# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type expressions: the tagged-variant type descriptors shared by `@param`
overrides and inferred fields.

Examples (as written in a directive → value):
- `int`                          -> NamedRef("int")
- `time.Time`                    -> NamedRef("time.Time")
- `*string`                      -> OptionalOf(NamedRef("string"))
- `[]string`                     -> SequenceOf(NamedRef("string"))
- `map[string]int`               -> MappingOf(NamedRef("int"))
- `struct{ID int64; Title string}` -> AnonymousRecord((("ID", ...), ("Title", ...)))

`str()` renders the directive form back, so values can be logged and
serialized without a separate printer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterator, Optional, Tuple


class TypeExpr:
	"""Base of all type-expression variants."""

	__slots__ = ()


@dataclass(frozen=True)
class NamedRef(TypeExpr):
	"""A scalar, a qualified external type, or a generated record name."""

	name: str

	@property
	def qualifier(self) -> Optional[str]:
		"""Package part of a qualified name (`time` for `time.Time`)."""
		if "." not in self.name:
			return None
		return self.name.rsplit(".", 1)[0]

	def __str__(self) -> str:
		return self.name


@dataclass(frozen=True)
class OptionalOf(TypeExpr):
	inner: TypeExpr

	def __str__(self) -> str:
		return f"*{self.inner}"


@dataclass(frozen=True)
class SequenceOf(TypeExpr):
	inner: TypeExpr

	def __str__(self) -> str:
		return f"[]{self.inner}"


@dataclass(frozen=True)
class MappingOf(TypeExpr):
	"""String-keyed mapping; only the value type varies."""

	inner: TypeExpr

	def __str__(self) -> str:
		return f"map[string]{self.inner}"


@dataclass(frozen=True)
class AnonymousRecord(TypeExpr):
	fields: Tuple[Tuple[str, TypeExpr], ...] = ()

	def __str__(self) -> str:
		body = "; ".join(f"{name} {typ}" for name, typ in self.fields)
		return f"struct{{{body}}}"


# Every inferred leaf shares this descriptor.
STRING = NamedRef("string")

SCALAR_NAMES: FrozenSet[str] = frozenset(
	{
		"string",
		"bool",
		"int",
		"int8",
		"int16",
		"int32",
		"int64",
		"uint",
		"uint8",
		"uint16",
		"uint32",
		"uint64",
		"float32",
		"float64",
		"byte",
		"rune",
		"any",
	}
)

_WRAPPERS = (OptionalOf, SequenceOf, MappingOf)


def innermost(typ: TypeExpr) -> TypeExpr:
	"""Follow optional/sequence/mapping wrappers down to the element type."""
	while isinstance(typ, _WRAPPERS):
		typ = typ.inner
	return typ


def replace_innermost(typ: TypeExpr, new: TypeExpr) -> TypeExpr:
	if isinstance(typ, _WRAPPERS):
		return type(typ)(replace_innermost(typ.inner, new))
	return new


def iter_named(typ: TypeExpr) -> Iterator[NamedRef]:
	"""Yield every NamedRef inside `typ`, including record fields."""
	if isinstance(typ, NamedRef):
		yield typ
	elif isinstance(typ, _WRAPPERS):
		yield from iter_named(typ.inner)
	elif isinstance(typ, AnonymousRecord):
		for _, field_type in typ.fields:
			yield from iter_named(field_type)


__all__ = [
	"AnonymousRecord",
	"MappingOf",
	"NamedRef",
	"OptionalOf",
	"SCALAR_NAMES",
	"STRING",
	"SequenceOf",
	"TypeExpr",
	"innermost",
	"iter_named",
	"replace_innermost",
]
