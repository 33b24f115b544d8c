# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Typed schema: the analyzer's output, handed to an external emitter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

from .type_expr import TypeExpr


@dataclass
class TypedField:
	"""
	A field with its resolved type.

	While `children` is not None the field holds an inline record still
	waiting for extraction: the innermost NamedRef of `type` is the record's
	placeholder name and `children` are its fields. Extraction clears it.
	"""

	name: str
	type: TypeExpr
	children: Optional[Dict[str, "TypedField"]] = None

	def to_dict(self) -> dict[str, object]:
		out: dict[str, object] = {"name": self.name, "type": str(self.type)}
		if self.children is not None:
			out["children"] = {k: v.to_dict() for k, v in sorted(self.children.items())}
		return out


@dataclass(frozen=True)
class NamedType:
	"""A record type lifted out of the field tree; fields sorted by name."""

	name: str
	fields: Dict[str, TypedField] = field(default_factory=dict)

	def to_dict(self) -> dict[str, object]:
		return {"name": self.name, "fields": [f.to_dict() for f in self.fields.values()]}


@dataclass(frozen=True)
class TypedSchema:
	"""
	Result of analyzing one template.

	`requirements` are feature tags the binding needs beyond builtin scalars:
	the package qualifiers of qualified types (e.g. `time` for `time.Time`).
	"""

	fields: Dict[str, TypedField] = field(default_factory=dict)
	named_types: Tuple[NamedType, ...] = ()
	requirements: FrozenSet[str] = frozenset()

	def named_type(self, name: str) -> NamedType:
		for nt in self.named_types:
			if nt.name == name:
				return nt
		raise KeyError(name)

	def to_dict(self) -> dict[str, object]:
		return {
			"fields": [f.to_dict() for f in self.fields.values()],
			"named_types": [nt.to_dict() for nt in self.named_types],
			"requirements": sorted(self.requirements),
		}


__all__ = ["NamedType", "TypedField", "TypedSchema"]
