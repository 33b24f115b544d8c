# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Usage observations and the raw (untyped) schema tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional

from tmplschema.core.paths import FieldPath
from tmplschema.core.span import Span


class UsageKind(Enum):
	"""How a field was used at one reference site."""

	LEAF = auto()  # {{ .Foo }}
	ITERATE_SEQUENCE = auto()  # {{ range .Foo }}
	ITERATE_MAPPING = auto()  # {{ range $k, $v := .Foo }}
	INDEX = auto()  # {{ index .Foo "key" }}
	SCOPE_ENTRY = auto()  # {{ with .Foo }} / {{ if .Foo }}


@dataclass(frozen=True)
class UsageObservation:
	path: FieldPath
	kind: UsageKind
	span: Span = field(default_factory=Span, compare=False)


class ContainerKind(Enum):
	"""Inferred container shape; precedence is MAPPING > SEQUENCE > RECORD > SCALAR."""

	SCALAR = auto()
	RECORD = auto()
	SEQUENCE = auto()
	MAPPING = auto()


@dataclass
class RawField:
	"""
	Node of the inferred schema tree.

	RECORD nodes own `children`; SEQUENCE/MAPPING nodes own exactly one
	`element`, which is itself a SCALAR or RECORD node.
	"""

	name: str
	kind: ContainerKind
	children: Dict[str, "RawField"] = field(default_factory=dict)
	element: Optional["RawField"] = None


@dataclass
class RawSchema:
	"""Top-level fields of the template's data."""

	fields: Dict[str, RawField] = field(default_factory=dict)


__all__ = ["ContainerKind", "RawField", "RawSchema", "UsageKind", "UsageObservation"]
