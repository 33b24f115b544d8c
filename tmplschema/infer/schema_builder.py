# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Schema builder: usage observations → raw schema tree.

Observations are grouped per path; each path's container kind is then
decided by a fixed precedence over what was observed:

	MAPPING  if iterated with two variables or used with `index`
	SEQUENCE if iterated with one variable (or none)
	RECORD   if any longer path runs through it
	SCALAR   otherwise (including a bare if/with existence check)

Paths are assembled shortest-first so every parent exists before its
children. Below a sequence, children attach to the element record. Below a
mapping, children attach to the value record only when the mapping was
ranged over with `$k, $v` (the `$v.Name` case); references below an
index-only mapping are dropped, since `.Meta.Foo.Bar` addresses the key
`Foo` rather than a field.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Set

from tmplschema.core.paths import FieldPath, format_path

from .model import ContainerKind, RawField, RawSchema, UsageKind, UsageObservation

logger = logging.getLogger(__name__)


@dataclass
class PathInfo:
	"""Aggregated usage of one path."""

	usages: Set[UsageKind] = field(default_factory=set)
	has_descendant: bool = False


def determine_kind(info: PathInfo) -> ContainerKind:
	if UsageKind.ITERATE_MAPPING in info.usages or UsageKind.INDEX in info.usages:
		return ContainerKind.MAPPING
	if UsageKind.ITERATE_SEQUENCE in info.usages:
		return ContainerKind.SEQUENCE
	if info.has_descendant:
		return ContainerKind.RECORD
	return ContainerKind.SCALAR


def aggregate(observations: Iterable[UsageObservation]) -> Dict[FieldPath, PathInfo]:
	"""Group usages by path, synthesizing every missing ancestor path."""
	info: Dict[FieldPath, PathInfo] = {}
	for obs in observations:
		if not obs.path:
			continue
		info.setdefault(obs.path, PathInfo()).usages.add(obs.kind)
	for path in list(info):
		for i in range(1, len(path)):
			info.setdefault(path[:i], PathInfo()).has_descendant = True
	return info


class SchemaBuilder:
	def __init__(self, info: Dict[FieldPath, PathInfo]) -> None:
		self.info = info
		self.kinds = {path: determine_kind(pi) for path, pi in info.items()}

	def build(self) -> RawSchema:
		schema = RawSchema()
		for path in sorted(self.info, key=lambda p: (len(p), p)):
			pi = self.info[path]
			logger.debug(
				"pathinfo: path=%s usages=%s hasChild=%s kind=%s",
				format_path(path),
				",".join(sorted(u.name.lower() for u in pi.usages)),
				pi.has_descendant,
				self.kinds[path].name,
			)
			if len(path) == 1:
				schema.fields.setdefault(path[0], self._create_field(path))
			else:
				self._insert(schema, path)
		logger.debug("schema: fields=%d", len(schema.fields))
		return schema

	def _element_kind(self, path: FieldPath, kind: ContainerKind) -> ContainerKind:
		pi = self.info[path]
		if not pi.has_descendant:
			return ContainerKind.SCALAR
		if kind is ContainerKind.MAPPING and UsageKind.ITERATE_MAPPING not in pi.usages:
			return ContainerKind.SCALAR
		return ContainerKind.RECORD

	def _create_field(self, path: FieldPath) -> RawField:
		name = path[-1]
		kind = self.kinds[path]
		node = RawField(name=name, kind=kind)
		if kind in (ContainerKind.SEQUENCE, ContainerKind.MAPPING):
			node.element = RawField(name=name, kind=self._element_kind(path, kind))
		return node

	def _insert(self, schema: RawSchema, path: FieldPath) -> None:
		cur = schema.fields.get(path[0])
		for i in range(1, len(path)):
			if cur is None:
				return
			host = cur.element if cur.element is not None else cur
			if host.kind is not ContainerKind.RECORD:
				logger.debug(
					"schema: dropping %s (no field access below %s value)",
					format_path(path),
					format_path(path[:i]),
				)
				return
			seg = path[i]
			if i == len(path) - 1:
				host.children.setdefault(seg, self._create_field(path))
			else:
				cur = host.children.get(seg)


def build_schema(observations: Iterable[UsageObservation]) -> RawSchema:
	return SchemaBuilder(aggregate(observations)).build()


__all__ = ["PathInfo", "SchemaBuilder", "aggregate", "build_schema", "determine_kind"]
