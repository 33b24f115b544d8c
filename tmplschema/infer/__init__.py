# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Usage inference: who references which field, and what shape that implies.
"""

from .collector import ReferenceCollector, Scope, collect_references
from .model import ContainerKind, RawField, RawSchema, UsageKind, UsageObservation
from .schema_builder import build_schema

__all__ = [
	"ContainerKind",
	"RawField",
	"RawSchema",
	"ReferenceCollector",
	"Scope",
	"UsageKind",
	"UsageObservation",
	"build_schema",
	"collect_references",
]
