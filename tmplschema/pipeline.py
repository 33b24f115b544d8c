# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
End-to-end analysis: template source → TypedSchema.

	parse → collect references → build raw schema
	      → parse directives → resolve types → extract named types

Each stage is a pure function of its inputs, so independent units can be
analyzed concurrently.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional

from tmplschema.config import AnalyzerOptions
from tmplschema.core.diagnostics import Diagnostic
from tmplschema.errors import TemplateError
from tmplschema.infer import build_schema, collect_references
from tmplschema.parser import parse_template
from tmplschema.typed import TypedSchema, extract_named_types, parse_directives, resolve_types

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateUnit:
	"""One template to analyze; `name` and `group` are opaque labels."""

	name: str
	source: str
	group: Optional[str] = None


@dataclass(frozen=True)
class UnitResult:
	unit: TemplateUnit
	schema: Optional[TypedSchema] = None
	error: Optional[TemplateError] = None

	@property
	def ok(self) -> bool:
		return self.error is None

	def diagnostic(self) -> Optional[Diagnostic]:
		if self.error is None:
			return None
		return self.error.to_diagnostic(self.unit.name)


def analyze(source: str, options: Optional[AnalyzerOptions] = None) -> TypedSchema:
	"""Analyze one template source; raises TemplateError subclasses."""
	opts = options or AnalyzerOptions()
	template = parse_template(source, known_funcs=opts.known_funcs, max_unknown_funcs=opts.max_unknown_funcs)
	raw = build_schema(collect_references(template))
	directives = parse_directives(source)
	return extract_named_types(resolve_types(raw, directives))


def analyze_unit(unit: TemplateUnit, options: Optional[AnalyzerOptions] = None) -> UnitResult:
	"""Analyze one unit; analysis failures are returned, not raised."""
	try:
		schema = analyze(unit.source, options)
	except TemplateError as exc:
		logger.info("unit %s failed: %s", unit.name, exc.message)
		return UnitResult(unit=unit, error=exc)
	logger.debug("unit %s: fields=%d named_types=%d", unit.name, len(schema.fields), len(schema.named_types))
	return UnitResult(unit=unit, schema=schema)


def analyze_units(
	units: Iterable[TemplateUnit],
	options: Optional[AnalyzerOptions] = None,
	jobs: int = 1,
) -> List[UnitResult]:
	"""Analyze many units; results keep input order."""
	todo = list(units)
	if jobs <= 1 or len(todo) <= 1:
		return [analyze_unit(unit, options) for unit in todo]
	with ThreadPoolExecutor(max_workers=jobs) as executor:
		return list(executor.map(lambda unit: analyze_unit(unit, options), todo))


__all__ = ["TemplateUnit", "UnitResult", "analyze", "analyze_unit", "analyze_units"]
