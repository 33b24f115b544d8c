# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
tmplschema: infer the data schema a Go text/template expects.

	>>> schema = analyze("{{ .User.Name }} {{ range .Items }}{{ .Title }}{{ end }}")
	>>> [f.name for f in schema.fields.values()]
	['Items', 'User']
"""

from tmplschema.config import AnalyzerOptions, options_from_env
from tmplschema.errors import (
	DirectiveSyntaxError,
	OverridePathConflict,
	TemplateError,
	TemplateSyntaxError,
	UndefinedFunctionError,
)
from tmplschema.pipeline import TemplateUnit, UnitResult, analyze, analyze_unit, analyze_units
from tmplschema.typed import NamedType, TypedField, TypedSchema

__all__ = [
	"AnalyzerOptions",
	"DirectiveSyntaxError",
	"NamedType",
	"OverridePathConflict",
	"TemplateError",
	"TemplateSyntaxError",
	"TemplateUnit",
	"TypedField",
	"TypedSchema",
	"UndefinedFunctionError",
	"UnitResult",
	"analyze",
	"analyze_unit",
	"analyze_units",
	"options_from_env",
]
