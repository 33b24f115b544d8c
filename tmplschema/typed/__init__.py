# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from .directives import OverrideDirective, TypeExprError, parse_directives, parse_type_expr
from .extractor import NamedTypeExtractor, extract_named_types
from .resolver import TypeResolver, resolve_types
from .schema import NamedType, TypedField, TypedSchema
from .type_expr import (
	STRING,
	AnonymousRecord,
	MappingOf,
	NamedRef,
	OptionalOf,
	SequenceOf,
	TypeExpr,
)

__all__ = [
	"AnonymousRecord",
	"MappingOf",
	"NamedRef",
	"NamedType",
	"NamedTypeExtractor",
	"OptionalOf",
	"OverrideDirective",
	"STRING",
	"SequenceOf",
	"TypeExpr",
	"TypeExprError",
	"TypeResolver",
	"TypedField",
	"TypedSchema",
	"extract_named_types",
	"parse_directives",
	"parse_type_expr",
	"resolve_types",
]
