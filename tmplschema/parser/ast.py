# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Template syntax tree.

Mirrors the shape of Go's text/template parse tree closely enough for usage
analysis: control nodes keep their governing pipeline plus primary and
alternate bodies; operands keep their field chains as tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from tmplschema.core.span import Span


# ---------------------------------------------------------------------------
# Operands and pipelines
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldRef:
	"""`.A.B`: field chain relative to the current dot."""

	path: Tuple[str, ...]
	span: Span


@dataclass(frozen=True)
class VariableRef:
	"""`$x.A.B`; `name` includes the `$` and is `"$"` for the root variable."""

	name: str
	path: Tuple[str, ...]
	span: Span


@dataclass(frozen=True)
class Dot:
	span: Span


@dataclass(frozen=True)
class Identifier:
	"""A function name in call position."""

	name: str
	span: Span


@dataclass(frozen=True)
class Literal:
	"""String, raw string, char, number, bool or nil constant."""

	kind: str
	text: str
	span: Span


@dataclass(frozen=True)
class Paren:
	"""`(pipeline)` optionally followed by a field chain: `(index .M "k").Name`."""

	pipeline: "Pipeline"
	chain: Tuple[str, ...]
	span: Span


Operand = Union[FieldRef, VariableRef, Dot, Identifier, Literal, Paren]


@dataclass(frozen=True)
class Command:
	args: Tuple[Operand, ...]
	span: Span


@dataclass(frozen=True)
class Pipeline:
	"""
	A pipeline with optional variable declaration.

	`decl` holds declared (or assigned, when `is_assign`) variable names in
	source order: `range $k, $v := .M` → ("$k", "$v").
	"""

	decl: Tuple[str, ...]
	cmds: Tuple[Command, ...]
	span: Span
	is_assign: bool = False


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class Node:
	span: Span


@dataclass
class ListNode(Node):
	nodes: List[Node] = field(default_factory=list)
	span: Span = field(default_factory=Span)


@dataclass
class TextNode(Node):
	text: str
	span: Span


@dataclass
class ActionNode(Node):
	"""`{{ pipeline }}`: output (or declaration) action."""

	pipeline: Pipeline
	span: Span


@dataclass
class BranchNode(Node):
	"""Common shape of if/range/with: governing pipeline plus two bodies."""

	pipeline: Pipeline
	body: ListNode
	else_body: Optional[ListNode]
	span: Span


@dataclass
class IfNode(BranchNode):
	pass


@dataclass
class RangeNode(BranchNode):
	pass


@dataclass
class WithNode(BranchNode):
	pass


@dataclass
class TemplateNode(Node):
	"""`{{template "name" pipeline}}` (also produced by `block`)."""

	name: str
	pipeline: Optional[Pipeline]
	span: Span


@dataclass
class BreakNode(Node):
	span: Span


@dataclass
class ContinueNode(Node):
	span: Span


@dataclass
class Template:
	"""Parsed template: the root list plus `define`/`block` bodies by name."""

	root: ListNode
	definitions: Dict[str, ListNode] = field(default_factory=dict)
	# Functions the parser had to register as placeholders to get here.
	placeholder_funcs: Tuple[str, ...] = ()


__all__ = [
	"ActionNode",
	"BranchNode",
	"BreakNode",
	"Command",
	"ContinueNode",
	"Dot",
	"FieldRef",
	"Identifier",
	"IfNode",
	"ListNode",
	"Literal",
	"Node",
	"Operand",
	"Paren",
	"Pipeline",
	"RangeNode",
	"Template",
	"TemplateNode",
	"TextNode",
	"VariableRef",
	"WithNode",
]
