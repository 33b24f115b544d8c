# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reference collector: template tree → flat list of usage observations.

The walk threads an immutable `Scope` value instead of mutating a shared
"current dot", so each branch of if/with/range sees exactly the scope it
should, with no save/restore bookkeeping:

- `{{ .A.B }}` in scope S observes S+[A, B] as LEAF.
- `{{ if .A }}` observes S+[A] as SCOPE_ENTRY (plus LEAF); both branches
  keep S.
- `{{ with .A }}` observes SCOPE_ENTRY; the body runs in S+[A], the else
  branch in S.
- `{{ range .A }}` observes ITERATE_SEQUENCE (ITERATE_MAPPING with two loop
  variables); the body runs in S+[A] (the element), the else branch in S.
- `{{ index .A "k" }}` observes S+[A] as INDEX.

Loop and declared variables are bound to the path they denote, so `$v.Name`
resolves like `.Name` in the element scope.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import FrozenSet, List, Optional, Tuple

from tmplschema.core.paths import ROOT, FieldPath, format_path
from tmplschema.parser.ast import (
	ActionNode,
	Dot,
	FieldRef,
	Identifier,
	IfNode,
	ListNode,
	Node,
	Operand,
	Paren,
	Pipeline,
	RangeNode,
	Template,
	TemplateNode,
	VariableRef,
	WithNode,
)
from tmplschema.parser.funcs import INDEX_FUNC

from .model import UsageKind, UsageObservation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scope:
	"""
	Resolution context for bare and variable references.

	`dot` is None when the current value is not a field of the template data
	(e.g. inside `with printf ...`); references relative to it are ignored.
	Variables map to the path they denote, or None when unknown (range keys,
	results of function calls).
	"""

	dot: Optional[FieldPath]
	variables: Tuple[Tuple[str, Optional[FieldPath]], ...] = (("$", ROOT),)
	expanding: FrozenSet[str] = frozenset()

	@classmethod
	def root(cls) -> "Scope":
		return cls(dot=ROOT)

	def at(self, dot: Optional[FieldPath]) -> "Scope":
		return replace(self, dot=dot)

	def bind(self, name: str, path: Optional[FieldPath]) -> "Scope":
		return replace(self, variables=self.variables + ((name, path),))

	def lookup(self, name: str) -> Optional[FieldPath]:
		for bound, path in reversed(self.variables):
			if bound == name:
				return path
		return None


class ReferenceCollector:
	"""Walks one parsed template; `collect()` may be called repeatedly."""

	def __init__(self, template: Template) -> None:
		self.template = template

	def collect(self) -> List[UsageObservation]:
		out: List[UsageObservation] = []
		self._walk_list(self.template.root, Scope.root(), out)
		logger.debug("ref: count=%d", len(out))
		return out

	# -- traversal -----------------------------------------------------------

	def _walk_list(self, lst: Optional[ListNode], scope: Scope, out: List[UsageObservation]) -> None:
		if lst is None:
			return
		for node in lst.nodes:
			# Declarations stay visible to later siblings only.
			scope = self._walk(node, scope, out)

	def _walk(self, node: Node, scope: Scope, out: List[UsageObservation]) -> Scope:
		if isinstance(node, ActionNode):
			pipe = node.pipeline
			self._observe_pipeline(pipe, scope, out)
			if pipe.decl:
				target = self._resolve_single(pipe, scope)
				for name in pipe.decl:
					scope = scope.bind(name, target)
			return scope
		if isinstance(node, IfNode):
			self._walk_if(node, scope, out)
		elif isinstance(node, WithNode):
			self._walk_with(node, scope, out)
		elif isinstance(node, RangeNode):
			self._walk_range(node, scope, out)
		elif isinstance(node, TemplateNode):
			self._walk_template_call(node, scope, out)
		return scope

	def _walk_if(self, node: IfNode, scope: Scope, out: List[UsageObservation]) -> None:
		target = self._resolve_single(node.pipeline, scope)
		if target:
			self._emit(out, target, UsageKind.SCOPE_ENTRY, node)
		self._observe_pipeline(node.pipeline, scope, out)
		inner = scope
		for name in node.pipeline.decl:
			inner = inner.bind(name, target)
		self._walk_list(node.body, inner, out)
		self._walk_list(node.else_body, inner, out)

	def _walk_with(self, node: WithNode, scope: Scope, out: List[UsageObservation]) -> None:
		target = self._resolve_single(node.pipeline, scope)
		if target is None:
			self._observe_pipeline(node.pipeline, scope, out)
		elif target:
			self._emit(out, target, UsageKind.SCOPE_ENTRY, node)
		body_scope = scope.at(target)
		else_scope = scope
		for name in node.pipeline.decl:
			body_scope = body_scope.bind(name, target)
			else_scope = else_scope.bind(name, target)
		self._walk_list(node.body, body_scope, out)
		self._walk_list(node.else_body, else_scope, out)

	def _walk_range(self, node: RangeNode, scope: Scope, out: List[UsageObservation]) -> None:
		pipe = node.pipeline
		target = self._resolve_single(pipe, scope)
		element: Optional[FieldPath] = None
		if target is None:
			self._observe_pipeline(pipe, scope, out)
		elif target:
			kind = UsageKind.ITERATE_MAPPING if len(pipe.decl) == 2 else UsageKind.ITERATE_SEQUENCE
			self._emit(out, target, kind, node)
			element = target
		body_scope = scope.at(element)
		if len(pipe.decl) == 2:
			body_scope = body_scope.bind(pipe.decl[0], None).bind(pipe.decl[1], element)
		elif pipe.decl:
			body_scope = body_scope.bind(pipe.decl[0], element)
		self._walk_list(node.body, body_scope, out)
		self._walk_list(node.else_body, scope, out)

	def _walk_template_call(self, node: TemplateNode, scope: Scope, out: List[UsageObservation]) -> None:
		target: Optional[FieldPath] = None
		if node.pipeline is not None:
			target = self._resolve_single(node.pipeline, scope)
			if target is None:
				self._observe_pipeline(node.pipeline, scope, out)
			elif target:
				self._emit(out, target, UsageKind.SCOPE_ENTRY, node)
		body = self.template.definitions.get(node.name)
		if body is None or node.name in scope.expanding:
			return
		# `$` inside a named template is the value passed to it.
		inner = Scope(dot=target, variables=(("$", target),), expanding=scope.expanding | {node.name})
		self._walk_list(body, inner, out)

	# -- pipelines -----------------------------------------------------------

	def _observe_pipeline(self, pipe: Pipeline, scope: Scope, out: List[UsageObservation]) -> None:
		for cmd in pipe.cmds:
			args = cmd.args
			rest = args
			head = args[0]
			if isinstance(head, Identifier) and head.name == INDEX_FUNC and len(args) >= 2:
				target = self._resolve_operand(args[1], scope)
				if target:
					self._emit(out, target, UsageKind.INDEX, args[1])
				else:
					self._observe_operand(args[1], scope, out)
				rest = args[2:]
			for arg in rest:
				self._observe_operand(arg, scope, out)

	def _observe_operand(self, arg: Operand, scope: Scope, out: List[UsageObservation]) -> None:
		if isinstance(arg, (FieldRef, VariableRef)) and arg.path:
			path = self._resolve_operand(arg, scope)
			if path:
				self._emit(out, path, UsageKind.LEAF, arg)
		elif isinstance(arg, Paren):
			self._observe_pipeline(arg.pipeline, scope, out)

	def _resolve_single(self, pipe: Pipeline, scope: Scope) -> Optional[FieldPath]:
		"""Path named by a pipeline that is exactly one reference, else None."""
		if len(pipe.cmds) != 1 or len(pipe.cmds[0].args) != 1:
			return None
		return self._resolve_operand(pipe.cmds[0].args[0], scope)

	@staticmethod
	def _resolve_operand(arg: Operand, scope: Scope) -> Optional[FieldPath]:
		if isinstance(arg, FieldRef):
			return None if scope.dot is None else scope.dot + arg.path
		if isinstance(arg, VariableRef):
			base = scope.lookup(arg.name)
			return None if base is None else base + arg.path
		if isinstance(arg, Dot):
			return scope.dot
		return None

	@staticmethod
	def _emit(out: List[UsageObservation], path: FieldPath, kind: UsageKind, at: object) -> None:
		span = getattr(at, "span", None)
		obs = UsageObservation(path=path, kind=kind) if span is None else UsageObservation(path=path, kind=kind, span=span)
		logger.debug("ref: path=%s usage=%s at=%s", format_path(path), kind.name.lower(), obs.span)
		out.append(obs)


def collect_references(template: Template) -> List[UsageObservation]:
	return ReferenceCollector(template).collect()


__all__ = ["ReferenceCollector", "Scope", "collect_references"]
