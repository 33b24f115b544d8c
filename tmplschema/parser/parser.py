# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Template parser: lark action grammar + block-structure assembly.

Each `{{ ... }}` action body is parsed on its own with the LALR grammar in
`grammar.lark`; the resulting actions are then stitched into if/range/with/
define trees here, mirroring how Go's parser consumes `else`/`end`. Variable
declarations and function names are validated during assembly, since both
depend on where in the block structure an action sits.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterator, List, Optional, Tuple, Union

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from tmplschema.core.span import Span
from tmplschema.errors import TemplateSyntaxError, UndefinedFunctionError

from .ast import (
	ActionNode,
	BreakNode,
	Command,
	ContinueNode,
	Dot,
	FieldRef,
	Identifier,
	IfNode,
	ListNode,
	Literal,
	Node,
	Operand,
	Paren,
	Pipeline,
	RangeNode,
	Template,
	TemplateNode,
	TextNode,
	VariableRef,
	WithNode,
)
from .lexer import Segment, lex_template

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


class FieldChainPostLex:
	"""
	Re-tag a FIELD token glued to a closing paren as CHAIN.

	`(index .M "k").Name` chains `.Name` onto the parenthesized value while
	`(index .M "k") .Name` passes `.Name` as a separate argument; the basic
	lexer drops whitespace, so adjacency is recovered from token offsets.
	"""

	always_accept = ()

	def process(self, stream):
		prev: Optional[Token] = None
		for token in stream:
			if (
				token.type == "FIELD"
				and prev is not None
				and prev.type == "_RPAR"
				and prev.end_pos == token.start_pos
			):
				token = Token.new_borrow_pos("CHAIN", token.value, token)
			yield token
			prev = token


_ACTION_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="action",
	propagate_positions=True,
	maybe_placeholders=False,
	postlex=FieldChainPostLex(),
)


@dataclass(frozen=True)
class _Action:
	"""One parsed action before block assembly."""

	kind: str
	span: Span
	pipeline: Optional[Pipeline] = None
	name: Optional[str] = None


_Item = Union[TextNode, _Action]

_KEYWORD_LABEL = {
	"else_if": "else if",
	"else_with": "else with",
}


def _label(kind: str) -> str:
	return "{{" + _KEYWORD_LABEL.get(kind, kind) + "}}"


def _syntax_error_from_lark(exc: UnexpectedInput, seg: Segment) -> TemplateSyntaxError:
	line = getattr(exc, "line", None)
	column = getattr(exc, "column", None)
	if isinstance(line, int) and line > 0:
		span = Span(line=line, column=column if isinstance(column, int) and column > 0 else None).shifted(
			seg.span.line or 1, seg.span.column or 1
		)
	else:
		span = seg.span
	if isinstance(exc, UnexpectedCharacters):
		return TemplateSyntaxError(f"unexpected {exc.char!r} in action", span=span)
	if isinstance(exc, UnexpectedToken) and exc.token.type != "$END":
		return TemplateSyntaxError(f"unexpected {str(exc.token)!r} in action", span=span)
	return TemplateSyntaxError("unexpected end of action", span=span)


class _ActionBuilder:
	"""Converts a lark action tree into an `_Action` with AST operands."""

	def __init__(self, seg: Segment, funcs: FrozenSet[str]) -> None:
		self.seg = seg
		self.funcs = funcs

	def _span(self, line: Optional[int], column: Optional[int]) -> Span:
		return Span(line=line, column=column).shifted(self.seg.span.line or 1, self.seg.span.column or 1)

	def _tok_span(self, tok: Token) -> Span:
		return self._span(tok.line, tok.column)

	def _tree_span(self, tree: Tree) -> Span:
		if tree.meta.empty:
			return self.seg.span
		return self._span(tree.meta.line, tree.meta.column)

	def build(self, tree: Tree) -> _Action:
		kind = tree.data[: -len("_action")] if tree.data.endswith("_action") else tree.data
		span = self.seg.span
		pipeline: Optional[Pipeline] = None
		name: Optional[str] = None
		for child in tree.children:
			if isinstance(child, Tree) and child.data == "pipeline":
				pipeline = self._pipeline(child)
			elif isinstance(child, Tree) and child.data == "template_name":
				name = self._template_name(child.children[0])
		return _Action(kind=kind, span=span, pipeline=pipeline, name=name)

	def _template_name(self, tok: Token) -> str:
		if tok.type == "RAW_STRING":
			return tok.value[1:-1]
		try:
			return ast.literal_eval(tok.value)
		except (SyntaxError, ValueError) as exc:
			raise TemplateSyntaxError(f"invalid template name {tok.value}", span=self._tok_span(tok)) from exc

	def _pipeline(self, tree: Tree) -> Pipeline:
		decl: Tuple[str, ...] = ()
		is_assign = False
		cmds: List[Command] = []
		for child in tree.children:
			if child.data == "declaration":
				names = []
				for tok in child.children:
					if tok.type == "VARIABLE":
						if "." in tok.value:
							raise TemplateSyntaxError(
								f"unexpected {tok.value!r} in declaration",
								span=self._tok_span(tok),
							)
						names.append(tok.value)
					elif tok.type == "ASSIGN":
						is_assign = True
				decl = tuple(names)
			else:
				cmds.append(self._command(child))
		return Pipeline(decl=decl, cmds=tuple(cmds), span=self._tree_span(tree), is_assign=is_assign)

	def _command(self, tree: Tree) -> Command:
		args = tuple(self._operand(child) for child in tree.children)
		first = args[0]
		if isinstance(first, Literal) and first.kind == "nil":
			raise TemplateSyntaxError("nil is not a command", span=first.span)
		return Command(args=args, span=self._tree_span(tree))

	def _operand(self, tree: Tree) -> Operand:
		kind = tree.data
		if kind == "paren":
			lpar = tree.children[0]
			inner = self._pipeline(tree.children[1])
			chain: Tuple[str, ...] = ()
			if len(tree.children) > 2:
				chain = tuple(tree.children[2].value[1:].split("."))
			return Paren(pipeline=inner, chain=chain, span=self._tok_span(lpar))
		tok: Token = tree.children[0]
		span = self._tok_span(tok)
		if kind == "field":
			return FieldRef(path=tuple(tok.value[1:].split(".")), span=span)
		if kind == "variable":
			head, *rest = tok.value.split(".")
			return VariableRef(name=head, path=tuple(rest), span=span)
		if kind == "dot":
			return Dot(span=span)
		if kind == "identifier":
			if tok.value not in self.funcs:
				raise UndefinedFunctionError(tok.value, span=span)
			return Identifier(name=tok.value, span=span)
		lit_kind = {
			"string_lit": "string",
			"raw_string_lit": "string",
			"char_lit": "char",
			"number_lit": "number",
			"bool_lit": "bool",
			"nil_lit": "nil",
		}[kind]
		return Literal(kind=lit_kind, text=tok.value, span=span)


def _pipeline_variables(pipe: Pipeline) -> Iterator[VariableRef]:
	for cmd in pipe.cmds:
		for arg in cmd.args:
			if isinstance(arg, VariableRef):
				yield arg
			elif isinstance(arg, Paren):
				yield from _pipeline_variables(arg.pipeline)


class _TreeAssembler:
	"""
	Consumes a flat action stream and produces the nested template tree.

	Tracks the declared-variable stack (`$` always present), the current
	range nesting (for break/continue) and the control depth (define is only
	legal at the top level).
	"""

	def __init__(self, items: List[_Item]) -> None:
		self.items = items
		self.pos = 0
		self.vars: List[str] = ["$"]
		self.range_depth = 0
		self.depth = 0
		self.definitions: dict[str, ListNode] = {}

	def parse(self) -> Template:
		root, _ = self._parse_list(frozenset())
		return Template(root=root, definitions=dict(self.definitions))

	def _parse_list(self, stop: FrozenSet[str]) -> Tuple[ListNode, Optional[_Action]]:
		nodes: List[Node] = []
		start = self.items[self.pos].span if self.pos < len(self.items) else Span()
		while self.pos < len(self.items):
			item = self.items[self.pos]
			self.pos += 1
			if isinstance(item, TextNode):
				nodes.append(item)
				continue
			if item.kind in ("end", "else", "else_if", "else_with"):
				if item.kind in stop:
					return ListNode(nodes=nodes, span=start), item
				raise TemplateSyntaxError(f"unexpected {_label(item.kind)}", span=item.span)
			node = self._parse_item(item)
			if node is not None:
				nodes.append(node)
		return ListNode(nodes=nodes, span=start), None

	def _parse_item(self, item: _Action) -> Optional[Node]:
		kind = item.kind
		if kind == "pipeline":
			assert item.pipeline is not None
			self._check_pipeline(item.pipeline, "command")
			return ActionNode(pipeline=item.pipeline, span=item.span)
		if kind == "if":
			return self._parse_control(item, IfNode)
		if kind == "range":
			return self._parse_control(item, RangeNode)
		if kind == "with":
			return self._parse_control(item, WithNode)
		if kind == "template":
			if item.pipeline is not None:
				self._check_pipeline(item.pipeline, "template")
			return TemplateNode(name=item.name or "", pipeline=item.pipeline, span=item.span)
		if kind == "define":
			if self.depth:
				raise TemplateSyntaxError(f"unexpected {_label('define')} inside a block", span=item.span)
			self._parse_definition(item)
			return None
		if kind == "block":
			assert item.pipeline is not None
			self._check_pipeline(item.pipeline, "block")
			self._parse_definition(item)
			return TemplateNode(name=item.name or "", pipeline=item.pipeline, span=item.span)
		if kind in ("break", "continue"):
			if not self.range_depth:
				raise TemplateSyntaxError(f"{_label(kind)} outside {{{{range}}}}", span=item.span)
			return BreakNode(span=item.span) if kind == "break" else ContinueNode(span=item.span)
		raise TemplateSyntaxError(f"unexpected {_label(kind)}", span=item.span)

	def _parse_definition(self, item: _Action) -> None:
		name = item.name or ""
		saved = (self.vars, self.range_depth)
		self.vars, self.range_depth = ["$"], 0
		self.depth += 1
		body, term = self._parse_list(frozenset({"end"}))
		self.depth -= 1
		self.vars, self.range_depth = saved
		if term is None:
			raise TemplateSyntaxError(f"unexpected EOF: unclosed {_label(item.kind)}", span=item.span)
		if name in self.definitions:
			raise TemplateSyntaxError(f"template: multiple definition of template {name!r}", span=item.span)
		self.definitions[name] = body

	def _parse_control(self, item: _Action, cls: type) -> Node:
		assert item.pipeline is not None
		context = item.kind.replace("else_", "")
		mark = len(self.vars)
		self._check_pipeline(item.pipeline, context)
		stop = {"end", "else"}
		if context == "if":
			stop.add("else_if")
		elif context == "with":
			stop.add("else_with")
		self.depth += 1
		if context == "range":
			self.range_depth += 1
		body, term = self._parse_list(frozenset(stop))
		if context == "range":
			self.range_depth -= 1
		else_body: Optional[ListNode] = None
		if term is None:
			raise TemplateSyntaxError(f"unexpected EOF: unclosed {_label(context)}", span=item.span)
		if term.kind == "else":
			else_body, term = self._parse_list(frozenset({"end"}))
			if term is None:
				raise TemplateSyntaxError(f"unexpected EOF: unclosed {_label(context)}", span=item.span)
		elif term.kind in ("else_if", "else_with"):
			nested = self._parse_control(term, cls)
			else_body = ListNode(nodes=[nested], span=term.span)
		self.depth -= 1
		del self.vars[mark:]
		return cls(pipeline=item.pipeline, body=body, else_body=else_body, span=item.span)

	def _check_pipeline(self, pipe: Pipeline, context: str) -> None:
		if pipe.decl:
			limit = 2 if context == "range" else 1
			if len(pipe.decl) > limit:
				raise TemplateSyntaxError(f"too many declarations in {context}", span=pipe.span)
			if pipe.is_assign:
				for name in pipe.decl:
					if name not in self.vars:
						raise TemplateSyntaxError(f'undefined variable "{name}"', span=pipe.span)
			else:
				self.vars.extend(pipe.decl)
		for ref in _pipeline_variables(pipe):
			if ref.name not in self.vars:
				raise TemplateSyntaxError(f'undefined variable "{ref.name}"', span=ref.span)


def parse_with_registry(source: str, funcs: FrozenSet[str]) -> Template:
	"""
	Parse `source` once against a fixed function registry.

	Raises UndefinedFunctionError for the first call to an unregistered
	function; other problems raise TemplateSyntaxError.
	"""
	items: List[_Item] = []
	for seg in lex_template(source):
		if seg.kind == "text":
			items.append(TextNode(text=seg.text, span=seg.span))
			continue
		if seg.kind == "comment":
			continue
		if not seg.text.strip():
			raise TemplateSyntaxError("missing value for command", span=seg.span)
		try:
			tree = _ACTION_PARSER.parse(seg.text)
		except UnexpectedInput as exc:
			raise _syntax_error_from_lark(exc, seg) from exc
		items.append(_ActionBuilder(seg, funcs).build(tree))
	return _TreeAssembler(items).parse()


__all__ = ["FieldChainPostLex", "parse_with_registry"]
