# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Reference collection: which paths a template touches, and how."""

from tmplschema.infer import Scope, UsageKind, collect_references
from tmplschema.parser import parse_template

LEAF = UsageKind.LEAF
SEQ = UsageKind.ITERATE_SEQUENCE
MAP = UsageKind.ITERATE_MAPPING
INDEX = UsageKind.INDEX
ENTRY = UsageKind.SCOPE_ENTRY


def _refs(src: str) -> set:
	return {(".".join(o.path), o.kind) for o in collect_references(parse_template(src))}


def test_bare_references():
	assert _refs("{{ .User.Name }} {{ .Message }}") == {("User.Name", LEAF), ("Message", LEAF)}


def test_root_dot_produces_nothing():
	assert _refs("{{ . }}{{ if . }}x{{ end }}") == set()


def test_if_is_an_existence_check_without_scope_shift():
	assert _refs("{{ if .Flag }}{{ .Name }}{{ else }}{{ .Other }}{{ end }}") == {
		("Flag", ENTRY),
		("Flag", LEAF),
		("Name", LEAF),
		("Other", LEAF),
	}


def test_if_with_compound_condition():
	assert _refs("{{ if and .A (not .B) }}x{{ end }}") == {("A", LEAF), ("B", LEAF)}


def test_with_shifts_scope_for_body_only():
	assert _refs("{{ with .User }}{{ .Name }}{{ else }}{{ .Message }}{{ end }}") == {
		("User", ENTRY),
		("User.Name", LEAF),
		("Message", LEAF),
	}


def test_with_on_call_result_leaves_dot_unknown():
	assert _refs('{{ with printf "%s" .A }}{{ .B }}{{ end }}{{ .C }}') == {("A", LEAF), ("C", LEAF)}


def test_range_sequence():
	assert _refs("{{ range .Items }}{{ .Title }}{{ .ID }}{{ else }}{{ .Empty }}{{ end }}") == {
		("Items", SEQ),
		("Items.Title", LEAF),
		("Items.ID", LEAF),
		("Empty", LEAF),
	}


def test_range_with_key_and_value_variables():
	assert _refs("{{ range $k, $v := .Users }}{{ $k }}: {{ $v.Name }}{{ end }}") == {
		("Users", MAP),
		("Users.Name", LEAF),
	}


def test_range_with_single_variable():
	assert _refs("{{ range $it := .Items }}{{ $it.Title }}{{ end }}") == {
		("Items", SEQ),
		("Items.Title", LEAF),
	}


def test_index_marks_mapping():
	assert _refs('{{ index .Meta "env" }}{{ index .Labels .Key }}') == {
		("Meta", INDEX),
		("Labels", INDEX),
		("Key", LEAF),
	}


def test_root_variable_escapes_scope():
	assert _refs("{{ range .Items }}{{ $.Title }}{{ .Name }}{{ end }}") == {
		("Items", SEQ),
		("Title", LEAF),
		("Items.Name", LEAF),
	}


def test_range_over_current_dot():
	assert _refs("{{ with .Items }}{{ range . }}{{ .X }}{{ end }}{{ end }}") == {
		("Items", ENTRY),
		("Items", SEQ),
		("Items.X", LEAF),
	}


def test_declared_variable_binds_to_path():
	assert _refs("{{ $u := .User }}{{ $u.Name }}") == {("User", LEAF), ("User.Name", LEAF)}
	assert _refs("{{ with $u := .User }}{{ $u.Email }}{{ end }}") == {("User", ENTRY), ("User.Email", LEAF)}


def test_parenthesized_arguments_are_observed():
	assert _refs('{{ printf "%s" (upper .Name) }}') == {("Name", LEAF)}


def test_named_template_is_expanded_with_argument_as_dot():
	src = '{{ define "user" }}{{ .Name }}{{ $.Email }}{{ end }}{{ template "user" .Owner }}'
	assert _refs(src) == {("Owner", ENTRY), ("Owner.Name", LEAF), ("Owner.Email", LEAF)}


def test_uncalled_definitions_are_ignored():
	assert _refs('{{ define "unused" }}{{ .Ghost }}{{ end }}{{ .Real }}') == {("Real", LEAF)}


def test_recursive_template_terminates():
	src = '{{ define "t" }}{{ .X }}{{ template "t" . }}{{ end }}{{ template "t" .A }}'
	assert _refs(src) == {("A", ENTRY), ("A.X", LEAF)}


def test_block_walks_its_body():
	assert _refs('{{ block "body" .Page }}{{ .Title }}{{ end }}') == {("Page", ENTRY), ("Page.Title", LEAF)}


def test_observations_carry_positions():
	(obs,) = collect_references(parse_template("line1\n  {{ .User }}"))
	assert obs.span.line == 2
	assert obs.span.column == 6


def test_scope_lookup_prefers_latest_binding():
	scope = Scope.root().bind("$x", ("A",)).bind("$x", ("B",))
	assert scope.lookup("$x") == ("B",)
	assert scope.lookup("$") == ()
	assert scope.lookup("$missing") is None
