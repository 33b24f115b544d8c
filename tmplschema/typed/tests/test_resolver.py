import logging

import pytest

from tmplschema.errors import OverridePathConflict
from tmplschema.infer import RawSchema, build_schema, collect_references
from tmplschema.parser import parse_template
from tmplschema.typed import (
	STRING,
	MappingOf,
	NamedRef,
	OptionalOf,
	SequenceOf,
	TypeResolver,
	parse_directives,
	parse_type_expr,
	resolve_types,
)


def _struct(body: str):
	return parse_type_expr("struct{%s}" % body)


def _resolve(src: str):
	raw = build_schema(collect_references(parse_template(src)))
	return resolve_types(raw, parse_directives(src))


def test_default_inference():
	fields = _resolve(
		"{{ .User.Name }}{{ .Message }}"
		"{{ range .Items }}{{ .Title }}{{ end }}"
		"{{ range .Tags }}{{ . }}{{ end }}"
		"{{ range $k, $v := .Users }}{{ $v.Email }}{{ end }}"
		'{{ index .Meta "env" }}'
	)
	assert fields["Message"].type == STRING
	assert fields["Message"].children is None
	assert fields["User"].type == NamedRef("User")
	assert fields["User"].children["Name"].type == STRING
	assert fields["Items"].type == SequenceOf(NamedRef("ItemsItem"))
	assert set(fields["Items"].children) == {"Title"}
	assert fields["Tags"].type == SequenceOf(STRING)
	assert fields["Tags"].children is None
	assert fields["Users"].type == MappingOf(NamedRef("UsersValue"))
	assert set(fields["Users"].children) == {"Email"}
	assert fields["Meta"].type == MappingOf(STRING)


def test_placeholder_names_are_exported():
	fields = _resolve("{{ .user.name }}{{ range .items }}{{ .id }}{{ end }}")
	assert fields["user"].type == NamedRef("User")
	assert fields["items"].type == SequenceOf(NamedRef("ItemsItem"))


def test_scalar_override():
	fields = _resolve("{{/* @param User.Age int */}}{{ .User.Age }}{{ .User.Name }}")
	assert fields["User"].children["Age"].type == NamedRef("int")
	assert fields["User"].children["Name"].type == STRING


def test_struct_override_replaces_inferred_children():
	src = "{{/* @param Items []struct{ID int64; Title string} */}}{{ range .Items }}{{ .Title }}{{ .Extra }}{{ end }}"
	items = _resolve(src)["Items"]
	assert items.type == SequenceOf(NamedRef("ItemsItem"))
	assert {name: f.type for name, f in items.children.items()} == {"ID": NamedRef("int64"), "Title": STRING}


def test_ancestor_override_keeps_descendant_override():
	src = "{{/* @param User.Age int */}}\n{{/* @param User struct{Name string} */}}\n{{ .User.Name }}"
	user = _resolve(src)["User"]
	assert {name: f.type for name, f in user.children.items()} == {"Name": STRING, "Age": NamedRef("int")}


def test_override_creates_missing_intermediate_records():
	fields = _resolve("{{/* @param Order.Customer.Since time.Time */}}")
	customer = fields["Order"].children["Customer"]
	assert fields["Order"].type == NamedRef("Order")
	assert customer.type == NamedRef("Customer")
	assert customer.children["Since"].type == NamedRef("time.Time")


def test_override_through_sequence_element():
	fields = _resolve("{{/* @param Items.Price float64 */}}{{ range .Items }}{{ .Price }}{{ .Name }}{{ end }}")
	assert fields["Items"].children["Price"].type == NamedRef("float64")


def test_inline_records_through_containers():
	assert TypeResolver.field_from_type("Labels", MappingOf(_struct("X int"))).type == MappingOf(
		NamedRef("LabelsValue")
	)
	owner = TypeResolver.field_from_type("owner", OptionalOf(_struct("Name string")))
	assert owner.type == OptionalOf(NamedRef("Owner"))
	assert set(owner.children) == {"Name"}


def test_override_below_inferred_scalar_conflicts():
	with pytest.raises(OverridePathConflict) as exc:
		_resolve("{{/* @param Message.Length int */}}{{ .Message }}")
	assert exc.value.path == ("Message", "Length")
	assert exc.value.blocker == ("Message",)
	assert exc.value.span.line == 1


def test_override_below_overridden_scalar_conflicts():
	with pytest.raises(OverridePathConflict):
		_resolve("{{/* @param A int */}}{{/* @param A.B int */}}")


def test_override_below_scalar_sequence_conflicts():
	with pytest.raises(OverridePathConflict) as exc:
		_resolve("{{/* @param Tags.Name string */}}{{ range .Tags }}{{ . }}{{ end }}")
	assert exc.value.blocker == ("Tags",)


def test_later_directive_for_same_path_wins(caplog):
	src = "{{/* @param Count int */}}\n{{/* @param Count int64 */}}\n{{ .Count }}"
	with caplog.at_level(logging.WARNING, logger="tmplschema.typed.resolver"):
		fields = _resolve(src)
	assert fields["Count"].type == NamedRef("int64")
	assert "replaces the one on line 1" in caplog.text


def test_resolve_empty_schema():
	assert resolve_types(RawSchema()) == {}
