from tmplschema.infer import ContainerKind, UsageKind, UsageObservation, build_schema, collect_references
from tmplschema.infer.schema_builder import PathInfo, aggregate, determine_kind
from tmplschema.parser import parse_template


def _obs(path: str, kind: UsageKind) -> UsageObservation:
	return UsageObservation(path=tuple(path.split(".")), kind=kind)


def _schema(src: str):
	return build_schema(collect_references(parse_template(src)))


def test_kind_precedence():
	assert determine_kind(PathInfo({UsageKind.LEAF})) is ContainerKind.SCALAR
	assert determine_kind(PathInfo({UsageKind.SCOPE_ENTRY})) is ContainerKind.SCALAR
	assert determine_kind(PathInfo(set(), has_descendant=True)) is ContainerKind.RECORD
	assert determine_kind(PathInfo({UsageKind.LEAF, UsageKind.ITERATE_SEQUENCE})) is ContainerKind.SEQUENCE
	assert determine_kind(PathInfo({UsageKind.ITERATE_SEQUENCE}, has_descendant=True)) is ContainerKind.SEQUENCE
	assert determine_kind(PathInfo({UsageKind.ITERATE_SEQUENCE, UsageKind.INDEX})) is ContainerKind.MAPPING
	assert determine_kind(PathInfo({UsageKind.ITERATE_MAPPING})) is ContainerKind.MAPPING


def test_aggregate_synthesizes_ancestors():
	info = aggregate([_obs("A.B.C", UsageKind.LEAF)])
	assert set(info) == {("A",), ("A", "B"), ("A", "B", "C")}
	assert info[("A",)].usages == set()
	assert info[("A",)].has_descendant
	assert not info[("A", "B", "C")].has_descendant


def test_aggregate_ignores_root_path():
	assert aggregate([UsageObservation(path=(), kind=UsageKind.LEAF)]) == {}


def test_records_and_scalars():
	schema = _schema("{{ .User.Name }} {{ .Message }}")
	assert set(schema.fields) == {"User", "Message"}
	user = schema.fields["User"]
	assert user.kind is ContainerKind.RECORD
	assert user.children["Name"].kind is ContainerKind.SCALAR
	assert schema.fields["Message"].kind is ContainerKind.SCALAR


def test_nested_record_chain():
	schema = _schema("{{ .User.Address.City }}")
	address = schema.fields["User"].children["Address"]
	assert address.kind is ContainerKind.RECORD
	assert address.children["City"].kind is ContainerKind.SCALAR


def test_existence_check_alone_stays_scalar():
	schema = _schema("{{ if .Flag }}yes{{ end }}{{ with .User }}{{ .Name }}{{ end }}")
	assert schema.fields["Flag"].kind is ContainerKind.SCALAR
	assert schema.fields["User"].kind is ContainerKind.RECORD


def test_sequence_elements():
	schema = _schema(
		"{{ range .Items }}{{ .Title }}{{ .ID }}{{ end }}"
		"{{ range .Empty }}{{ end }}"
		"{{ range .Tags }}{{ . }}{{ end }}"
	)
	items = schema.fields["Items"]
	assert items.kind is ContainerKind.SEQUENCE
	assert items.element.kind is ContainerKind.RECORD
	assert set(items.element.children) == {"ID", "Title"}
	assert schema.fields["Empty"].element.kind is ContainerKind.SCALAR
	assert schema.fields["Tags"].element.kind is ContainerKind.SCALAR


def test_nested_sequences_inside_elements():
	schema = _schema("{{ range .Orders }}{{ range .Lines }}{{ .SKU }}{{ end }}{{ end }}")
	lines = schema.fields["Orders"].element.children["Lines"]
	assert lines.kind is ContainerKind.SEQUENCE
	assert set(lines.element.children) == {"SKU"}


def test_index_mapping_has_scalar_values():
	schema = _schema('{{ index .Meta "env" }}')
	meta = schema.fields["Meta"]
	assert meta.kind is ContainerKind.MAPPING
	assert meta.element.kind is ContainerKind.SCALAR


def test_references_below_index_only_mapping_are_dropped():
	schema = _schema('{{ index .Meta "env" }}{{ .Meta.Foo.Bar }}')
	meta = schema.fields["Meta"]
	assert meta.kind is ContainerKind.MAPPING
	assert meta.element.kind is ContainerKind.SCALAR
	assert meta.element.children == {}


def test_mapping_values_via_loop_variable():
	record = _schema("{{ range $k, $v := .Users }}{{ $k }}{{ $v.Name }}{{ end }}").fields["Users"]
	assert record.kind is ContainerKind.MAPPING
	assert record.element.kind is ContainerKind.RECORD
	assert set(record.element.children) == {"Name"}

	plain = _schema("{{ range $k, $v := .Users }}{{ $k }}={{ $v }}{{ end }}").fields["Users"]
	assert plain.kind is ContainerKind.MAPPING
	assert plain.element.kind is ContainerKind.SCALAR


def test_leaf_and_iteration_on_same_path():
	schema = _schema("{{ .Items }}{{ range .Items }}{{ end }}")
	assert schema.fields["Items"].kind is ContainerKind.SEQUENCE


def test_observation_order_does_not_matter():
	observations = [
		_obs("Items", UsageKind.ITERATE_SEQUENCE),
		_obs("Items.Title", UsageKind.LEAF),
		_obs("User.Address.City", UsageKind.LEAF),
		_obs("Meta", UsageKind.INDEX),
	]
	assert build_schema(observations) == build_schema(list(reversed(observations)))
