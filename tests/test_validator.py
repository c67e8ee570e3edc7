from template_forms.builder import parse_template
from template_forms.models import ArrayField, FieldDefinition, FieldValidation, FormSchema
from template_forms.validator import validate_schema

from conftest import SIMPLE_TEMPLATE


def _schema(fields=(), arrays=()):
    return FormSchema(fields=tuple(fields), arrays=tuple(arrays))


def test_parsed_schema_is_valid():
    result = validate_schema(parse_template(SIMPLE_TEMPLATE))
    assert result.valid is True
    assert result.errors == []
    assert result.warnings == []


def test_empty_schema_is_invalid():
    result = validate_schema(FormSchema())
    assert result.valid is False
    assert "Schema is empty: no fields or arrays" in result.errors


def test_array_without_items_is_invalid():
    result = validate_schema(_schema(arrays=[ArrayField(name="items")]))
    assert result.valid is False
    assert result.errors == ["Array field 'items' must have at least one item field"]


def test_unknown_field_type_is_reported():
    result = validate_schema(_schema([FieldDefinition(name="due", type="datetime")]))
    assert result.valid is False
    assert result.errors == ["Invalid field type for 'due' in root: datetime"]


def test_invalid_names_are_reported():
    result = validate_schema(
        _schema(
            [FieldDefinition(name="first name")],
            [ArrayField(name="line-items", items=(FieldDefinition(name="qty", type="number"),))],
        )
    )
    assert result.valid is False
    assert any("Invalid field name 'first name'" in e for e in result.errors)
    assert any("Invalid array name 'line-items'" in e for e in result.errors)


def test_duplicate_names_are_reported_once_per_scope():
    a = FieldDefinition(name="a")
    result = validate_schema(
        _schema([a, a, a], [ArrayField(name="rows", items=(FieldDefinition(name="x"), FieldDefinition(name="x")))])
    )
    assert result.errors == [
        "Duplicate field name 'x' in array 'rows'",
        "Duplicate field name 'a' in root",
    ]


def test_array_name_colliding_with_root_field_is_a_duplicate():
    result = validate_schema(
        _schema([FieldDefinition(name="items")], [ArrayField(name="items", items=(FieldDefinition(name="x"),))])
    )
    assert result.errors == ["Duplicate field name 'items' in root"]


def test_bad_pattern_and_inverted_bounds():
    result = validate_schema(
        _schema(
            [
                FieldDefinition(name="code", validation=FieldValidation(pattern="[a-z")),
                FieldDefinition(name="qty", type="number", validation=FieldValidation(min=10, max=1)),
            ]
        )
    )
    assert result.valid is False
    assert len(result.errors) == 2
    assert result.errors[0].startswith("Invalid validation pattern for 'code' in root")
    assert result.errors[1] == "Validation min (10) exceeds max (1) for 'qty' in root"


def test_name_reused_at_root_and_in_array_only_warns():
    schema = parse_template("{{description}} {{#each items}}{{description}}{{/each}}")
    result = validate_schema(schema)
    assert result.valid is True
    assert result.warnings == [
        "Field 'description' appears both at root and in array 'items'; they are treated as separate fields"
    ]


def test_key_name_mismatch_is_reported():
    schema = _schema([FieldDefinition(name="client_name")])
    result = validate_schema(schema, keys=[("customer", "client_name")])
    assert result.errors == ["Field stored under key 'customer' is named 'client_name'"]


def test_validation_is_pure():
    schema = _schema(arrays=[ArrayField(name="items")])
    assert validate_schema(schema) == validate_schema(schema)


def test_result_to_dict():
    assert validate_schema(parse_template("{{a}}")).to_dict() == {"valid": True, "errors": [], "warnings": []}
