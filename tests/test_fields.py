import datetime as dt

import pytest

from template_forms.form.fields import as_number, check_value, coerce_value, describe_field, initial_value
from template_forms.models import FieldDefinition, FieldValidation


def _f(name, type="string", **kw):
    return FieldDefinition(name=name, type=type, **kw)


def test_describe_string_field():
    d = describe_field(_f("client_name"))
    assert d == {
        "name": "client_name",
        "label": "Client Name",
        "type": "string",
        "widget": "input",
        "inputType": "text",
        "required": True,
        "placeholder": "Enter Client Name",
    }


@pytest.mark.parametrize("name", ["description", "notes", "client_address"])
def test_long_text_fields_render_as_textarea(name):
    d = describe_field(_f(name))
    assert d["widget"] == "textarea"
    assert d["rows"] == 3


def test_number_field_widget():
    d = describe_field(_f("unit_price", "number", validation=FieldValidation(min=0, max=100)))
    assert (d["inputType"], d["step"], d["min"], d["max"]) == ("number", "0.01", 0, 100)
    assert d["widget"] == "input"


def test_email_field_carries_pattern():
    d = describe_field(_f("client_email", "email"))
    assert d["inputType"] == "email"
    assert "@" in d["pattern"]


def test_explicit_placeholder_wins():
    assert describe_field(_f("a", placeholder="e.g. 42"))["placeholder"] == "e.g. 42"


@pytest.mark.parametrize(
    "raw,expected",
    [("3", 3), (" 2.5 ", 2.5), ("-1", -1), ("", ""), ("abc", "abc"), ("inf", "inf"), (4, 4), (True, True)],
)
def test_number_coercion(raw, expected):
    out = coerce_value(_f("qty", "number"), raw)
    assert out == expected
    assert type(out) is type(expected)


def test_text_and_date_coercion():
    assert coerce_value(_f("name"), None) == ""
    assert coerce_value(_f("name"), 12) == "12"
    assert coerce_value(_f("due_date", "date"), dt.date(2024, 1, 31)) == "2024-01-31"
    assert coerce_value(_f("due_date", "date"), " 2024-01-31 ") == "2024-01-31"


def test_initial_values():
    assert initial_value(_f("qty", "number")) == 0
    assert initial_value(_f("name")) == ""
    assert initial_value(_f("due_date", "date")) == ""


def test_as_number_treats_non_numbers_as_zero():
    assert as_number(2.5) == 2.5
    assert as_number("") == 0
    assert as_number("abc") == 0
    assert as_number(True) == 0


def test_required_blank_values():
    assert check_value(_f("client_name"), "  ") == ["Client Name is required"]
    assert check_value(_f("client_name", required=False), "") == []
    assert check_value(_f("qty", "number"), None) == ["Qty is required"]


def test_number_checks():
    f = _f("qty", "number", validation=FieldValidation(min=1, max=10))
    assert check_value(f, 5) == []
    assert check_value(f, 0) == ["Must be at least 1"]
    assert check_value(f, 11) == ["Must be no more than 10"]
    assert check_value(f, "abc") == ["Qty must be a number"]


def test_date_and_email_checks():
    assert check_value(_f("due_date", "date"), "2024-02-30") == ["Due Date must be a date (YYYY-MM-DD)"]
    assert check_value(_f("due_date", "date"), "2024-02-29") == []
    assert check_value(_f("client_email", "email"), "a@b.co") == []
    assert check_value(_f("client_email", "email"), "not-an-email") == ["Invalid email address"]


def test_pattern_check_uses_custom_message():
    f = _f("po", validation=FieldValidation(pattern=r"^PO-\d+$", message="Use PO-<digits>"))
    assert check_value(f, "PO-12") == []
    assert check_value(f, "12") == ["Use PO-<digits>"]
    g = _f("po", validation=FieldValidation(pattern=r"^PO-\d+$"))
    assert check_value(g, "12") == ["Invalid format"]


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_numbers_are_not_numbers(value):
    assert check_value(_f("qty", "number"), value) == ["Qty must be a number"]
    assert as_number(value) == 0
