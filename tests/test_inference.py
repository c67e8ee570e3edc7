import pytest

from template_forms.inference import humanize, infer_type, is_price_like, is_quantity_like
from template_forms.models import FieldType


@pytest.mark.parametrize(
    "name,expected",
    [
        ("client_email", FieldType.EMAIL),
        ("invoice_date", FieldType.DATE),
        ("DueDate", FieldType.DATE),
        ("unit_price", FieldType.NUMBER),
        ("tax_amount", FieldType.NUMBER),
        ("grand_total", FieldType.NUMBER),
        ("quantity", FieldType.NUMBER),
        ("qty", FieldType.NUMBER),
        ("item_count", FieldType.NUMBER),
        ("hourly_rate", FieldType.NUMBER),
        ("hours", FieldType.NUMBER),
        ("number", FieldType.NUMBER),
        ("description", FieldType.STRING),
        ("client_name", FieldType.STRING),
        ("", FieldType.STRING),
    ],
)
def test_infer_type(name, expected):
    assert infer_type(name) is expected


def test_email_rule_precedes_date_rule():
    assert infer_type("email_date") is FieldType.EMAIL
    assert infer_type("date_email") is FieldType.EMAIL


def test_date_rule_precedes_number_rule():
    assert infer_type("total_date") is FieldType.DATE
    assert infer_type("update_count") is FieldType.DATE


@pytest.mark.parametrize("name", ["invoice_number", "phone_number", "order_no", "client_id", "tax_code"])
def test_reference_codes_are_strings(name):
    assert infer_type(name) is FieldType.STRING


def test_inference_is_independent_of_call_order():
    names = ["unit_price", "email_date", "invoice_number", "notes", "qty"]
    first = [infer_type(n) for n in names]
    second = [infer_type(n) for n in reversed(names)][::-1]
    assert first == second


def test_humanize():
    assert humanize("unit_price") == "Unit Price"
    assert humanize("invoice_number") == "Invoice Number"
    assert humanize("notes") == "Notes"


def test_quantity_and_price_classification():
    assert is_quantity_like("quantity")
    assert is_quantity_like("hours")
    assert not is_quantity_like("unit_price")
    assert is_price_like("unit_price")
    assert is_price_like("hourly_rate")
    assert not is_price_like("description")
