import pytest

from template_forms.builder import parse_template
from template_forms.config import Settings
from template_forms.errors import (
    DerivedFieldError,
    FormStateError,
    RowIndexError,
    SchemaInvalidError,
    UnknownFieldError,
)
from template_forms.examples import example_schema
from template_forms.form import FormSession, FormState, find_derived_totals
from template_forms.models import ArrayField, FormSchema

from conftest import SIMPLE_TEMPLATE


@pytest.fixture
def session():
    return FormSession(parse_template(SIMPLE_TEMPLATE))


def _fill_rows(s, rows):
    for description, qty, price in rows:
        i = s.add_row("items")
        s.set_row_value("items", i, "description", description)
        s.set_row_value("items", i, "quantity", qty)
        s.set_row_value("items", i, "unit_price", price)


def test_new_session_is_populated_with_initial_values(session):
    assert session.state is FormState.POPULATED
    assert session.snapshot() == {"invoice_number": "", "invoice_date": "", "items": [], "grand_total": 0}


def test_session_without_schema_is_empty():
    s = FormSession()
    assert s.state is FormState.EMPTY
    with pytest.raises(FormStateError):
        s.add_row("items")
    with pytest.raises(FormStateError):
        s.schema


def test_add_row_uses_type_defaults(session):
    assert session.add_row("items") == 0
    assert session.state is FormState.EDITING
    assert session.get_value("items") == [{"description": "", "quantity": 0, "unit_price": 0, "total": 0}]


def test_add_then_remove_leaves_no_rows(session):
    i = session.add_row("items")
    session.remove_row("items", i)
    assert session.row_count("items") == 0
    assert session.get_value("grand_total") == 0


def test_row_and_grand_totals(session):
    _fill_rows(session, [("Design", "3", "2.5"), ("Build", 2, 5)])
    rows = session.get_value("items")
    assert rows[0]["total"] == 7.5
    assert rows[1]["total"] == 10
    assert session.get_value("grand_total") == 17.5


def test_totals_follow_every_edit(session):
    _fill_rows(session, [("Design", 3, 2.5), ("Build", 2, 5)])
    session.set_row_value("items", 1, "quantity", 4)
    assert session.get_value("grand_total") == 27.5
    session.remove_row("items", 0)
    assert session.get_value("grand_total") == 20


def test_non_numeric_input_counts_as_zero_in_totals(session):
    _fill_rows(session, [("Design", "abc", 2.5)])
    assert session.get_value("items")[0]["quantity"] == "abc"
    assert session.get_value("items")[0]["total"] == 0


def test_remove_row_out_of_range_leaves_state_untouched(session):
    _fill_rows(session, [("Design", 3, 2.5)])
    before = session.snapshot()
    state = session.state
    for bad in (1, -1, 7):
        with pytest.raises(RowIndexError):
            session.remove_row("items", bad)
    assert session.snapshot() == before
    assert session.state is state


def test_unknown_fields_and_arrays(session):
    with pytest.raises(UnknownFieldError):
        session.set_value("nope", 1)
    with pytest.raises(UnknownFieldError):
        session.add_row("rows")
    session.add_row("items")
    with pytest.raises(UnknownFieldError):
        session.set_row_value("items", 0, "nope", 1)


def test_derived_fields_are_read_only():
    s = FormSession(example_schema("simple"))
    s.add_row("items")
    with pytest.raises(DerivedFieldError):
        s.set_value("grand_total", 100)
    with pytest.raises(DerivedFieldError):
        s.set_row_value("items", 0, "total", 100)


def test_find_derived_totals():
    d = find_derived_totals(example_schema("simple"))
    assert (d.array, d.quantity_field, d.price_field, d.row_total_field, d.grand_total_field) == (
        "items",
        "quantity",
        "unit_price",
        "total",
        "grand_total",
    )
    assert find_derived_totals(example_schema("service")) is None
    assert find_derived_totals(example_schema("service"), Settings(derived_array="services")).price_field == "hourly_rate"


def test_no_derived_totals_without_price_column():
    s = FormSession(parse_template("{{#each items}}{{description}}{{quantity}}{{/each}}"))
    s.add_row("items")
    assert s.derived is None
    assert "total" not in s.get_value("items")[0]


def test_invalid_schema_is_refused():
    with pytest.raises(SchemaInvalidError):
        FormSession(FormSchema(arrays=(ArrayField(name="items"),)))


def test_submit_rejects_invalid_values_and_returns_to_editing(session):
    session.add_row("items")
    calls = []
    result = session.submit(calls.append)
    assert result.accepted is False
    assert result.errors["invoice_number"] == ["Invoice Number is required"]
    assert result.errors["items[0].description"] == ["Description is required"]
    assert session.state is FormState.EDITING
    assert calls == []


def test_submit_accepts_valid_values(session):
    session.set_value("invoice_number", "INV-001")
    session.set_value("invoice_date", "2024-03-01")
    _fill_rows(session, [("Design", 3, 2.5), ("Build", 2, 5)])
    calls = []
    result = session.submit(calls.append)
    assert result.accepted is True
    assert result.values["grand_total"] == 17.5
    assert calls == [result.values]
    assert calls[0] is not result.values
    assert session.state is FormState.SUBMITTED


def test_submitted_session_is_frozen_until_reloaded(session):
    session.set_value("invoice_number", "INV-001")
    session.set_value("invoice_date", "2024-03-01")
    assert session.submit().accepted
    with pytest.raises(FormStateError):
        session.set_value("invoice_number", "INV-002")
    with pytest.raises(FormStateError):
        session.submit()
    session.load(parse_template("{{a}}"))
    assert session.state is FormState.POPULATED
    assert session.snapshot() == {"a": ""}


def test_load_while_editing_is_refused(session):
    session.add_row("items")
    with pytest.raises(FormStateError):
        session.load(parse_template("{{a}}"))
    session.reset()
    assert session.state is FormState.EMPTY
    session.load(parse_template("{{a}}"))
    assert session.state is FormState.POPULATED


def test_render_describes_fields_and_arrays():
    s = FormSession(parse_template(SIMPLE_TEMPLATE))
    s.add_row("items")
    view = s.render()
    assert view["state"] == "editing"
    assert [f["name"] for f in view["fields"]] == ["invoice_number", "invoice_date"]
    items = view["arrays"][0]
    assert (items["name"], items["label"], items["rows"]) == ("items", "Items", 1)
    columns = {c["name"]: c for c in items["columns"]}
    assert columns["description"]["widget"] == "textarea"
    assert columns["total"]["widget"] == "readonly"
    assert columns["total"]["derived"] is True
    assert columns["quantity"]["derived"] is False


def test_non_finite_quantity_is_rejected_on_submit(session):
    session.set_value("invoice_number", "INV-001")
    session.set_value("invoice_date", "2024-03-01")
    _fill_rows(session, [("Design", float("inf"), 2.5)])
    assert session.get_value("items")[0]["total"] == 0
    assert session.get_value("grand_total") == 0
    calls = []
    result = session.submit(calls.append)
    assert result.accepted is False
    assert result.errors == {"items[0].quantity": ["Quantity must be a number"]}
    assert calls == []
