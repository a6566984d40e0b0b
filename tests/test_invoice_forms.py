from decimal import Decimal

import pytest
from werkzeug.datastructures import MultiDict

from invoicing.forms import (
    AMOUNT_MESSAGE,
    CUSTOMER_MESSAGE,
    MAX_AMOUNT,
    MAX_AMOUNT_CENTS,
    STATUS_MESSAGE,
    AmountField,
    CreateInvoiceForm,
    UpdateInvoiceForm,
    amount_to_minor_units,
)


def build_form(form_class, **data):
    return form_class(formdata=MultiDict(data), meta={"csrf": False})


def test_valid_fields_are_typed(app, customer):
    form = build_form(
        CreateInvoiceForm, customer_id=customer, amount="19.99", status="paid"
    )
    assert form.validate()
    assert form.customer_id.data == customer
    assert form.amount.data == Decimal("19.99")
    assert form.status.data == "paid"


@pytest.mark.parametrize("amount", ["0", "-5", "0.00", "", "abc", "NaN", "Infinity"])
def test_amount_must_be_positive_number(app, customer, amount):
    form = build_form(
        CreateInvoiceForm, customer_id=customer, amount=amount, status="pending"
    )
    assert not form.validate()
    assert form.field_errors == {"amount": [AMOUNT_MESSAGE]}


def test_missing_amount_reports_amount_message(app, customer):
    form = build_form(CreateInvoiceForm, customer_id=customer, status="pending")
    assert not form.validate()
    assert form.field_errors["amount"] == [AMOUNT_MESSAGE]


def test_missing_customer_is_rejected(app):
    form = build_form(CreateInvoiceForm, amount="10", status="paid")
    assert not form.validate()
    assert form.field_errors == {"customer_id": [CUSTOMER_MESSAGE]}


def test_unknown_customer_is_rejected(app, customer):
    form = build_form(
        CreateInvoiceForm, customer_id="missing", amount="10", status="paid"
    )
    assert not form.validate()
    assert form.field_errors == {"customer_id": [CUSTOMER_MESSAGE]}


@pytest.mark.parametrize("status", ["", "overdue", "PAID"])
def test_status_must_be_pending_or_paid(app, customer, status):
    form = build_form(
        UpdateInvoiceForm, customer_id=customer, amount="10", status=status
    )
    assert not form.validate()
    assert form.field_errors == {"status": [STATUS_MESSAGE]}


def test_every_failing_field_is_reported(app):
    form = build_form(CreateInvoiceForm)
    assert not form.validate()
    assert form.field_errors == {
        "customer_id": [CUSTOMER_MESSAGE],
        "amount": [AMOUNT_MESSAGE],
        "status": [STATUS_MESSAGE],
    }


def test_create_and_update_forms_share_rules(app, customer):
    data = {"customer_id": customer, "amount": "-1", "status": "void"}
    create_form = build_form(CreateInvoiceForm, **data)
    update_form = build_form(UpdateInvoiceForm, **data)
    assert not create_form.validate()
    assert not update_form.validate()
    assert create_form.field_errors == update_form.field_errors


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("$1,234.50", "1234.50"),
        ("1 234,50", "1234.50"),
        ("12,5", "12.5"),
        ("(3.00)", "-3.00"),
        ("  42 ", "42"),
        ("$", None),
    ],
)
def test_amount_field_normalises_formatted_input(raw, expected):
    assert AmountField.normalise(raw) == expected


def test_formatted_amount_validates(app, customer):
    form = build_form(
        CreateInvoiceForm, customer_id=customer, amount="$1,234.50", status="paid"
    )
    assert form.validate()
    assert form.amount.data == Decimal("1234.50")


@pytest.mark.parametrize(
    "amount, cents",
    [
        (Decimal("19.99"), 1999),
        (Decimal("0.01"), 1),
        (Decimal("100"), 10000),
        (Decimal("2.345"), 235),
    ],
)
def test_amount_to_minor_units(amount, cents):
    assert amount_to_minor_units(amount) == cents


@pytest.mark.parametrize(
    "amount", ["1e30", "100000000000000000000", "21474836.48", "99999999"]
)
def test_amount_above_storable_maximum_is_rejected(app, customer, amount):
    form = build_form(
        CreateInvoiceForm, customer_id=customer, amount=amount, status="pending"
    )
    assert not form.validate()
    assert form.field_errors == {"amount": [AMOUNT_MESSAGE]}


def test_largest_storable_amount_is_accepted(app, customer):
    form = build_form(
        CreateInvoiceForm, customer_id=customer, amount=str(MAX_AMOUNT), status="paid"
    )
    assert form.validate()
    assert amount_to_minor_units(form.amount.data) == MAX_AMOUNT_CENTS
