from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from flask_wtf import FlaskForm
from wtforms import DecimalField, RadioField, SelectField, SubmitField
from wtforms.validators import AnyOf, DataRequired, ValidationError

from invoicing import db
from invoicing.models import INVOICE_STATUSES, Customer

CUSTOMER_MESSAGE = "Please select a customer."
AMOUNT_MESSAGE = "Please enter an amount greater than $0."
STATUS_MESSAGE = "Please select an invoice status."

# Largest amount whose cent value fits a signed 32-bit INTEGER column.
MAX_AMOUNT_CENTS = 2**31 - 1
MAX_AMOUNT = Decimal(MAX_AMOUNT_CENTS) / 100

INVOICE_STATUS_CHOICES = [(status, status.title()) for status in INVOICE_STATUSES]


class AmountField(DecimalField):
    """Decimal field that accepts formatted monetary input.

    Users enter values such as ``"1,234.50"`` or ``"$1 234,50"``. Those are
    normalised into something :class:`decimal.Decimal` understands. Input that
    still cannot be parsed leaves ``data`` as ``None`` instead of raising, so
    the single amount message from :class:`GreaterThan` is the only error the
    field reports.
    """

    _CURRENCY_SYMBOLS = "$€£¥"

    def __init__(self, *args, render_kw=None, **kwargs):
        render_kw = dict(render_kw or {})
        render_kw.setdefault("inputmode", "decimal")
        super().__init__(*args, render_kw=render_kw, **kwargs)

    @classmethod
    def normalise(cls, text):
        """Return a plain numeric string for formatted monetary input."""

        if text is None:
            return None
        cleaned = str(text).strip()

        negative = False
        if cleaned.startswith("(") and cleaned.endswith(")"):
            negative = True
            cleaned = cleaned[1:-1].strip()

        while cleaned and cleaned[0] in cls._CURRENCY_SYMBOLS:
            cleaned = cleaned[1:].lstrip()
        while cleaned and cleaned[-1] in cls._CURRENCY_SYMBOLS:
            cleaned = cleaned[:-1].rstrip()
        if not cleaned:
            return None

        cleaned = cleaned.replace("\u00a0", " ")

        decimal_is_comma = False
        if "," in cleaned and "." in cleaned:
            decimal_is_comma = cleaned.rfind(".") < cleaned.rfind(",")
        elif "," in cleaned:
            fractional_length = len(cleaned) - cleaned.rfind(",") - 1
            decimal_is_comma = 0 < fractional_length <= 2

        cleaned = cleaned.replace("_", "").replace(" ", "")
        if decimal_is_comma:
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")

        if negative:
            cleaned = f"-{cleaned}"
        return cleaned or None

    def process_formdata(self, valuelist):
        self.data = None
        if not valuelist:
            return
        self.raw_data = valuelist
        normalised = self.normalise(valuelist[0])
        if normalised is None:
            return
        try:
            value = Decimal(normalised)
        except (InvalidOperation, ValueError):
            return
        # NaN and Infinity parse but are not amounts.
        if value.is_finite():
            self.data = value


class GreaterThan:
    """Validate that the field holds a number strictly greater than ``minimum``.

    An optional inclusive ``maximum`` rejects values too large to store.
    """

    def __init__(self, minimum, maximum=None, message=None):
        self.minimum = minimum
        self.maximum = maximum
        self.message = message

    def __call__(self, form, field):
        if field.data is None or not field.data > self.minimum:
            raise ValidationError(
                self.message or f"Number must be greater than {self.minimum}."
            )
        if self.maximum is not None and field.data > self.maximum:
            raise ValidationError(
                self.message or f"Number must be at most {self.maximum}."
            )


def customer_exists(form, field):
    """Reject customer ids that do not resolve to a stored customer."""
    if db.session.get(Customer, field.data) is None:
        raise ValidationError(CUSTOMER_MESSAGE)


class InvoiceForm(FlaskForm):
    """Caller-supplied invoice fields; ``id`` and ``date`` are server-assigned."""

    customer_id = SelectField(
        "Customer",
        validate_choice=False,
        validators=[DataRequired(message=CUSTOMER_MESSAGE), customer_exists],
    )
    amount = AmountField(
        "Amount",
        places=2,
        validators=[GreaterThan(0, maximum=MAX_AMOUNT, message=AMOUNT_MESSAGE)],
    )
    status = RadioField(
        "Status",
        choices=INVOICE_STATUS_CHOICES,
        validate_choice=False,
        validators=[AnyOf(INVOICE_STATUSES, message=STATUS_MESSAGE)],
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.customer_id.choices = [("", "Select a customer")] + [
            (c.id, c.name) for c in Customer.query.order_by(Customer.name).all()
        ]

    @property
    def field_errors(self):
        """Return per-field errors for the invoice fields only."""
        return {
            name: list(messages)
            for name, messages in self.errors.items()
            if name in ("customer_id", "amount", "status")
        }


class CreateInvoiceForm(InvoiceForm):
    submit = SubmitField("Create Invoice")


class UpdateInvoiceForm(InvoiceForm):
    submit = SubmitField("Edit Invoice")


class DeleteForm(FlaskForm):
    """Simple form used for CSRF protection on delete actions."""

    submit = SubmitField("Delete")


def amount_to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to integer cents, rounding half up."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
