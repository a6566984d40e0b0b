"""Create, update and delete actions behind the invoice forms.

Each action validates the submitted fields, issues a single write, then
invalidates the cached invoice listing. Actions return an outcome instead of
responding themselves: :class:`Redirect` when the caller should navigate to
the listing, or :class:`FormState` carrying the errors to re-render.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional, Union

from flask import current_app
from sqlalchemy import delete, insert, update
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import MultiDict

from invoicing import INVOICES_PATH, db
from invoicing.forms import (
    CreateInvoiceForm,
    UpdateInvoiceForm,
    amount_to_minor_units,
)
from invoicing.models import Invoice
from invoicing.utils.view_cache import revalidate_path

CREATE_FAILED_MESSAGE = "Missing Fields. Failed to Create Invoice."
EDIT_FAILED_MESSAGE = "Missing Fields. Failed to Edit Invoice."

Revalidate = Callable[[str], None]


class InvoiceActionError(RuntimeError):
    """Raised when an invoice write fails at the database."""


@dataclass
class FormState:
    errors: Dict[str, List[str]] = field(default_factory=dict)
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {"errors": self.errors, "message": self.message}


@dataclass(frozen=True)
class Redirect:
    location: str


ActionOutcome = Union[Redirect, FormState]


def today_iso() -> str:
    """Return the current UTC calendar date as ``YYYY-MM-DD``."""
    return datetime.now(timezone.utc).date().isoformat()


def _as_multidict(formdata):
    if formdata is None or hasattr(formdata, "getlist"):
        return formdata
    return MultiDict(formdata)


def _execute(statement, verb: str, invoice_id: str):
    try:
        result = db.session.execute(statement)
        db.session.commit()
    except (SQLAlchemyError, OverflowError) as exc:
        db.session.rollback()
        current_app.logger.exception(
            "Database error while %s invoice %s", verb, invoice_id
        )
        raise InvoiceActionError(f"There was an error {verb}: {exc}") from exc
    return result


def _validate(form, message: str) -> Optional[FormState]:
    if form.validate():
        return None
    errors = form.field_errors
    current_app.logger.info("Invoice form rejected: %s", sorted(errors))
    return FormState(errors=errors, message=message)


def create_invoice(
    prev_state: Optional[FormState],
    formdata: Mapping,
    *,
    revalidate: Optional[Revalidate] = None,
    today: Optional[date] = None,
) -> ActionOutcome:
    """Validate ``formdata`` and insert a new invoice."""
    form = CreateInvoiceForm(
        formdata=_as_multidict(formdata), meta={"csrf": False}
    )
    failed = _validate(form, CREATE_FAILED_MESSAGE)
    if failed is not None:
        return failed

    invoice_id = str(uuid.uuid4())
    values = {
        "id": invoice_id,
        "customer_id": form.customer_id.data,
        "amount": amount_to_minor_units(form.amount.data),
        "status": form.status.data,
        "date": today.isoformat() if today else today_iso(),
    }
    _execute(
        insert(Invoice.__table__).values(**values), "creating", invoice_id
    )
    current_app.logger.info("Created invoice %s", invoice_id)

    (revalidate or revalidate_path)(INVOICES_PATH)
    return Redirect(INVOICES_PATH)


def update_invoice(
    invoice_id: str,
    prev_state: Optional[FormState],
    formdata: Mapping,
    *,
    revalidate: Optional[Revalidate] = None,
) -> ActionOutcome:
    """Validate ``formdata`` and overwrite the editable invoice fields.

    An id that matches no invoice is not an error.
    """
    form = UpdateInvoiceForm(
        formdata=_as_multidict(formdata), meta={"csrf": False}
    )
    failed = _validate(form, EDIT_FAILED_MESSAGE)
    if failed is not None:
        return failed

    statement = (
        update(Invoice.__table__)
        .where(Invoice.id == invoice_id)
        .values(
            customer_id=form.customer_id.data,
            amount=amount_to_minor_units(form.amount.data),
            status=form.status.data,
        )
    )
    result = _execute(statement, "updating", invoice_id)
    current_app.logger.info(
        "Updated invoice %s (%d rows)", invoice_id, result.rowcount
    )

    (revalidate or revalidate_path)(INVOICES_PATH)
    return Redirect(INVOICES_PATH)


def delete_invoice(
    invoice_id: str, *, revalidate: Optional[Revalidate] = None
) -> None:
    """Delete the invoice with ``invoice_id``; missing ids are ignored."""
    result = _execute(
        delete(Invoice.__table__).where(Invoice.id == invoice_id),
        "deleting",
        invoice_id,
    )
    current_app.logger.info(
        "Deleted invoice %s (%d rows)", invoice_id, result.rowcount
    )

    (revalidate or revalidate_path)(INVOICES_PATH)
