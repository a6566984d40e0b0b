from decimal import Decimal, InvalidOperation

from flask import (
    Blueprint,
    abort,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from sqlalchemy import or_

from invoicing import INVOICES_PATH, db
from invoicing.forms import (
    MAX_AMOUNT,
    AmountField,
    CreateInvoiceForm,
    DeleteForm,
    UpdateInvoiceForm,
    amount_to_minor_units,
)
from invoicing.models import Customer, Invoice
from invoicing.services import invoice_actions
from invoicing.utils.pagination import ListingParams
from invoicing.utils.view_cache import get_view_cache

invoice = Blueprint("invoice", __name__)


def _wants_json():
    best = request.accept_mimetypes.best_match(["text/html", "application/json"])
    return best == "application/json"


def _respond(outcome, form, title):
    """Turn an action outcome into a redirect or a 400 re-render."""
    if isinstance(outcome, invoice_actions.Redirect):
        return redirect(outcome.location)
    if _wants_json():
        return jsonify(outcome.to_dict()), 400
    return (
        render_template(
            "invoices/invoice_form_page.html",
            form=form,
            state=outcome,
            title=title,
        ),
        400,
    )


def _search_cents(search):
    """Return the stored cent value a search term names, if it is an amount."""
    normalised = AmountField.normalise(search)
    if normalised is None:
        return None
    try:
        value = Decimal(normalised)
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite() or not 0 < value <= MAX_AMOUNT:
        return None
    return amount_to_minor_units(value)


def _filtered_invoices(search):
    query = Invoice.query.join(Customer).order_by(Invoice.date.desc())
    if search:
        pattern = f"%{search}%"
        clauses = [
            Customer.name.ilike(pattern),
            Customer.email.ilike(pattern),
            Invoice.status.ilike(pattern),
            Invoice.date.ilike(pattern),
        ]
        cents = _search_cents(search)
        if cents is not None:
            clauses.append(Invoice.amount == cents)
        query = query.filter(or_(*clauses))
    return query


def _listing(pagination):
    """Snapshot a page of invoices as plain data for the view cache."""
    return {
        "invoices": [
            {
                "id": inv.id,
                "customer_id": inv.customer_id,
                "name": inv.customer.name,
                "email": inv.customer.email,
                "image_url": inv.customer.image_url,
                "amount": str(inv.amount_in_major_units),
                "status": inv.status,
                "date": inv.date,
            }
            for inv in pagination.items
        ],
        "page": pagination.page,
        "pages": pagination.pages,
        "total": pagination.total,
        "prev_num": pagination.prev_num,
        "next_num": pagination.next_num,
    }


@invoice.route("/dashboard/invoices")
def view_invoices():
    """Display invoices, newest first."""
    params = ListingParams.from_request()

    def load():
        return _listing(
            _filtered_invoices(params.query).paginate(
                page=params.page, per_page=params.per_page, error_out=False
            )
        )

    listing = get_view_cache().get_or_load(
        load, variant=params.cache_variant, path=INVOICES_PATH
    )
    if _wants_json():
        return jsonify(listing)
    return render_template(
        "invoices/view_invoices.html",
        listing=listing,
        params=params,
        delete_form=DeleteForm(),
    )


@invoice.route("/dashboard/invoices/create", methods=["GET", "POST"])
def create_invoice():
    """Add an invoice."""
    form = CreateInvoiceForm()
    if request.method == "POST":
        outcome = invoice_actions.create_invoice(None, request.form)
        if isinstance(outcome, invoice_actions.Redirect):
            flash("Invoice created successfully!", "success")
        return _respond(outcome, form, "Create Invoice")
    return render_template(
        "invoices/invoice_form_page.html",
        form=form,
        state=None,
        title="Create Invoice",
    )


@invoice.route("/dashboard/invoices/<invoice_id>/edit", methods=["GET", "POST"])
def edit_invoice(invoice_id):
    """Edit an invoice's customer, amount and status."""
    if request.method == "POST":
        form = UpdateInvoiceForm()
        outcome = invoice_actions.update_invoice(invoice_id, None, request.form)
        if isinstance(outcome, invoice_actions.Redirect):
            flash("Invoice updated successfully!", "success")
        return _respond(outcome, form, "Edit Invoice")

    record = db.session.get(Invoice, invoice_id)
    if record is None:
        abort(404)
    form = UpdateInvoiceForm(
        formdata=None,
        data={
            "customer_id": record.customer_id,
            "amount": record.amount_in_major_units,
            "status": record.status,
        },
    )
    return render_template(
        "invoices/invoice_form_page.html",
        form=form,
        state=None,
        title="Edit Invoice",
    )


@invoice.route("/dashboard/invoices/<invoice_id>/delete", methods=["POST"])
def delete_invoice(invoice_id):
    """Delete an invoice."""
    invoice_actions.delete_invoice(invoice_id)
    flash("Invoice deleted.", "success")
    return redirect(url_for("invoice.view_invoices"))
