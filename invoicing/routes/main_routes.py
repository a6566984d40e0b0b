from flask import Blueprint, redirect, url_for

main = Blueprint("main", __name__)


@main.route("/")
def home():
    """Send visitors to the invoice listing."""
    return redirect(url_for("invoice.view_invoices"))
