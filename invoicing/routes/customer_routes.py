from flask import Blueprint, jsonify

from invoicing.models import Customer

customer = Blueprint("customer", __name__)


@customer.route("/dashboard/customers")
def view_customers():
    """Return customers for the invoice form's customer picker."""
    customers = Customer.query.order_by(Customer.name).all()
    return jsonify(
        [
            {"id": c.id, "name": c.name, "email": c.email}
            for c in customers
        ]
    )
