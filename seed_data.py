from datetime import date

from invoicing import create_app, db
from invoicing.models import Customer, Invoice

CUSTOMERS = [
    {
        "id": "3958dc9e-712f-4377-85e9-fec4b6a6442a",
        "name": "Delba de Oliveira",
        "email": "delba@oliveira.com",
        "image_url": "/customers/delba-de-oliveira.png",
    },
    {
        "id": "3958dc9e-742f-4377-85e9-fec4b6a6442a",
        "name": "Lee Robinson",
        "email": "lee@robinson.com",
        "image_url": "/customers/lee-robinson.png",
    },
    {
        "id": "3958dc9e-737f-4377-85e9-fec4b6a6442a",
        "name": "Hector Simpson",
        "email": "hector@simpson.com",
        "image_url": "/customers/hector-simpson.png",
    },
]

INVOICES = [
    (CUSTOMERS[0]["id"], 15795, "pending", date(2022, 12, 6)),
    (CUSTOMERS[1]["id"], 20348, "pending", date(2022, 11, 14)),
    (CUSTOMERS[2]["id"], 3040, "paid", date(2022, 10, 29)),
    (CUSTOMERS[0]["id"], 44800, "paid", date(2023, 9, 10)),
    (CUSTOMERS[1]["id"], 34577, "pending", date(2023, 8, 5)),
]


def seed_initial_data() -> None:
    """Seed the database with sample customers and invoices."""
    app = create_app()
    with app.app_context():
        for values in CUSTOMERS:
            if db.session.get(Customer, values["id"]) is None:
                db.session.add(Customer(**values))

        if Invoice.query.count() == 0:
            for customer_id, amount, status, issued in INVOICES:
                db.session.add(
                    Invoice(
                        customer_id=customer_id,
                        amount=amount,
                        status=status,
                        date=issued.isoformat(),
                    )
                )

        db.session.commit()
        print("Sample customers and invoices created.")


if __name__ == "__main__":
    seed_initial_data()
