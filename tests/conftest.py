from __future__ import annotations

import os
import sys

import pytest

from flask_migrate import upgrade

# Ensure the package is importable when tests change directories
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, BASE_DIR)

from invoicing import create_app, db  # noqa: E402
from invoicing.models import Customer  # noqa: E402

CUSTOMER_ID = "c1"


@pytest.fixture
def app(tmp_path):
    os.environ.setdefault("SECRET_KEY", "testsecret")

    db_path = tmp_path / "invoicing.db"
    app = create_app(
        {
            "TESTING": True,
            "WTF_CSRF_ENABLED": False,
            "SESSION_COOKIE_SECURE": False,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        }
    )

    with app.app_context():
        try:
            upgrade()
        except Exception:
            db.session.rollback()
        db.create_all()

        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def customer(app):
    with app.app_context():
        record = Customer(
            id=CUSTOMER_ID,
            name="Evil Rabbit",
            email="evil@rabbit.com",
            image_url="/customers/evil-rabbit.png",
        )
        db.session.add(record)
        db.session.commit()
        return record.id
