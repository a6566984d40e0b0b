import logging
import os
import secrets
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, Response, g, render_template, request
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from flask_wtf.csrf import CSRFError

load_dotenv()
db = SQLAlchemy()
csrf = CSRFProtect()

INVOICES_PATH = "/dashboard/invoices"
DEFAULT_CSP_TEMPLATE = (
    "default-src 'self'; "
    "img-src 'self' data:; "
    "style-src 'self' 'unsafe-inline'; "
    "script-src 'self' 'nonce-{nonce}'; "
    "frame-ancestors 'self'; "
    "form-action 'self'; "
    "object-src 'none'; "
    "base-uri 'self'"
)


def _get_bool_env(var_name: str, default: bool = False) -> bool:
    """Return a boolean environment variable value."""

    value = os.getenv(var_name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _database_uri(base_dir: str) -> str:
    """Resolve the SQLAlchemy URI from ``DATABASE_URL`` or ``DATABASE_PATH``."""

    url = os.getenv("DATABASE_URL")
    if url:
        # Hosted Postgres providers still hand out the legacy scheme.
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://") :]
        return url

    # If the provided path is a directory, store the SQLite file inside it.
    default_db_path = os.path.join(base_dir, "invoicing.db")
    db_path = os.getenv("DATABASE_PATH", default_db_path)
    if os.path.isdir(db_path):
        db_path = os.path.join(db_path, "invoicing.db")
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    return f"sqlite:///{os.path.abspath(db_path)}"


def create_app(config_overrides=None):
    """Application factory used by Flask."""
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY")
    session_cookie_secure = _get_bool_env("SESSION_COOKIE_SECURE", default=True)
    app.config["ENFORCE_HTTPS"] = _get_bool_env("ENFORCE_HTTPS", default=False)
    app.config.update(
        SESSION_COOKIE_SECURE=session_cookie_secure,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=timedelta(minutes=30),
    )
    app.config["SQLALCHEMY_DATABASE_URI"] = _database_uri(os.getcwd())
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO").upper()
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(
        getattr(logging, app.config["LOG_LEVEL"], logging.INFO)
    )

    db.init_app(app)
    from flask_migrate import Migrate

    repo_dir = os.path.abspath(
        os.path.join(os.path.dirname(__file__), os.pardir)
    )
    Migrate(app, db, directory=os.path.join(repo_dir, "migrations"))
    csrf.init_app(app)

    from invoicing.utils.view_cache import init_view_cache

    init_view_cache(app)

    @app.template_filter("currency")
    def format_currency(value):
        """Render a major-unit amount as ``$1,234.50``."""
        if value is None:
            return ""
        return f"${value:,.2f}"

    @app.before_request
    def set_csp_nonce():
        """Generate a nonce for inline scripts allowed by the CSP."""

        g.csp_nonce = secrets.token_urlsafe(16)

    @app.after_request
    def apply_security_headers(response):
        """Attach standard security headers to every response."""
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if request.is_secure or app.config.get("ENFORCE_HTTPS", False):
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        nonce = getattr(g, "csp_nonce", "") or secrets.token_urlsafe(16)
        csp_template = app.config.get(
            "CONTENT_SECURITY_POLICY", DEFAULT_CSP_TEMPLATE
        )
        response.headers.setdefault(
            "Content-Security-Policy", csp_template.replace("{nonce}", nonce)
        )
        return response

    @app.context_processor
    def inject_csp_nonce():
        """Expose the CSP nonce to templates for inline scripts."""

        return {"csp_nonce": getattr(g, "csp_nonce", "")}

    @app.before_request
    def block_http_options():
        """Return a 405 for HTTP OPTIONS requests to reduce information leakage."""
        if request.method == "OPTIONS":
            return Response(status=405)

    with app.app_context():
        # Ensure models are imported and the schema exists even if migrations
        # have not been executed yet.
        from . import models  # noqa: F401

        db.create_all()

        from invoicing.routes.customer_routes import customer
        from invoicing.routes.invoice_routes import invoice
        from invoicing.routes.main_routes import main

        app.register_blueprint(main)
        app.register_blueprint(customer)
        app.register_blueprint(invoice)

    from invoicing.services.invoice_actions import InvoiceActionError

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        """Render a helpful page when CSRF validation fails."""
        return (
            render_template("errors/csrf_error.html", reason=error.description),
            400,
        )

    @app.errorhandler(InvoiceActionError)
    def handle_invoice_action_error(error):
        """Surface failed writes through a generic error page."""
        return render_template("errors/action_error.html", error=error), 500

    return app
