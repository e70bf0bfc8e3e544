# backend/stockledger/__init__.py
import logging

from flask import Flask, current_app, request

from .config import Config
from .errors import LedgerError, StorageFailureError
from .extensions import db, migrate


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.products import products_bp
    from .routes.inventory import inventory_bp
    from .routes.stock import stock_bp
    from .routes.history import history_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(stock_bp)
    app.register_blueprint(history_bp)

    @app.errorhandler(LedgerError)
    def handle_ledger_error(exc: LedgerError):
        if isinstance(exc, StorageFailureError):
            current_app.logger.exception("Ledger storage failure on %s %s", request.method, request.path)
        return exc.to_dict(), exc.status_code

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
