"""
Application factory for the HR lifecycle service.

Usage::

    from hrcore import create_app
    app = create_app()           # Uses FLASK_ENV to pick config.
    app = create_app("testing")  # Explicit config for tests.
"""

import logging
import os

from flask import Flask

from .config import config_by_name
from .extensions import db, migrate

logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """
    Build the application, its Celery app and (optionally) the daily
    promotion sweep.

    Args:
        config_name: Key of ``config_by_name``.  When omitted, FLASK_ENV
                     decides, and 'development' is used if it is unset.

    Returns:
        The configured Flask app.  ``app.extensions`` holds ``celery``
        and, when the scheduler is enabled, ``promotion_scheduler`` and
        ``promotion_scheduler_handle``.

    Raises:
        ValueError: For an unknown config name.
    """
    config_name = config_name or os.environ.get("FLASK_ENV", "development")
    try:
        config_class = config_by_name[config_name]
    except KeyError:
        raise ValueError(
            f"Unknown config '{config_name}'; expected one of "
            f"{sorted(config_by_name)}"
        ) from None

    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config["CELERY"] = config_class.celery_settings(app.config)

    if config_name == "production":
        config_class.validate_production_secrets(app.config)

    _configure_logging(app)

    # -- Database, migrations and Celery ----------------------------------
    _register_extensions(app)

    # -- flask db-check / promotion-sweep / seed-dev-tenant ---------------
    _register_cli_commands(app)

    # -- Start the daily promotion sweep -----------------------------------
    if app.config.get("PROMOTION_SCHEDULER_ENABLED"):
        _start_promotion_scheduler(app)
    else:
        logger.info("Promotion scheduler disabled for '%s' config", config_name)

    return app


def _register_extensions(app: Flask) -> None:
    """Bind all extensions to the application instance."""
    # pylint: disable=import-outside-toplevel
    db.init_app(app)
    migrate.init_app(app, db)

    # Imported here so every model is registered before migrations run.
    from . import models  # noqa: F401
    from .workers.celery_app import celery_init_app

    celery_init_app(app)


def _register_cli_commands(app: Flask) -> None:
    """Register custom Flask CLI commands (e.g., flask promotion-sweep)."""
    # pylint: disable=import-outside-toplevel
    from .cli import register_commands
    from .seed_dev_tenant import register_seed_commands

    register_commands(app)
    register_seed_commands(app)


def _start_promotion_scheduler(app: Flask) -> None:
    """
    Create the promotion scheduler, start it, and keep both the
    scheduler and its handle on ``app.extensions`` for shutdown.
    """
    # pylint: disable=import-outside-toplevel
    from .services.promotion_scheduler import PromotionScheduler

    scheduler = PromotionScheduler(
        app.extensions["celery"],
        hour=app.config["PROMOTION_SWEEP_HOUR"],
        minute=app.config["PROMOTION_SWEEP_MINUTE"],
    )
    with app.app_context():
        handle = scheduler.start()

    app.extensions["promotion_scheduler"] = scheduler
    app.extensions["promotion_scheduler_handle"] = handle


def _configure_logging(app: Flask) -> None:
    """
    Set the root log level from ``LOG_LEVEL``.

    In development SQL echo is handled by SQLAlchemy itself, so the
    engine logger is quieted to avoid printing every statement twice.
    """
    log_level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if app.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
