"""
Application configuration classes.

Each class represents a deployment environment. The factory function
``create_app`` in ``hrcore/__init__.py`` selects the appropriate config
based on the FLASK_ENV environment variable.

Every tenant (company) shares one database; isolation is enforced by the
``company_id`` column on tenant-scoped tables, so there is a single
connection string per environment.
"""

import logging
import os

# Module-level logger for startup warnings emitted by config classes.
_logger = logging.getLogger(__name__)

# Sentinel for detecting an unset SECRET_KEY in production.
_DEFAULT_SECRET_KEY = "dev-secret-change-me"


def _env_flag(name: str, default: str) -> bool:
    """Read a boolean flag from the environment ("true"/"false")."""
    return os.environ.get(name, default).lower() == "true"


class BaseConfig:
    """
    Shared configuration values inherited by all environments.

    Secrets and connection strings are loaded from environment variables
    so they never appear in source control.
    """

    # -- Flask core --------------------------------------------------------
    SECRET_KEY: str = os.environ.get("SECRET_KEY", _DEFAULT_SECRET_KEY)

    # -- SQLAlchemy --------------------------------------------------------
    # Developers point at their own instance via DATABASE_URL in .env.
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        (
            "mssql+pyodbc://@localhost\\SQLEXPRESS/HRCoreDev"
            "?driver=ODBC+Driver+18+for+SQL+Server"
            "&TrustServerCertificate=yes"
            "&Trusted_Connection=yes"
        ),
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ECHO: bool = False

    # -- Celery (background tasks and the daily promotion sweep) -----------
    CELERY_BROKER_URL: str = os.environ.get(
        "CELERY_BROKER_URL",
        os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
    )
    CELERY_RESULT_BACKEND: str = os.environ.get(
        "CELERY_RESULT_BACKEND",
        os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
    )

    # Zone of the sweep crontab and of the "today" used by every
    # promotion date gate (promotion_service.today).
    TIMEZONE: str = os.environ.get("TIMEZONE", "UTC")

    # -- Promotion scheduler -----------------------------------------------
    # When enabled, create_app() registers the daily sweep and runs one
    # sweep immediately to catch promotions that fell due while the
    # process was down.
    PROMOTION_SCHEDULER_ENABLED: bool = _env_flag(
        "PROMOTION_SCHEDULER_ENABLED", "true"
    )
    PROMOTION_SWEEP_HOUR: int = int(os.environ.get("PROMOTION_SWEEP_HOUR", "0"))
    PROMOTION_SWEEP_MINUTE: int = int(os.environ.get("PROMOTION_SWEEP_MINUTE", "0"))

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def celery_settings(cls, app_config: dict) -> dict:
        """
        Build the Celery settings dict from the loaded Flask config.

        Args:
            app_config: The ``app.config`` dict after loading the class.

        Returns:
            Lower-case Celery setting names mapped to their values.
        """
        return {
            "broker_url": app_config["CELERY_BROKER_URL"],
            "result_backend": app_config["CELERY_RESULT_BACKEND"],
            "timezone": app_config["TIMEZONE"],
            "enable_utc": True,
            "task_serializer": "json",
            "accept_content": ["json"],
            "result_serializer": "json",
            "task_ignore_result": True,
            "task_acks_late": True,
            "worker_prefetch_multiplier": 1,
            "task_always_eager": app_config.get("CELERY_TASK_ALWAYS_EAGER", False),
        }

    @classmethod
    def validate_production_secrets(cls, app_config: dict) -> None:
        """
        Verify that all required settings are present for production.

        Raises ``RuntimeError`` for hard requirements and logs warnings
        for soft requirements.

        Args:
            app_config: The ``app.config`` dict after loading the
                        config class.

        Raises:
            RuntimeError: If any critical secret is missing or still
                          set to its insecure default value.
        """
        errors: list[str] = []

        if app_config.get("SECRET_KEY") == _DEFAULT_SECRET_KEY:
            errors.append(
                "SECRET_KEY is still the insecure default. "
                "Generate one with: python -c "
                '"import secrets; print(secrets.token_hex(32))"'
            )

        if errors:
            combined = "\n  - ".join(errors)
            raise RuntimeError(f"Production configuration errors:\n  - {combined}")

        if not os.environ.get("DATABASE_URL"):
            _logger.warning(
                "DATABASE_URL is not set — using the localhost SQL Server "
                "default. Set DATABASE_URL in .env for production."
            )

        # The scheduler needs a reachable broker for the beat process.
        if app_config.get("PROMOTION_SCHEDULER_ENABLED") and not os.environ.get(
            "CELERY_BROKER_URL", os.environ.get("REDIS_URL")
        ):
            _logger.warning(
                "CELERY_BROKER_URL is not set — the daily promotion sweep "
                "will use the localhost Redis default."
            )

        if app_config.get("LOG_LEVEL", "").upper() == "DEBUG":
            _logger.warning(
                "LOG_LEVEL=DEBUG is not recommended in production — "
                "SQL statements and payloads may appear in logs."
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging, SQL echo enabled."""

    DEBUG: bool = True
    SQLALCHEMY_ECHO: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """
    Testing environment: in-memory SQLite and eager Celery tasks.

    The scheduler is never started automatically; tests drive it
    explicitly so each test controls when sweeps happen.
    """

    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    CELERY_BROKER_URL: str = "memory://"
    CELERY_RESULT_BACKEND: str = "cache+memory://"
    CELERY_TASK_ALWAYS_EAGER: bool = True
    PROMOTION_SCHEDULER_ENABLED: bool = False
    LOG_LEVEL: str = "DEBUG"


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    The application factory calls ``validate_production_secrets()`` at
    startup and will refuse to launch if critical values are missing.
    """

    DEBUG: bool = False
    SQLALCHEMY_ECHO: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")

    # Enforce TLS certificate validation against SQL Server.
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        (
            "mssql+pyodbc://@localhost\\SQLEXPRESS/HRCore"
            "?driver=ODBC+Driver+18+for+SQL+Server"
            "&Encrypt=yes"
            "&Trusted_Connection=yes"
        ),
    )


# Lookup dict used by the application factory.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
