"""
Unbound extension singletons.

``create_app()`` binds each of these with ``init_app()``; models and
services import them directly, so this module must not import anything
from the rest of the package.

Celery is not created here: it needs the loaded config, so
``hrcore.workers.celery_app.celery_init_app`` builds it per app and
stores it in ``app.extensions["celery"]``.
"""

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# -- ORM shared by every tenant-scoped model ------------------------------
db = SQLAlchemy()

# -- Alembic migrations under migrations/versions -------------------------
migrate = Migrate()
