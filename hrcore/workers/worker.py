"""
Celery worker entry point.

Builds the Flask app (which creates the Celery app and, when enabled,
registers the daily promotion sweep on its beat schedule)::

    celery -A hrcore.workers.worker:celery_app worker -B --loglevel=INFO
"""

import os

from hrcore import create_app

flask_app = create_app(os.environ.get("FLASK_ENV", "production"))
celery_app = flask_app.extensions["celery"]
