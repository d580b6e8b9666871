"""
Waitress WSGI entry point for production deployment.

Usage::

    python wsgi.py

Or register as a Windows Service via NSSM::

    nssm install HRCore "C:\\path\\to\\venv\\Scripts\\python.exe" "C:\\path\\to\\wsgi.py"

The application factory starts the daily promotion sweep unless
``PROMOTION_SCHEDULER_ENABLED`` is false.  Run exactly one process with
the scheduler enabled; the Celery worker started with ``-B`` executes
the sweep it registers.
"""

import logging
import os

from waitress import serve

from hrcore import create_app

logger = logging.getLogger(__name__)

# Force production config when running via this entry point.
app = create_app(os.environ.get("FLASK_ENV", "production"))

if __name__ == "__main__":
    host = os.environ.get("WAITRESS_HOST", "127.0.0.1")
    port = int(os.environ.get("WAITRESS_PORT", "8080"))
    logger.info("Starting Waitress on %s:%s", host, port)
    try:
        serve(app, host=host, port=port)
    finally:
        scheduler = app.extensions.get("promotion_scheduler")
        if scheduler is not None:
            scheduler.stop(app.extensions.get("promotion_scheduler_handle"))
