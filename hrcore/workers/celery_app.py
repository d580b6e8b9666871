"""
Celery application bound to the Flask app.

``celery_init_app`` is called by the application factory.  Tasks run
inside the Flask application context so they can use ``db.session``;
when a task is executed eagerly from code that already has a context
(tests, the CLI), that context is reused.

Run a worker with the embedded beat scheduler::

    celery -A hrcore.workers.worker:celery_app worker -B --loglevel=INFO
"""

from celery import Celery, Task
from flask import Flask, has_app_context

TASK_MODULES = ["hrcore.workers.tasks.promotions"]


def celery_init_app(app: Flask) -> Celery:
    """
    Create the Celery app for a Flask app and store it in ``app.extensions``.

    Args:
        app: The Flask application; ``app.config["CELERY"]`` holds the
             lower-case Celery settings.

    Returns:
        The configured Celery application.
    """

    class FlaskTask(Task):
        def __call__(self, *args, **kwargs):
            if has_app_context():
                return self.run(*args, **kwargs)
            with app.app_context():
                return self.run(*args, **kwargs)

    celery_app = Celery(app.name, task_cls=FlaskTask, include=TASK_MODULES)
    celery_app.conf.update(app.config["CELERY"])
    celery_app.set_default()
    app.extensions["celery"] = celery_app
    return celery_app
