"""
Celery worker entry point.

Imports the Celery app and tasks from the API module, so the worker runs
training block generation with the same models and settings.

    celery -A main worker --loglevel=info
"""
import sys
import os

# API directory: /api in the container, ../api in a checkout
API_DIR = os.environ.get("API_DIR") or os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "api")
sys.path.insert(0, API_DIR)

from tasks import celery_app  # noqa: E402

celery_app.autodiscover_tasks(['tasks'])


@celery_app.task(name="worker.health_check")
def health_check():
    """Health check task"""
    return {"status": "ok"}
