"""Firebase Admin SDK initialization."""

from __future__ import annotations

import firebase_admin
import structlog
from firebase_admin import App

logger = structlog.get_logger()


def init_firebase(project_id: str = "") -> App:
    """Return the default Firebase app, initializing it on first call.

    Credentials come from Application Default Credentials. When
    ``project_id`` is set it pins the project; otherwise the SDK infers it.
    Safe to call repeatedly (e.g. under uvicorn reload).
    """
    try:
        app = firebase_admin.get_app()
    except ValueError:
        pass
    else:
        logger.info("firebase_already_initialized", project_id=app.project_id)
        return app

    options = {"projectId": project_id} if project_id else None
    app = firebase_admin.initialize_app(options=options)
    logger.info("firebase_initialized", project_id=project_id or None)
    return app
