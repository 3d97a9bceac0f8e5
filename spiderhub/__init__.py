from typing import Optional

from flask import Flask
from flask_cors import CORS

from .shared.db_manager import db_session
from .shared.event_bus import EventBus
from .shared.event_handlers.logging_handler import LoggingEventHandler
from .shared.settings import Settings, load_settings
from .task.services.task_orchestrator_service import TaskOrchestratorService
from .task.view.task_view import bp as task_bp, inject_task_service


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[TaskOrchestratorService] = None,
    event_bus: Optional[EventBus] = None
):
    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes

    if service is None:
        from .bootstrap import build_task_service
        if event_bus is None:
            event_bus = EventBus()
            event_bus.subscribe_to_all(LoggingEventHandler().handle)
        service = build_task_service(settings or load_settings(), event_bus)
    inject_task_service(service)
    app.extensions["task_service"] = service

    @app.teardown_appcontext
    def shutdown_session(exception=None):
        db_session.remove()

    app.register_blueprint(task_bp)
    return app
