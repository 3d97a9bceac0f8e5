"""
模块职责
- 提供任务相关的 RESTful API（健康检查/创建任务/查询状态/停止任务）；
- 把编排异常映射为 HTTP 状态码，编排服务本身不感知 HTTP；
- 使用 Flask Blueprint 将接口统一挂载在 `/api/task` 前缀下。

编排服务在应用工厂中组装，通过 inject_task_service 注入。
"""

from flask import Blueprint, jsonify, request
import logging
from typing import Optional

from ..services.task_orchestrator_service import TaskOrchestratorService
from ..domain.exceptions import NotFoundError, OrchestrationError, ValidationError
from ..domain.value_objects.create_task_request import CreateTaskRequest

bp = Blueprint("task", __name__, url_prefix="/api/task")
logger = logging.getLogger(__name__)

_service: Optional[TaskOrchestratorService] = None


def inject_task_service(service: TaskOrchestratorService) -> None:
    """依赖注入：注入编排服务"""
    global _service
    _service = service


def get_task_service() -> TaskOrchestratorService:
    if _service is None:
        raise RuntimeError("task service is not initialized")
    return _service


def _error_response(e: OrchestrationError):
    if isinstance(e, ValidationError):
        code = 400
    elif isinstance(e, NotFoundError):
        code = 404
    else:
        code = 500
    return jsonify({"error": e.message, "phase": e.phase}), code


@bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@bp.route("/create", methods=["POST"])
def create():
    """创建并启动任务"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "request body must be a JSON object"}), 400

    try:
        req = CreateTaskRequest.from_dict(data)
    except ValidationError as e:
        logger.error(f"bind json failed! err: {e.message}")
        return _error_response(e)

    try:
        summary = get_task_service().create_task(req)
    except OrchestrationError as e:
        logger.error(f"create task failed! phase={e.phase} err={e.message}")
        return _error_response(e)

    return jsonify(summary.to_dict())


@bp.route("/status/<int:task_id>", methods=["GET"])
def status(task_id: int):
    try:
        return jsonify(get_task_service().get_task_status(task_id))
    except OrchestrationError as e:
        return _error_response(e)


@bp.route("/stop/<int:task_id>", methods=["POST"])
def stop(task_id: int):
    try:
        get_task_service().stop_task(task_id)
    except OrchestrationError as e:
        return _error_response(e)
    return jsonify({"status": "stopping", "id": task_id})


@bp.route("/list", methods=["GET"])
def list_tasks():
    try:
        tasks = get_task_service().get_all_tasks()
    except OrchestrationError as e:
        return _error_response(e)
    return jsonify([
        {
            "id": t.id,
            "task_name": t.task_name,
            "status": t.status.value,
            "counts": t.counts,
            "cron_spec": t.cron_spec,
            "create_at": t.created_at.isoformat() if t.created_at else None
        }
        for t in tasks
    ])
