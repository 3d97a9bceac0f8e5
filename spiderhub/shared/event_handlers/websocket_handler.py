"""
将任务生命周期事件推送到前端浏览器
"""

from flask_socketio import SocketIO
from typing import Optional
from .base_event_handler import BaseEventHandler
import logging


class WebSocketEventHandler(BaseEventHandler):
    """
    WebSocket事件处理器
    按任务房间推送（房间名为任务ID），只有订阅该任务的客户端会收到
    """

    def __init__(self, socketio: SocketIO, namespace: str = '/task'):
        self._socketio = socketio
        self._namespace = namespace
        self._logger = logging.getLogger(__name__)

    def handle(self, event) -> None:
        message = {
            **self._format_event_to_log(event),
            "progress": self._extract_progress_info(event)
        }

        try:
            self._socketio.emit(
                'task_log',
                message,
                namespace=self._namespace,
                to=str(event.task_id)
            )
            self._logger.debug(f"WebSocket推送成功: {event.event_type} -> 任务 {event.task_id}")
        except Exception as e:
            self._logger.error(f"WebSocket推送失败: {str(e)}")

    def _extract_progress_info(self, event) -> Optional[dict]:
        data = event.data
        if event.event_type == "TaskRunFinishedEvent":
            return {"status": data.get('status'), "counts": data.get('counts', 0)}
        if event.event_type == "TaskFailedEvent":
            return {"status": "FAILED", "counts": data.get('counts', 0)}
        if event.event_type == "TaskStoppedEvent":
            return {"status": "STOPPED"}
        return None
