from collections import deque
from threading import Lock
from typing import Deque, Dict, List, Optional
import logging

from .base_event_handler import BaseEventHandler
from spiderhub.shared.domain.events import DomainEvent
from spiderhub.shared.logging_config import get_task_lifecycle_logger

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class LoggingEventHandler(BaseEventHandler):
    """
    日志事件处理器
    职责：
    1. 捕获领域事件并转换为日志格式，写入 domain.task_lifecycle（JSON 文件）
    2. 按任务ID分组保存最近的日志，供接口查询
    """

    def __init__(self, max_logs_per_task: int = 1000):
        self._task_logs: Dict[int, Deque[dict]] = {}
        self._max_logs_per_task = max_logs_per_task
        self._lock = Lock()
        self._logger = get_task_lifecycle_logger()

    def handle(self, event: DomainEvent) -> None:
        log_entry = self._format_event_to_log(event)

        with self._lock:
            logs = self._task_logs.setdefault(event.task_id, deque(maxlen=self._max_logs_per_task))
            logs.append(log_entry)

        self._logger.log(
            _LEVELS.get(log_entry["level"], logging.INFO),
            log_entry["message"],
            extra={
                "task_id": log_entry["task_id"],
                "event_type": log_entry["event_type"],
                "data": log_entry["data"]
            }
        )

# -------------------- 日志查询接口 --------------------

    def get_logs(self, task_id: int, last_n: Optional[int] = None) -> List[dict]:
        """获取任务日志，last_n 为 None 时返回全部"""
        with self._lock:
            logs = list(self._task_logs.get(task_id, ()))
        if last_n:
            return logs[-last_n:]
        return logs

    def get_all_task_ids(self) -> List[int]:
        with self._lock:
            return list(self._task_logs.keys())

    def get_logs_by_level(self, task_id: int, level: str) -> List[dict]:
        return [log for log in self.get_logs(task_id) if log['level'] == level]

    def has_errors(self, task_id: int) -> bool:
        return len(self.get_logs_by_level(task_id, 'ERROR')) > 0

    def clear_logs(self, task_id: int) -> None:
        with self._lock:
            if task_id in self._task_logs:
                self._task_logs[task_id].clear()
