"""
WebSocket Logging Handler
职责：拦截错误日志并推送到前端（例如状态监听线程写库失败）
"""

import logging
from datetime import datetime
from typing import Optional

from flask_socketio import SocketIO

_STANDARD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'taskName'
}


class WebSocketLoggingHandler(logging.Handler):
    """
    将技术日志通过 WebSocket 广播到所有客户端

    用法：
        handler = WebSocketLoggingHandler(socketio, namespace='/task')
        logger.addHandler(handler)
    """

    def __init__(self, socketio: SocketIO, namespace: str = '/task'):
        super().__init__()
        self._socketio = socketio
        self._namespace = namespace

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._socketio.emit(
                'tech_log',
                self._format_log_record(record),
                namespace=self._namespace
            )
        except Exception:
            # 不能再写 logger，否则会递归回到本 handler
            self.handleError(record)

    def _format_log_record(self, record: logging.LogRecord) -> dict:
        category = record.name.split('.')[-1]
        return {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'category': 'performance' if category == 'perf' else category,
            'logger': record.name,
            'message': record.getMessage(),
            'extra': {
                k: v if isinstance(v, (str, int, float, bool, type(None))) else str(v)
                for k, v in record.__dict__.items()
                if k not in _STANDARD_ATTRS and not k.startswith('_')
            },
            'exception': self._format_exception(record),
        }

    def _format_exception(self, record: logging.LogRecord) -> Optional[str]:
        if not record.exc_info:
            return None
        formatter = self.formatter or logging.Formatter()
        return formatter.formatException(record.exc_info)
