"""
日志配置模块
统一管理3类日志：
1. task_lifecycle/ - 任务生命周期日志（事件驱动，LoggingEventHandler 写入）
2. error/ - 错误日志（状态监听线程、基础设施层直接调用）
3. performance/ - 性能日志（执行引擎记录每次运行耗时）

文件命名格式：{日期}_{日志类型}.log
例如：2025-11-30_task_lifecycle.log
"""

import logging
import logging.config
from pathlib import Path

from .settings import Settings

TASK_LIFECYCLE_LOGGER = 'domain.task_lifecycle'
ERROR_LOGGER = 'infrastructure.error'
PERF_LOGGER = 'infrastructure.perf'


def build_logging_config(log_root_dir: Path, level: str = 'INFO') -> dict:
    """生成 dictConfig 配置字典"""
    def daily_file(kind: str, backup_count: int) -> dict:
        return {
            '()': 'spiderhub.shared.handlers.logging_handler.DailyRotatingFileHandler',
            'log_dir': str(log_root_dir / kind),
            'file_name_suffix': f'{kind}.log',
            'backup_count': backup_count,
            'formatter': 'json',
        }

    return {
        'version': 1,
        'disable_existing_loggers': False,

        # ==================== 格式化器 ====================
        'formatters': {
            'json': {
                '()': 'pythonjsonlogger.jsonlogger.JsonFormatter',
                'format': '%(asctime)s %(name)s %(levelname)s %(message)s',
                'timestamp': True
            },
            'simple': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            }
        },

        # ==================== 处理器 ====================
        'handlers': {
            'task_lifecycle_file': daily_file('task_lifecycle', 30),
            'error_file': daily_file('error', 30),
            'performance_file': daily_file('performance', 7),
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'level': level
            }
        },

        # ==================== Logger配置 ====================
        'loggers': {
            TASK_LIFECYCLE_LOGGER: {
                'handlers': ['task_lifecycle_file', 'console'],
                'level': 'INFO',
                'propagate': False
            },
            ERROR_LOGGER: {
                'handlers': ['error_file', 'console'],
                'level': 'ERROR',
                'propagate': False
            },
            PERF_LOGGER: {
                'handlers': ['performance_file'],
                'level': 'INFO',
                'propagate': False
            },
            'apscheduler': {
                'level': 'WARNING'
            }
        },

        # ==================== 根Logger（兜底） ====================
        'root': {
            'level': level,
            'handlers': ['console']
        }
    }


def setup_logging(settings: Settings) -> None:
    """
    初始化并配置所有 logger
    应在应用启动时调用一次
    """
    log_root_dir = Path(settings.log_dir)
    logging.config.dictConfig(build_logging_config(log_root_dir, settings.log_level))

    get_task_lifecycle_logger().info("日志系统初始化完成", extra={
        'log_root_dir': str(log_root_dir)
    })


def add_websocket_handler(socketio) -> None:
    """把错误日志同时推送到前端，SocketIO 创建之后调用"""
    from .handlers.websocket_handler import WebSocketLoggingHandler

    error_logger = get_error_logger()
    if any(isinstance(h, WebSocketLoggingHandler) for h in error_logger.handlers):
        return
    ws_handler = WebSocketLoggingHandler(socketio)
    ws_handler.setFormatter(logging.Formatter('%(message)s'))
    error_logger.addHandler(ws_handler)


# ==================== 便捷获取Logger的函数 ====================

def get_task_lifecycle_logger() -> logging.Logger:
    """任务生命周期日志（EventHandler使用）"""
    return logging.getLogger(TASK_LIFECYCLE_LOGGER)


def get_error_logger() -> logging.Logger:
    """错误日志（监听线程与基础设施层使用）"""
    return logging.getLogger(ERROR_LOGGER)


def get_performance_logger() -> logging.Logger:
    """性能日志（执行引擎使用）"""
    return logging.getLogger(PERF_LOGGER)
