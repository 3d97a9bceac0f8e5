from abc import ABC, abstractmethod
from datetime import datetime
from spiderhub.shared.domain.events import DomainEvent


class BaseEventHandler(ABC):
    """
    事件处理器基类
    提供通用的事件格式化方法
    """

    @abstractmethod
    def handle(self, event: DomainEvent) -> None:
        """处理事件（子类必须实现）"""
        pass

    def _format_event_to_log(self, event: DomainEvent) -> dict:
        """将领域事件转换为日志格式"""
        message, level = self._get_message_and_level(event)

        return {
            "timestamp": self._format_timestamp(event.timestamp),
            "level": level,
            "message": message,
            "event_type": event.event_type,
            "task_id": event.task_id,
            "data": event.data
        }

    def _get_message_and_level(self, event: DomainEvent) -> tuple[str, str]:
        """根据事件类型生成 (message, level)"""
        event_type = event.event_type
        data = event.data

        if event_type == "TaskCreatedEvent":
            cron = data.get('cron_spec')
            return (
                f"▶ 任务创建: {data.get('task_name', 'N/A')} "
                f"[规则: {data.get('task_rule_name')}, 输出库: {data.get('output_sysdb_id')}"
                f"{', 周期: ' + cron if cron else ''}]",
                "INFO"
            )

        elif event_type == "TaskRunFinishedEvent":
            if data.get('status') == "COMPLETED":
                return (f"✓ 运行完成, 累计完成 {data.get('counts', 0)} 次", "SUCCESS")
            return (f"运行结束, 状态: {data.get('status')}", "INFO")

        elif event_type == "TaskFailedEvent":
            return (f"✗ 任务失败: {data.get('error_message', '未知错误')}", "ERROR")

        elif event_type == "TaskStoppedEvent":
            return (f"⏹ 任务已停止: {data.get('reason', '')}", "WARNING")

        elif event_type == "RecurrenceScheduledEvent":
            return (f"⏱ 周期调度已启动: {data.get('cron_spec')}", "INFO")

        elif event_type == "RecurrenceFailedEvent":
            return (
                f"✗ 周期调度失败 [{data.get('cron_spec')}]: {data.get('error_message', '')}",
                "ERROR"
            )

        elif event_type == "StatusListenerExitedEvent":
            reason = data.get('reason')
            level = "ERROR" if reason == "store_error" else "INFO"
            return (f"状态监听已退出: {reason}", level)

        return (f"事件: {event_type}", "DEBUG")

    def _format_timestamp(self, timestamp: datetime) -> str:
        if not isinstance(timestamp, datetime):
            return str(timestamp)
        return timestamp.strftime('%Y-%m-%d %H:%M:%S')
