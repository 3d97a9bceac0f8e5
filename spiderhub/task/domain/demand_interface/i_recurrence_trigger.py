from abc import ABC, abstractmethod
from typing import Any

from .completion_channel import CompletionChannel
from .i_crawl_engine import ICrawlJob


class IRecurrenceTrigger(ABC):
    """周期触发器：注册/启动/停止，失败时抛出 ScheduleError"""

    @abstractmethod
    def register(self, job: ICrawlJob, channel: CompletionChannel, spec: str) -> Any:
        pass

    @abstractmethod
    def start(self, handle: Any) -> None:
        pass

    @abstractmethod
    def stop(self, handle: Any) -> None:
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """进程退出时停止所有周期触发"""
        pass
