from abc import ABC, abstractmethod
from typing import Tuple

from ..value_objects.execution_config import ExecutionConfig
from ..value_objects.task_rule import TaskRule
from .completion_channel import CompletionChannel


class ICrawlJob(ABC):
    """已启动的爬取作业句柄，周期调度通过它重新执行"""

    @abstractmethod
    def rerun(self) -> None:
        """用同一份配置再执行一次，结果写入同一个完成信号通道"""
        pass


class ICrawlEngine(ABC):

    @abstractmethod
    def launch(self, rule: TaskRule, config: ExecutionConfig) -> Tuple[ICrawlJob, CompletionChannel]:
        """
        异步启动爬取作业
        返回作业句柄与完成信号通道（每次运行结束发送一个 TaskStatus）
        配置被拒绝时抛出 LaunchError
        """
        pass
