"""
基于线程的执行引擎适配器

真正的爬取逻辑由规则自带的 run(config) 完成，这里只负责：
- 启动前校验配置（不合法时抛出 LaunchError）；
- 在守护线程中执行，不阻塞调用方；
- 每次运行结束向完成信号通道发送一个 TaskStatus。
"""

import logging
import time
from threading import Lock, Thread
from typing import Tuple

from ..domain.demand_interface.completion_channel import CompletionChannel
from ..domain.demand_interface.i_crawl_engine import ICrawlEngine, ICrawlJob
from ..domain.exceptions import LaunchError
from ..domain.value_objects.execution_config import ExecutionConfig
from ..domain.value_objects.task_rule import TaskRule
from ..domain.value_objects.task_status import TaskStatus
from spiderhub.shared.logging_config import get_error_logger, get_performance_logger

SUPPORTED_OUTPUT_TYPES = ("mysql",)


class ThreadCrawlJob(ICrawlJob):
    """
    一个任务的爬取作业
    同一时间最多一次运行；上一次未结束时的重跑请求会被跳过
    """

    def __init__(self, rule: TaskRule, config: ExecutionConfig, channel: CompletionChannel):
        self._rule = rule
        self._config = config
        self._channel = channel
        self._running = False
        self._lock = Lock()
        self._logger = logging.getLogger(__name__)

    def rerun(self) -> None:
        with self._lock:
            if self._running:
                self._logger.warning(f"规则 {self._rule.name} 上一次运行尚未结束，跳过本次触发")
                return
            self._running = True
        Thread(target=self._run, daemon=True, name=f"crawl-{self._rule.name}").start()

    def _run(self) -> None:
        start = time.time()
        try:
            result = self._rule.run(self._config)
            status = result if isinstance(result, TaskStatus) else TaskStatus.COMPLETED
        except Exception as e:
            get_error_logger().error(
                f"规则 {self._rule.name} 运行失败: {e}",
                exc_info=True,
                extra={'rule': self._rule.name}
            )
            status = TaskStatus.FAILED
        finally:
            with self._lock:
                self._running = False

        get_performance_logger().info("crawl run finished", extra={
            'rule': self._rule.name,
            'status': status.value,
            'elapsed': round(time.time() - start, 3)
        })
        if not self._channel.send(status):
            self._logger.debug(f"通道已关闭，丢弃完成信号: {status.value}")


class ThreadCrawlEngineImpl(ICrawlEngine):

    def launch(self, rule: TaskRule, config: ExecutionConfig) -> Tuple[ThreadCrawlJob, CompletionChannel]:
        self._validate(rule, config)

        channel = CompletionChannel()
        job = ThreadCrawlJob(rule, config, channel)
        job.rerun()
        return job, channel

    def _validate(self, rule: TaskRule, config: ExecutionConfig) -> None:
        if rule.run is None:
            raise LaunchError(f"规则 {rule.name} 没有可执行的爬取入口")
        if config.output.type not in SUPPORTED_OUTPUT_TYPES:
            raise LaunchError(f"不支持的输出类型: {config.output.type}")
        if config.option.max_depth < 0 or config.option.max_body_size < 0:
            raise LaunchError("max_depth/max_body_size 不能为负数")

        limit = config.limit
        if limit.enable:
            if not limit.domain_glob:
                raise LaunchError("启用限速时必须指定 limit_domain_glob")
            if limit.parallelism < 0 or limit.delay.total_seconds() < 0 or limit.random_delay.total_seconds() < 0:
                raise LaunchError("限速参数不能为负数")
