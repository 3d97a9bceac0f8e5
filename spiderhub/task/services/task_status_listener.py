"""
任务状态监听

每个任务一个监听线程，独占该任务完成信号通道的接收端：
- 阻塞等待信号，按发送顺序逐个处理；
- COMPLETED 时完成次数加一，随后持久化 status/counts；
- 持久化失败：记录错误并退出，不再处理后续信号；
- 通道关闭：若带有最终状态（STOPPED）则写入后退出。
"""

import logging
from threading import Thread
from typing import Callable, Optional

from spiderhub.shared.event_bus import EventBus
from spiderhub.shared.logging_config import get_error_logger
from ..domain.demand_interface.completion_channel import CompletionReceiver
from ..domain.demand_interface.i_task_repository import ITaskRepository
from ..domain.domain_event.task_life_cycle_event import StatusListenerExitedEvent
from ..domain.entity.spider_task import SpiderTask
from ..domain.exceptions import StoreError
from ..domain.value_objects.task_status import TaskStatus

logger = logging.getLogger(__name__)


class TaskStatusListener:

    def __init__(
        self,
        task: SpiderTask,
        receiver: CompletionReceiver,
        repository: ITaskRepository,
        event_bus: Optional[EventBus] = None,
        on_exit: Optional[Callable[[int], None]] = None
    ):
        self._task = task
        self._receiver = receiver
        self._repository = repository
        self._event_bus = event_bus
        self._on_exit = on_exit
        self._thread: Optional[Thread] = None
        self.exit_reason: Optional[str] = None

    @property
    def task_id(self) -> int:
        return self._task.id

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"任务 {self.task_id} 的监听线程已启动")
        self._thread = Thread(target=self.run, daemon=True, name=f"task-listener-{self.task_id}")
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self) -> None:
        try:
            self.exit_reason = self._listen()
        finally:
            self._publish(StatusListenerExitedEvent(task_id=self.task_id, reason=self.exit_reason or "error"))
            if self._on_exit:
                self._on_exit(self.task_id)

    def _listen(self) -> str:
        while True:
            status = self._receiver.receive()
            if status is None:
                return self._handle_close()

            patch = self._task.apply_completion(status)
            try:
                self._repository.update(self._task, patch)
            except StoreError as e:
                get_error_logger().error(
                    f"更新任务状态失败, 监听退出: {e}",
                    exc_info=True,
                    extra={'task_id': self.task_id, 'status': status.value}
                )
                self._publish_task_events()
                return "store_error"

            logger.debug(f"任务 {self.task_id} 状态更新: {status.value}, counts={self._task.counts}")
            self._publish_task_events()

    def _handle_close(self) -> str:
        reason = self._receiver.close_reason or "closed"
        if self._receiver.final_status == TaskStatus.STOPPED:
            patch = self._task.stop(reason)
            try:
                self._repository.update(self._task, patch)
            except StoreError as e:
                get_error_logger().error(
                    f"写入停止状态失败: {e}",
                    exc_info=True,
                    extra={'task_id': self.task_id}
                )
            self._publish_task_events()
        return reason

    def _publish_task_events(self) -> None:
        for event in self._task.get_uncommitted_events():
            self._publish(event)
        self._task.clear_events()

    def _publish(self, event) -> None:
        if self._event_bus:
            self._event_bus.publish(event)
