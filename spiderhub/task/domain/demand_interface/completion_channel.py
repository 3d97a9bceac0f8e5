"""
完成信号通道

一个任务对应一个通道：执行引擎（含周期重跑）是唯一的发送方，
该任务的状态监听线程是唯一的接收方。接收端只能被取走一次，
以此保证同一任务的 status/counts 不会被两个监听线程并发更新。
"""

import queue
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from ..exceptions import ChannelAlreadyConsumed
from ..value_objects.task_status import TaskStatus


@dataclass(frozen=True)
class _Closed:
    final_status: Optional[TaskStatus]
    reason: str


class CompletionReceiver:
    """通道的接收端，按发送顺序逐个取出信号"""

    def __init__(self, q: "queue.Queue"):
        self._queue = q
        self.final_status: Optional[TaskStatus] = None
        self.close_reason: Optional[str] = None

    def receive(self) -> Optional[TaskStatus]:
        """
        阻塞直到收到下一个信号
        通道关闭后返回 None，此时 final_status/close_reason 记录关闭原因
        """
        item = self._queue.get()
        if isinstance(item, _Closed):
            self.final_status = item.final_status
            self.close_reason = item.reason
            return None
        return item


class CompletionChannel:

    def __init__(self):
        self._queue: "queue.Queue" = queue.Queue()
        self._lock = Lock()
        self._receiver_taken = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, status: TaskStatus) -> bool:
        """发送一个完成信号；通道已关闭时丢弃并返回 False"""
        with self._lock:
            if self._closed:
                return False
            self._queue.put(status)
            return True

    def close(self, final_status: Optional[TaskStatus] = None, reason: str = "closed") -> None:
        """
        关闭通道
        关闭前已发送的信号仍会按顺序交给接收方，之后接收方收到关闭标记退出
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_Closed(final_status=final_status, reason=reason))

    def take_receiver(self) -> CompletionReceiver:
        with self._lock:
            if self._receiver_taken:
                raise ChannelAlreadyConsumed("完成信号通道的接收端已被取走")
            self._receiver_taken = True
        return CompletionReceiver(self._queue)
