"""
模块职责（应用层）
- 编排一次任务创建：规则解析 -> 配置组装 -> 任务入库 -> 异步启动 -> [周期注册] -> 状态监听；
- 维护每个任务的生命周期句柄（作业、完成信号通道、监听线程、周期句柄），支持显式停止与进程退出时的清理；
- 提供面向界面的查询方法。

设计要点
- 入库之前的任何失败都不会留下任务记录，也不会启动作业；
- 首次启动失败时任务已入库，状态写为 FAILED 后抛出 LaunchError；
- 周期注册/启动失败不回滚任务，只把 recurrence_status 写为 FAILED，请求仍然成功；
- 监听线程启动之前，由本服务写入 FAILED/recurrence_status；启动之后，只有监听线程写 status/counts。
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, List, Optional

from spiderhub.shared.event_bus import EventBus
from spiderhub.shared.logging_config import get_error_logger
from ..domain.demand_interface.completion_channel import CompletionChannel
from ..domain.demand_interface.i_crawl_engine import ICrawlEngine, ICrawlJob
from ..domain.demand_interface.i_recurrence_trigger import IRecurrenceTrigger
from ..domain.demand_interface.i_rule_store import IRuleStore
from ..domain.demand_interface.i_task_repository import ITaskRepository
from ..domain.domain_service.config_assembler import ConfigAssembler
from ..domain.entity.spider_task import SpiderTask
from ..domain.exceptions import LaunchError, ScheduleError, StoreError, TaskNotFound
from ..domain.value_objects.create_task_request import CreateTaskRequest
from ..domain.value_objects.task_patch import TaskPatch
from ..domain.value_objects.task_status import TaskStatus
from ..domain.value_objects.task_summary import TaskSummary
from .task_status_listener import TaskStatusListener

logger = logging.getLogger(__name__)


@dataclass
class TaskLifetime:
    """一个任务在本进程内的全部运行时资源"""
    task_id: int
    job: ICrawlJob
    channel: CompletionChannel
    listener: TaskStatusListener
    recurrence: Optional[Any] = None


class TaskOrchestratorService:
    """
    应用服务 - 任务生命周期编排
    """

    def __init__(
        self,
        rule_store: IRuleStore,
        config_assembler: ConfigAssembler,
        repository: ITaskRepository,
        engine: ICrawlEngine,
        recurrence_trigger: IRecurrenceTrigger,
        event_bus: Optional[EventBus] = None
    ):
        self._rules = rule_store
        self._assembler = config_assembler
        self._repository = repository
        self._engine = engine
        self._trigger = recurrence_trigger
        self._event_bus = event_bus

        self._lifetimes: Dict[int, TaskLifetime] = {}
        self._lock = Lock()

# -------------------- 任务创建 --------------------

    def create_task(self, request: CreateTaskRequest) -> TaskSummary:
        """
        创建并启动任务

        返回:
            TaskSummary(id, created_at)

        异常:
            ValidationError / NotFoundError / StoreError - 任务未入库
            LaunchError - 任务已入库并标记为 FAILED（引擎的其他异常也转换为 LaunchError）
        """
        logger.info(f"创建任务: name={request.task_name}, rule={request.task_rule_name}, cron={request.cron_spec!r}")

        rule = self._rules.resolve(request.task_rule_name)
        config = self._assembler.build(request, rule)

        task = self._repository.create(SpiderTask(request=request))
        self._publish_domain_events(task)

        try:
            job, channel = self._engine.launch(rule, config)
        except LaunchError as e:
            get_error_logger().error(f"任务 {task.id} 启动失败: {e}", extra={'task_id': task.id})
            self._persist_before_listening(task, task.fail_launch(str(e)))
            raise
        except Exception as e:
            # 引擎的意外异常同样不能留下没有作业的 RUNNING 记录
            get_error_logger().error(f"任务 {task.id} 启动异常: {e}", exc_info=True, extra={'task_id': task.id})
            self._persist_before_listening(task, task.fail_launch(str(e)))
            raise LaunchError(f"执行引擎启动异常: {e}") from e

        recurrence = None
        if config.is_recurring:
            recurrence = self._start_recurrence(task, job, channel, config.cron_spec)

        listener = TaskStatusListener(
            task=task,
            receiver=channel.take_receiver(),
            repository=self._repository,
            event_bus=self._event_bus,
            on_exit=self._release
        )
        with self._lock:
            self._lifetimes[task.id] = TaskLifetime(
                task_id=task.id,
                job=job,
                channel=channel,
                listener=listener,
                recurrence=recurrence
            )
        listener.start()

        return TaskSummary(id=task.id, created_at=task.created_at)

    def _start_recurrence(self, task: SpiderTask, job: ICrawlJob, channel: CompletionChannel, spec: str):
        logger.info(f"启动周期任务: {spec}")
        handle = None
        try:
            handle = self._trigger.register(job, channel, spec)
            self._trigger.start(handle)
        except ScheduleError as e:
            get_error_logger().error(f"任务 {task.id} 周期调度失败: {e}", extra={'task_id': task.id, 'cron_spec': spec})
            if handle is not None:
                self._trigger.stop(handle)
            self._persist_before_listening(task, task.fail_recurrence(str(e)))
            return None

        self._persist_before_listening(task, task.activate_recurrence())
        return handle

    def _persist_before_listening(self, task: SpiderTask, patch: TaskPatch) -> None:
        """监听线程启动前的写入：失败只记录，不影响请求结果"""
        try:
            self._repository.update(task, patch)
        except StoreError as e:
            get_error_logger().error(f"更新任务 {task.id} 失败: {e}", extra={'task_id': task.id})
        self._publish_domain_events(task)

# -------------------- 停止与退出 --------------------

    def stop_task(self, task_id: int) -> None:
        """
        停止任务：移除周期触发并关闭完成信号通道，
        由监听线程写入 STOPPED 后退出
        """
        with self._lock:
            lifetime = self._lifetimes.get(task_id)

        if lifetime is None:
            self._stop_orphan(task_id)
            return

        if lifetime.recurrence is not None:
            self._trigger.stop(lifetime.recurrence)
        lifetime.channel.close(final_status=TaskStatus.STOPPED, reason="用户手动停止")

    def _stop_orphan(self, task_id: int) -> None:
        """本进程内没有监听线程的任务（例如重启前创建的），直接写库"""
        task = self._repository.get_task(task_id)
        if task is None:
            raise TaskNotFound(task_id)
        if task.status in (TaskStatus.STOPPED, TaskStatus.FAILED):
            return
        self._repository.update(task, task.stop())
        self._publish_domain_events(task)

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        """进程退出：停止所有周期触发，关闭所有通道（不改写任务状态）"""
        with self._lock:
            lifetimes = list(self._lifetimes.values())

        for lifetime in lifetimes:
            if lifetime.recurrence is not None:
                self._trigger.stop(lifetime.recurrence)
            lifetime.channel.close(reason="shutdown")
        for lifetime in lifetimes:
            lifetime.listener.join(timeout)
        self._trigger.shutdown()
        logger.info(f"编排服务已退出, 关闭任务数: {len(lifetimes)}")

    def _release(self, task_id: int) -> None:
        with self._lock:
            lifetime = self._lifetimes.pop(task_id, None)
        if lifetime is not None and lifetime.recurrence is not None:
            # 监听线程因写库失败退出时，周期触发也随之停止
            self._trigger.stop(lifetime.recurrence)

# -------------------- 查询 --------------------

    def get_task_status(self, task_id: int) -> dict:
        task = self._repository.get_task(task_id)
        if task is None:
            raise TaskNotFound(task_id)

        with self._lock:
            listening = task_id in self._lifetimes

        return {
            "id": task.id,
            "task_name": task.task_name,
            "status": task.status.value,
            "counts": task.counts,
            "cron_spec": task.cron_spec,
            "recurrence_status": task.recurrence_status.value,
            "listening": listening,
            "create_at": task.created_at.isoformat() if task.created_at else None,
            "update_at": task.updated_at.isoformat() if task.updated_at else None,
        }

    def get_all_tasks(self) -> List[SpiderTask]:
        return self._repository.get_all_tasks()

    def active_task_ids(self) -> List[int]:
        with self._lock:
            return sorted(self._lifetimes)

    def _publish_domain_events(self, task: SpiderTask):
        """发布任务中积压的领域事件"""
        if not self._event_bus:
            task.clear_events()
            return

        for event in task.get_uncommitted_events():
            self._event_bus.publish(event)
        task.clear_events()
