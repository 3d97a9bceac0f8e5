from dataclasses import dataclass, field
import datetime
from typing import List, Optional

from spiderhub.shared.domain.events import DomainEvent
from ..value_objects.create_task_request import CreateTaskRequest
from ..value_objects.task_patch import TaskPatch
from ..value_objects.task_status import RecurrenceStatus, TaskStatus
from ..domain_event.task_life_cycle_event import (
    TaskCreatedEvent, TaskRunFinishedEvent, TaskFailedEvent, TaskStoppedEvent,
    RecurrenceScheduledEvent, RecurrenceFailedEvent
)


@dataclass
class SpiderTask:
    """
    爬取任务实体类，作为聚合根

    status/counts 的变更只通过返回 TaskPatch 的方法进行，
    调用方负责把 patch 交给仓储持久化。
    """
    request: CreateTaskRequest
    id: Optional[int] = None
    status: TaskStatus = TaskStatus.RUNNING
    counts: int = 0
    recurrence_status: RecurrenceStatus = RecurrenceStatus.NONE
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    _life_cycle_events: List[DomainEvent] = field(default_factory=list, init=False, repr=False, compare=False)

    @property
    def task_name(self) -> str:
        return self.request.task_name

    @property
    def cron_spec(self) -> str:
        return self.request.cron_spec

    @property
    def is_recurring(self) -> bool:
        return bool(self.request.cron_spec)

    def _record_event(self, event: DomainEvent):
        """内部方法：记录领域事件"""
        self._life_cycle_events.append(event)
        self.updated_at = datetime.datetime.now()

    def get_uncommitted_events(self) -> List[DomainEvent]:
        """获取未发布的领域事件（由应用服务读取并发布）"""
        return list(self._life_cycle_events)

    def clear_events(self):
        """清空已发布的事件"""
        self._life_cycle_events.clear()

#-------------------   状态转换方法   -------------------

    def mark_created(self, task_id: int, created_at: datetime.datetime):
        """仓储写入成功后回填 ID 与创建时间"""
        self.id = task_id
        self.created_at = created_at
        self.updated_at = created_at
        self._record_event(TaskCreatedEvent(
            task_id=task_id,
            task_name=self.request.task_name,
            task_rule_name=self.request.task_rule_name,
            cron_spec=self.request.cron_spec,
            output_sysdb_id=self.request.sink_id()
        ))

    def apply_completion(self, status: TaskStatus) -> TaskPatch:
        """
        处理一次完成信号
        COMPLETED 时累加完成次数，其他状态只更新 status
        """
        self.status = status
        if status == TaskStatus.COMPLETED:
            self.counts += 1

        if status == TaskStatus.FAILED:
            self._record_event(TaskFailedEvent(
                task_id=self.id,
                error_message="执行引擎报告运行失败",
                counts=self.counts
            ))
        else:
            self._record_event(TaskRunFinishedEvent(
                task_id=self.id,
                status=status.value,
                counts=self.counts
            ))
        return TaskPatch(status=self.status, counts=self.counts)

    def fail_launch(self, error_message: str) -> TaskPatch:
        """首次启动失败"""
        self.status = TaskStatus.FAILED
        self._record_event(TaskFailedEvent(
            task_id=self.id,
            error_message=error_message,
            counts=self.counts
        ))
        return TaskPatch(status=self.status)

    def stop(self, reason: str = "用户手动停止") -> TaskPatch:
        """显式停止：保留 counts，状态置为 STOPPED"""
        self.status = TaskStatus.STOPPED
        self.recurrence_status = RecurrenceStatus.NONE
        self._record_event(TaskStoppedEvent(task_id=self.id, reason=reason))
        return TaskPatch(status=self.status, recurrence_status=self.recurrence_status)

    def activate_recurrence(self) -> TaskPatch:
        self.recurrence_status = RecurrenceStatus.ACTIVE
        self._record_event(RecurrenceScheduledEvent(task_id=self.id, cron_spec=self.cron_spec))
        return TaskPatch(recurrence_status=self.recurrence_status)

    def fail_recurrence(self, error_message: str) -> TaskPatch:
        """周期注册失败：不回滚任务，只记录子状态"""
        self.recurrence_status = RecurrenceStatus.FAILED
        self._record_event(RecurrenceFailedEvent(
            task_id=self.id,
            cron_spec=self.cron_spec,
            error_message=error_message
        ))
        return TaskPatch(recurrence_status=self.recurrence_status)
