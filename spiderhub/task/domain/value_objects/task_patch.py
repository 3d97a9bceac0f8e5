from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from .task_status import RecurrenceStatus, TaskStatus


class TaskField(Enum):
    """允许部分更新的任务字段，值为数据库列名"""
    STATUS = "status"
    COUNTS = "counts"
    RECURRENCE_STATUS = "recurrence_status"


@dataclass(frozen=True)
class TaskPatch:
    """
    任务的部分更新
    只有非 None 的字段会被写入，其余列保持数据库中的原值。
    """
    status: Optional[TaskStatus] = None
    counts: Optional[int] = None
    recurrence_status: Optional[RecurrenceStatus] = None

    def __post_init__(self):
        if self.status is None and self.counts is None and self.recurrence_status is None:
            raise ValueError("TaskPatch 至少需要一个字段")
        if self.counts is not None and self.counts < 0:
            raise ValueError(f"counts 不能为负数: {self.counts}")

    def fields(self) -> FrozenSet[TaskField]:
        return frozenset(self.values().keys())

    def values(self) -> Dict[TaskField, Any]:
        """字段 -> 待写入的列值"""
        values = {}
        if self.status is not None:
            values[TaskField.STATUS] = self.status.value
        if self.counts is not None:
            values[TaskField.COUNTS] = self.counts
        if self.recurrence_status is not None:
            values[TaskField.RECURRENCE_STATUS] = self.recurrence_status.value
        return values
