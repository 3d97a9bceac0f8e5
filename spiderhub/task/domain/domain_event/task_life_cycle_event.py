from dataclasses import dataclass
from spiderhub.shared.domain.events import DomainEvent


@dataclass
class TaskCreatedEvent(DomainEvent):
    task_name: str
    task_rule_name: str
    cron_spec: str
    output_sysdb_id: int


@dataclass
class TaskRunFinishedEvent(DomainEvent):
    status: str
    counts: int


@dataclass
class TaskFailedEvent(DomainEvent):
    error_message: str
    counts: int = 0


@dataclass
class TaskStoppedEvent(DomainEvent):
    reason: str = "用户手动停止"


@dataclass
class RecurrenceScheduledEvent(DomainEvent):
    cron_spec: str


@dataclass
class RecurrenceFailedEvent(DomainEvent):
    cron_spec: str
    error_message: str


@dataclass
class StatusListenerExitedEvent(DomainEvent):
    reason: str
