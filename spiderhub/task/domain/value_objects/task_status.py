from enum import Enum


class TaskStatus(Enum):
    """
    任务状态

    RUNNING   - 创建后立即进入，运行中（含周期任务的等待期）
    COMPLETED - 执行引擎报告一次运行成功结束
    FAILED    - 执行引擎报告运行异常，或首次启动失败
    STOPPED   - 通过 stop_task 显式停止
    """
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    STOPPED = "STOPPED"


class RecurrenceStatus(Enum):
    """周期调度子状态：注册失败时任务仍为 RUNNING，但不再周期执行"""
    NONE = "NONE"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"
