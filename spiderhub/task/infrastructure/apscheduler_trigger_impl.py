"""
周期触发器（APScheduler）

每个周期任务对应一个 cron job；触发时调用作业句柄的 rerun()，
结果写回同一个完成信号通道，由任务唯一的监听线程处理。
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger

from ..domain.demand_interface.completion_channel import CompletionChannel
from ..domain.demand_interface.i_crawl_engine import ICrawlJob
from ..domain.demand_interface.i_recurrence_trigger import IRecurrenceTrigger
from ..domain.exceptions import ScheduleError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecurrenceHandle:
    job_id: str
    spec: str


def fire(job: ICrawlJob, channel: CompletionChannel) -> None:
    """cron 触发回调：通道关闭后不再重跑"""
    if channel.closed:
        return
    job.rerun()


class ApschedulerRecurrenceTrigger(IRecurrenceTrigger):

    def __init__(self, scheduler: Optional[BaseScheduler] = None, timezone: str = "UTC"):
        self._timezone = timezone
        self._scheduler = scheduler or BackgroundScheduler(
            timezone=timezone,
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
            }
        )

    def register(self, job: ICrawlJob, channel: CompletionChannel, spec: str) -> RecurrenceHandle:
        """注册为暂停状态的 cron job，start() 后才开始触发"""
        try:
            trigger = CronTrigger.from_crontab(spec, timezone=self._timezone)
        except ValueError as e:
            raise ScheduleError(f"cron 表达式无效: {spec!r} ({e})") from e

        handle = RecurrenceHandle(job_id=uuid.uuid4().hex, spec=spec)
        try:
            self._scheduler.add_job(
                fire,
                trigger=trigger,
                id=handle.job_id,
                args=[job, channel],
                next_run_time=None,
                replace_existing=True,
            )
        except Exception as e:
            raise ScheduleError(f"注册周期任务失败: {e}") from e
        return handle

    def start(self, handle: RecurrenceHandle) -> None:
        try:
            if not self._scheduler.running:
                self._scheduler.start()
            self._scheduler.resume_job(handle.job_id)
        except JobLookupError as e:
            raise ScheduleError(f"周期任务不存在: {handle.job_id}") from e
        except Exception as e:
            raise ScheduleError(f"启动周期任务失败: {e}") from e
        logger.info(f"周期任务已启动: {handle.spec} ({handle.job_id})")

    def stop(self, handle: RecurrenceHandle) -> None:
        try:
            self._scheduler.remove_job(handle.job_id)
        except JobLookupError:
            logger.debug(f"周期任务已移除: {handle.job_id}")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
