from abc import ABC, abstractmethod
from typing import List, Optional
from ..entity.spider_task import SpiderTask
from ..value_objects.task_patch import TaskPatch


class ITaskRepository(ABC):
    """
    任务仓储接口
    负责领域对象 SpiderTask 的持久化；失败统一抛出 StoreError
    """

    @abstractmethod
    def create(self, task: SpiderTask) -> SpiderTask:
        """写入新任务（状态置为 RUNNING），回填 ID 与创建时间"""
        pass

    @abstractmethod
    def update(self, task: SpiderTask, patch: TaskPatch) -> None:
        """只写入 patch 中的字段"""
        pass

    @abstractmethod
    def get_task(self, task_id: int) -> Optional[SpiderTask]:
        """根据ID获取任务"""
        pass

    @abstractmethod
    def get_all_tasks(self) -> List[SpiderTask]:
        """获取所有任务"""
        pass
