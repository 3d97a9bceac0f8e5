from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from .models import TaskModel, SysDBModel


class ITaskDao(ABC):
    """
    Interface for Task Data Access Object
    """

    @abstractmethod
    def create_task(self, task: TaskModel) -> TaskModel:
        """Insert a task and return it with id/created_at populated"""
        pass

    @abstractmethod
    def get_task_by_id(self, task_id: int) -> Optional[TaskModel]:
        """Get a task by ID"""
        pass

    @abstractmethod
    def update_task_fields(self, task_id: int, values: Dict[str, Any]) -> int:
        """Update only the given columns, return the number of matched rows"""
        pass

    @abstractmethod
    def get_all_tasks(self) -> List[TaskModel]:
        """Get all tasks"""
        pass

    @abstractmethod
    def get_sysdb_by_id(self, sysdb_id: int) -> Optional[SysDBModel]:
        """Get an output database record by ID"""
        pass

    @abstractmethod
    def create_sysdb(self, sysdb: SysDBModel) -> SysDBModel:
        """Insert an output database record"""
        pass
