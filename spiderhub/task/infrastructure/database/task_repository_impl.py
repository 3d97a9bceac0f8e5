from dataclasses import fields
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ...domain.demand_interface.i_task_repository import ITaskRepository
from ...domain.entity.spider_task import SpiderTask
from ...domain.exceptions import StoreError
from ...domain.value_objects.create_task_request import CreateTaskRequest
from ...domain.value_objects.task_patch import TaskPatch
from ...domain.value_objects.task_status import RecurrenceStatus, TaskStatus
from .i_task_dao import ITaskDao
from .models import TaskModel

# Request fields stored verbatim as columns
_REQUEST_COLUMNS = [f.name for f in fields(CreateTaskRequest) if f.name != "output_sysdb_id"]


class TaskRepositoryImpl(ITaskRepository):
    """
    任务仓储实现
    SQLAlchemy 异常在这里统一转换为 StoreError，上层不感知 ORM
    """

    def __init__(self, dao: ITaskDao):
        self._dao = dao

    def create(self, task: SpiderTask) -> SpiderTask:
        """
        写入新任务
        状态强制为 RUNNING、counts 为 0，ID 与创建时间由数据库生成后回填
        """
        task.status = TaskStatus.RUNNING
        task.counts = 0
        try:
            model = self._dao.create_task(self._to_task_model(task))
        except SQLAlchemyError as e:
            raise StoreError(f"创建任务失败: {e}") from e

        task.mark_created(model.id, model.created_at)
        return task

    def update(self, task: SpiderTask, patch: TaskPatch) -> None:
        values = {field.value: value for field, value in patch.values().items()}
        try:
            matched = self._dao.update_task_fields(task.id, values)
        except SQLAlchemyError as e:
            raise StoreError(f"更新任务 {task.id} 失败: {e}") from e
        if not matched:
            raise StoreError(f"更新任务 {task.id} 失败: 记录不存在")

    def get_task(self, task_id: int) -> Optional[SpiderTask]:
        try:
            model = self._dao.get_task_by_id(task_id)
        except SQLAlchemyError as e:
            raise StoreError(f"查询任务 {task_id} 失败: {e}") from e
        if not model:
            return None
        return self._to_task_entity(model)

    def get_all_tasks(self) -> List[SpiderTask]:
        try:
            models = self._dao.get_all_tasks()
        except SQLAlchemyError as e:
            raise StoreError(f"查询任务列表失败: {e}") from e
        return [self._to_task_entity(m) for m in models]

    # ------------------ 映射方法 ------------------

    def _to_task_model(self, task: SpiderTask) -> TaskModel:
        request = task.request
        return TaskModel(
            status=task.status.value,
            counts=task.counts,
            recurrence_status=task.recurrence_status.value,
            output_sysdb_id=request.sink_id(),
            **{name: getattr(request, name) for name in _REQUEST_COLUMNS}
        )

    def _to_task_entity(self, model: TaskModel) -> SpiderTask:
        request = CreateTaskRequest(
            output_sysdb_id=str(model.output_sysdb_id),
            **{name: getattr(model, name) for name in _REQUEST_COLUMNS}
        )
        return SpiderTask(
            request=request,
            id=model.id,
            status=TaskStatus(model.status),
            counts=model.counts,
            recurrence_status=RecurrenceStatus(model.recurrence_status),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
