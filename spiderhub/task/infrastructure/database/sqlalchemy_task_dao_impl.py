from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from spiderhub.shared.db_manager import db_session
from .models import TaskModel, SysDBModel
from .i_task_dao import ITaskDao


class SqlAlchemyTaskDaoImpl(ITaskDao):
    """
    SQLAlchemy implementation of ITaskDao
    """

    def __init__(self, session: Session = None):
        """
        :param session: Optional session for testing, otherwise uses global scoped session
        """
        self._session = session if session else db_session

    def create_task(self, task: TaskModel) -> TaskModel:
        try:
            self._session.add(task)
            self._session.commit()
            self._session.refresh(task)
            return task
        except Exception as e:
            self._session.rollback()
            raise e

    def get_task_by_id(self, task_id: int) -> Optional[TaskModel]:
        return self._session.query(TaskModel).filter(TaskModel.id == task_id).first()

    def update_task_fields(self, task_id: int, values: Dict[str, Any]) -> int:
        try:
            values = dict(values, updated_at=datetime.now())
            matched = (
                self._session.query(TaskModel)
                .filter(TaskModel.id == task_id)
                .update(values, synchronize_session=False)
            )
            self._session.commit()
            return matched
        except Exception as e:
            self._session.rollback()
            raise e

    def get_all_tasks(self) -> List[TaskModel]:
        return self._session.query(TaskModel).order_by(TaskModel.created_at.desc()).all()

    def get_sysdb_by_id(self, sysdb_id: int) -> Optional[SysDBModel]:
        return self._session.query(SysDBModel).filter(SysDBModel.id == sysdb_id).first()

    def create_sysdb(self, sysdb: SysDBModel) -> SysDBModel:
        try:
            self._session.add(sysdb)
            self._session.commit()
            self._session.refresh(sysdb)
            return sysdb
        except Exception as e:
            self._session.rollback()
            raise e
