from sqlalchemy.exc import SQLAlchemyError

from ...domain.demand_interface.i_sink_store import ISinkStore
from ...domain.exceptions import SinkNotFound, StoreError
from ...domain.value_objects.data_sink import DataSinkRecord
from .i_task_dao import ITaskDao
from .models import SysDBModel


class SysDBStoreImpl(ISinkStore):
    """输出库查询：sysdb 表 -> DataSinkRecord"""

    def __init__(self, dao: ITaskDao):
        self._dao = dao

    def lookup(self, sink_id: int) -> DataSinkRecord:
        try:
            model = self._dao.get_sysdb_by_id(sink_id)
        except SQLAlchemyError as e:
            raise StoreError(f"查询输出库 {sink_id} 失败: {e}") from e
        if model is None:
            raise SinkNotFound(sink_id)
        return self._to_record(model)

    def _to_record(self, model: SysDBModel) -> DataSinkRecord:
        return DataSinkRecord(
            id=model.id,
            show_name=model.show_name or "",
            host=model.host,
            port=model.port,
            user=model.user,
            password=model.password or "",
            db_name=model.db_name,
        )
