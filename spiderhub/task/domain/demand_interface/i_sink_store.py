from abc import ABC, abstractmethod
from ..value_objects.data_sink import DataSinkRecord


class ISinkStore(ABC):

    @abstractmethod
    def lookup(self, sink_id: int) -> DataSinkRecord:
        """按ID查找输出库，不存在时抛出 SinkNotFound"""
        pass
