from abc import ABC, abstractmethod
from ..value_objects.task_rule import TaskRule


class IRuleStore(ABC):

    @abstractmethod
    def resolve(self, name: str) -> TaskRule:
        """按名称查找规则，不存在时抛出 RuleNotFound"""
        pass
