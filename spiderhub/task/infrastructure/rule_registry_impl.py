"""
爬取规则注册表

规则在代码中注册（通常在规则模块被 import 时调用 register_rule），
启动时通过 SPIDERHUB_RULE_MODULES 指定需要加载的规则模块。
"""

import importlib
import logging
from threading import Lock
from typing import Dict, Iterable, List

from ..domain.demand_interface.i_rule_store import IRuleStore
from ..domain.exceptions import RuleNotFound
from ..domain.value_objects.task_rule import TaskRule

logger = logging.getLogger(__name__)


class RuleRegistryImpl(IRuleStore):

    def __init__(self):
        self._rules: Dict[str, TaskRule] = {}
        self._lock = Lock()

    def register(self, rule: TaskRule) -> TaskRule:
        with self._lock:
            if rule.name in self._rules:
                raise ValueError(f"规则重复注册: {rule.name}")
            self._rules[rule.name] = rule
        logger.info(f"注册爬取规则: {rule.name}")
        return rule

    def resolve(self, name: str) -> TaskRule:
        with self._lock:
            rule = self._rules.get(name)
        if rule is None:
            raise RuleNotFound(name)
        return rule

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._rules)


_default_registry = RuleRegistryImpl()


def get_default_registry() -> RuleRegistryImpl:
    return _default_registry


def register_rule(rule: TaskRule) -> TaskRule:
    """注册到全局规则表，供规则模块在 import 时调用"""
    return _default_registry.register(rule)


def load_rule_modules(modules: Iterable[str]) -> None:
    for module in modules:
        importlib.import_module(module)
        logger.info(f"加载规则模块: {module}")
