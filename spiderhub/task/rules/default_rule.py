"""
内置 default 规则

只记录本次运行的执行配置，不做实际抓取，用于联调创建/周期/停止流程。
真正的爬取规则放在独立模块中，通过 SPIDERHUB_RULE_MODULES 加载。
"""

import logging

from spiderhub.task.domain.value_objects.execution_config import ExecutionConfig
from spiderhub.task.domain.value_objects.task_rule import TaskRule
from spiderhub.task.domain.value_objects.task_status import TaskStatus
from spiderhub.task.infrastructure.rule_registry_impl import register_rule

logger = logging.getLogger(__name__)

RULE_NAME = "default"


def run(config: ExecutionConfig) -> TaskStatus:
    option = config.option
    logger.info(
        f"default 规则运行: domains={sorted(option.allowed_domains)}, "
        f"filters={[p.pattern for p in option.url_filters]}, "
        f"max_depth={option.max_depth}, output={config.output.type}:{config.output.sink.db_name}"
    )
    return TaskStatus.COMPLETED


DEFAULT_RULE = register_rule(TaskRule(
    name=RULE_NAME,
    description="记录执行配置，不做实际抓取",
    run=run,
))
