"""
执行配置组装

把请求、规则、输出库三者合成一份不可变的 ExecutionConfig：
- 逗号分隔的域名/代理拆分并去除空白，过滤规则按原样保留，空串得到空集合；
- 过滤规则逐个编译，遇到第一个无效规则即失败，不返回部分结果；
- 行为开关只取自规则，请求无法覆盖；
- 毫秒整数转换为 timedelta。
"""

import logging
import re
from datetime import timedelta
from typing import FrozenSet, Pattern, Tuple

from ..demand_interface.i_sink_store import ISinkStore
from ..exceptions import InvalidFilterPattern
from ..value_objects.create_task_request import CreateTaskRequest
from ..value_objects.data_sink import DataSinkRecord
from ..value_objects.execution_config import CrawlOption, ExecutionConfig, OutputConfig, RateLimit
from ..value_objects.task_rule import TaskRule

logger = logging.getLogger(__name__)


def split_list(raw: str) -> Tuple[str, ...]:
    """拆分逗号分隔的字符串，去掉首尾空白与空项"""
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def compile_url_filters(raw: str) -> Tuple[Pattern[str], ...]:
    """逐个编译过滤规则；正则按原样编译（不去除空白），只跳过空项"""
    patterns = []
    for item in (raw.split(",") if raw else ()):
        if not item:
            continue
        try:
            patterns.append(re.compile(item))
        except re.error as e:
            raise InvalidFilterPattern(item, e) from e
    return tuple(patterns)


def millis(value: int) -> timedelta:
    return timedelta(milliseconds=value or 0)


class ConfigAssembler:
    """
    领域服务 - 执行配置组装
    依赖输出库存储（ISinkStore）把 sysdb_id 解析为连接信息
    """

    def __init__(self, sink_store: ISinkStore):
        self._sink_store = sink_store

    def build(self, request: CreateTaskRequest, rule: TaskRule) -> ExecutionConfig:
        """
        解析输出库并组装配置

        顺序与失败语义：
        1. sysdb_id 非整数 -> InvalidSinkId
        2. 过滤规则无效 -> InvalidFilterPattern（此时不会访问输出库存储）
        3. 输出库不存在 -> SinkNotFound
        """
        sink_id = request.sink_id()
        url_filters = compile_url_filters(request.opt_url_filters)
        sink = self._sink_store.lookup(sink_id)
        return self._assemble(request, rule, sink, url_filters)

    def assemble(self, request: CreateTaskRequest, rule: TaskRule, sink: DataSinkRecord) -> ExecutionConfig:
        return self._assemble(request, rule, sink, compile_url_filters(request.opt_url_filters))

    def _assemble(
        self,
        request: CreateTaskRequest,
        rule: TaskRule,
        sink: DataSinkRecord,
        url_filters: Tuple[Pattern[str], ...]
    ) -> ExecutionConfig:
        allowed_domains: FrozenSet[str] = frozenset(split_list(request.opt_allowed_domains))

        config = ExecutionConfig(
            cron_spec=request.cron_spec,
            option=CrawlOption(
                user_agent=request.opt_user_agent,
                max_depth=request.opt_max_depth,
                allowed_domains=allowed_domains,
                url_filters=url_filters,
                allow_url_revisit=rule.allow_url_revisit,
                max_body_size=request.opt_max_body_size,
                request_timeout=millis(request.opt_request_timeout),
                ignore_robots_txt=rule.ignore_robots_txt,
                parse_http_error_response=rule.parse_http_error_response,
                disable_cookies=rule.disable_cookies,
            ),
            limit=RateLimit(
                enable=request.limit_enable,
                domain_glob=request.limit_domain_glob,
                delay=millis(request.limit_delay),
                random_delay=millis(request.limit_random_delay),
                parallelism=request.limit_parallelism,
            ),
            output=OutputConfig(type=request.output_type, sink=sink),
            proxy_urls=split_list(request.proxy_urls),
        )
        logger.debug(f"配置组装完成: rule={rule.name}, sink={sink.id}, filters={len(url_filters)}")
        return config
