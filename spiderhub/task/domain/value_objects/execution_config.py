from dataclasses import dataclass
from datetime import timedelta
from typing import FrozenSet, Pattern, Tuple

from .data_sink import DataSinkRecord


@dataclass(frozen=True)
class CrawlOption:
    user_agent: str = ""
    max_depth: int = 0
    allowed_domains: FrozenSet[str] = frozenset()
    url_filters: Tuple[Pattern[str], ...] = ()
    allow_url_revisit: bool = False
    max_body_size: int = 0
    request_timeout: timedelta = timedelta(0)
    ignore_robots_txt: bool = False
    parse_http_error_response: bool = False
    disable_cookies: bool = False


@dataclass(frozen=True)
class RateLimit:
    enable: bool = False
    domain_glob: str = ""
    delay: timedelta = timedelta(0)
    random_delay: timedelta = timedelta(0)
    parallelism: int = 0


@dataclass(frozen=True)
class OutputConfig:
    type: str
    sink: DataSinkRecord


@dataclass(frozen=True)
class ExecutionConfig:
    """
    一次任务的完整执行配置
    构造后不可修改；首次运行与所有周期运行共享同一个实例。
    """
    option: CrawlOption
    limit: RateLimit
    output: OutputConfig
    cron_spec: str = ""
    proxy_urls: Tuple[str, ...] = ()

    @property
    def is_recurring(self) -> bool:
        return bool(self.cron_spec)
