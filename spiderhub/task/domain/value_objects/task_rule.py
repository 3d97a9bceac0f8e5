from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass(frozen=True)
class TaskRule:
    """
    爬取规则（不可变）
    行为开关由规则决定，请求中不能覆盖。
    run 为规则自带的爬取入口，由执行引擎调用，返回 None 视为 COMPLETED。
    """
    name: str
    allow_url_revisit: bool = False
    ignore_robots_txt: bool = False
    parse_http_error_response: bool = False
    disable_cookies: bool = False
    description: str = ""
    run: Optional[Callable] = field(default=None, compare=False, repr=False)
