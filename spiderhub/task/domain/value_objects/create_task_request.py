from dataclasses import dataclass, fields, MISSING
from typing import Any, Dict

from ..exceptions import InvalidRequestField, InvalidSinkId


def _to_int(name: str, value: Any) -> int:
    # bool 是 int 的子类，JSON 中的 true/false 不能当作数字
    if isinstance(value, bool):
        raise InvalidRequestField(name, "需要整数")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InvalidRequestField(name, f"需要整数, 实际为 {value!r}")


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise InvalidRequestField(name, f"需要布尔值, 实际为 {value!r}")


def _to_str(name: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    raise InvalidRequestField(name, f"需要字符串, 实际为 {value!r}")


_CONVERTERS = {int: _to_int, bool: _to_bool, str: _to_str}


@dataclass(frozen=True)
class CreateTaskRequest:
    """
    创建任务请求（已由接口层完成 JSON 绑定）

    字符串形式的列表字段（allowed_domains/url_filters/proxy_urls）保持原样，
    由 ConfigAssembler 负责拆分与校验；延迟字段单位为毫秒。
    """
    task_name: str
    task_rule_name: str
    output_sysdb_id: str
    task_desc: str = ""
    cron_spec: str = ""
    opt_user_agent: str = ""
    opt_max_depth: int = 0
    opt_allowed_domains: str = ""
    opt_url_filters: str = ""
    opt_max_body_size: int = 0
    opt_request_timeout: int = 0
    limit_enable: bool = False
    limit_domain_glob: str = ""
    limit_delay: int = 0
    limit_random_delay: int = 0
    limit_parallelism: int = 0
    proxy_urls: str = ""
    output_type: str = "mysql"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CreateTaskRequest":
        """
        从请求 JSON 构造
        前端使用 sysdb_id 作为输出库字段名，其余字段与属性同名，未知字段忽略。
        字段类型不符、为 null 或必填字段缺失时抛出 InvalidRequestField，
        整数字段接受数字字符串，布尔字段只接受 true/false。
        """
        data = dict(data)
        if "sysdb_id" in data:
            sysdb_id = data.pop("sysdb_id")
            if isinstance(sysdb_id, int) and not isinstance(sysdb_id, bool):
                sysdb_id = str(sysdb_id)
            data["output_sysdb_id"] = _to_str("sysdb_id", sysdb_id)

        values = {}
        for f in fields(cls):
            if f.name not in data:
                if f.default is MISSING:
                    raise InvalidRequestField("sysdb_id" if f.name == "output_sysdb_id" else f.name, "缺少必填字段")
                continue
            values[f.name] = _CONVERTERS[f.type](f.name, data[f.name])
        return cls(**values)

    def sink_id(self) -> int:
        """解析输出库 ID，非整数时抛出 InvalidSinkId"""
        try:
            return int(str(self.output_sysdb_id).strip())
        except (TypeError, ValueError) as e:
            raise InvalidSinkId(self.output_sysdb_id) from e
