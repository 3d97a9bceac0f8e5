from dataclasses import dataclass, field


@dataclass(frozen=True)
class DataSinkRecord:
    """输出目标数据库的连接信息（sysdb 表中的一行）"""
    id: int
    host: str
    port: int
    user: str
    password: str = field(repr=False)
    db_name: str
    show_name: str = ""
