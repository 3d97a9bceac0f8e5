"""
配置模块
- 从 .env 与环境变量读取运行配置（python-dotenv）；
- 只在应用启动时读取一次，之后以不可变的 Settings 传递给各组件。
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///spiderhub.db"
DEFAULT_RULE_MODULES = ("spiderhub.task.rules.default_rule",)


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    log_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")
    log_level: str = "INFO"
    scheduler_timezone: str = "UTC"
    rule_modules: Tuple[str, ...] = DEFAULT_RULE_MODULES


def _split_modules(raw: str) -> Tuple[str, ...]:
    return tuple(m.strip() for m in raw.split(",") if m.strip())


def load_settings(env_path: Optional[str] = None) -> Settings:
    """
    读取配置

    参数:
        env_path: .env 文件路径，None 时按 python-dotenv 的默认规则向上查找
    """
    load_dotenv(env_path)

    log_dir = os.getenv("SPIDERHUB_LOG_DIR")
    return Settings(
        database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
        log_dir=Path(log_dir) if log_dir else Path.cwd() / "logs",
        log_level=os.getenv("SPIDERHUB_LOG_LEVEL", "INFO").upper(),
        scheduler_timezone=os.getenv("SPIDERHUB_SCHEDULER_TIMEZONE", "UTC"),
        rule_modules=_split_modules(os.getenv("SPIDERHUB_RULE_MODULES", "")) or DEFAULT_RULE_MODULES,
    )
