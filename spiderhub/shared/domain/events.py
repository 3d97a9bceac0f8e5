"""
领域事件基类
写在这里是因为 event_handlers/ 中的 base_event_handler 需要识别领域事件共同的字段，
而 shared 本身独立于任何业务模块。
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict


@dataclass
class DomainEvent:
    """
    所有领域事件的基类
    自动提供时间戳和通用的数据转换接口

    timestamp 使用 kw_only，避免子类无默认值字段排在有默认值字段之后的问题
    """
    task_id: int
    timestamp: datetime = field(default_factory=datetime.now, kw_only=True)

    @property
    def event_type(self) -> str:
        """默认使用类名作为事件类型"""
        return self.__class__.__name__

    @property
    def data(self) -> Dict[str, Any]:
        """将事件字段转换为字典，排除基类字段"""
        all_data = asdict(self)
        return {
            k: v for k, v in all_data.items()
            if k not in ('task_id', 'timestamp')
        }
