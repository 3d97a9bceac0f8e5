from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskSummary:
    id: int
    created_at: datetime

    def to_dict(self) -> dict:
        return {"id": self.id, "create_at": self.created_at.isoformat()}
