from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from spiderhub.shared.db_manager import Base
from datetime import datetime


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="Task ID")
    task_name = Column(String(64), nullable=False, comment="Task Name")
    task_rule_name = Column(String(64), nullable=False, comment="Rule Name")
    task_desc = Column(String(512), default="", comment="Description")

    status = Column(String(32), nullable=False, default="RUNNING", comment="Task Status")
    counts = Column(Integer, nullable=False, default=0, comment="Completed Runs")
    cron_spec = Column(String(64), default="", comment="Cron Spec")
    recurrence_status = Column(String(32), nullable=False, default="NONE", comment="Recurrence Sub-status")

    # Request options flattened
    opt_user_agent = Column(String(256), default="")
    opt_max_depth = Column(Integer, default=0)
    opt_allowed_domains = Column(Text, default="")
    opt_url_filters = Column(Text, default="")
    opt_max_body_size = Column(Integer, default=0)
    opt_request_timeout = Column(Integer, default=0, comment="Milliseconds")

    limit_enable = Column(Boolean, default=False)
    limit_domain_glob = Column(String(128), default="")
    limit_delay = Column(Integer, default=0, comment="Milliseconds")
    limit_random_delay = Column(Integer, default=0, comment="Milliseconds")
    limit_parallelism = Column(Integer, default=0)

    proxy_urls = Column(Text, default="")
    output_type = Column(String(32), default="mysql")
    output_sysdb_id = Column(Integer, nullable=False, comment="Output SysDB ID")

    created_at = Column(DateTime, default=datetime.now, comment="Creation Time")
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, comment="Update Time")

    def __repr__(self):
        return f"<TaskModel(id={self.id}, status={self.status}, counts={self.counts})>"


class SysDBModel(Base):
    __tablename__ = "sysdb"

    id = Column(Integer, primary_key=True, autoincrement=True)
    show_name = Column(String(64), default="")
    host = Column(String(128), nullable=False)
    port = Column(Integer, nullable=False, default=3306)
    user = Column(String(64), nullable=False)
    password = Column(String(128), default="")
    db_name = Column(String(64), nullable=False)

    created_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        return f"<SysDBModel(id={self.id}, host={self.host}, db_name={self.db_name})>"
