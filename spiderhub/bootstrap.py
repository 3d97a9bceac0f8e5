"""
组合根：组装编排服务的全部依赖
"""

from typing import Optional

from .shared.db_manager import db_session, init_db, init_engine
from .shared.event_bus import EventBus
from .shared.settings import Settings
from .task.domain.domain_service.config_assembler import ConfigAssembler
from .task.infrastructure.apscheduler_trigger_impl import ApschedulerRecurrenceTrigger
from .task.infrastructure.database.sqlalchemy_task_dao_impl import SqlAlchemyTaskDaoImpl
from .task.infrastructure.database.sysdb_store_impl import SysDBStoreImpl
from .task.infrastructure.database.task_repository_impl import TaskRepositoryImpl
from .task.infrastructure.rule_registry_impl import get_default_registry, load_rule_modules
from .task.infrastructure.thread_crawl_engine_impl import ThreadCrawlEngineImpl
from .task.services.task_orchestrator_service import TaskOrchestratorService


def build_task_service(settings: Settings, event_bus: Optional[EventBus] = None) -> TaskOrchestratorService:
    init_engine(settings.database_url)
    init_db()
    load_rule_modules(settings.rule_modules)

    dao = SqlAlchemyTaskDaoImpl(db_session)
    return TaskOrchestratorService(
        rule_store=get_default_registry(),
        config_assembler=ConfigAssembler(SysDBStoreImpl(dao)),
        repository=TaskRepositoryImpl(dao),
        engine=ThreadCrawlEngineImpl(),
        recurrence_trigger=ApschedulerRecurrenceTrigger(timezone=settings.scheduler_timezone),
        event_bus=event_bus
    )
