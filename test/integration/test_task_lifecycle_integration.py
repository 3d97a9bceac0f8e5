"""
任务生命周期集成测试
真实的仓储（sqlite 文件库）、执行引擎、监听线程；周期触发器用手动触发的替身
"""

import threading
import time

import pytest

from spiderhub import create_app
from spiderhub.shared.db_manager import db_session, init_db, init_engine
from spiderhub.shared.event_bus import EventBus
from spiderhub.shared.event_handlers.logging_handler import LoggingEventHandler
from spiderhub.task.domain.demand_interface.i_recurrence_trigger import IRecurrenceTrigger
from spiderhub.task.domain.domain_service.config_assembler import ConfigAssembler
from spiderhub.task.domain.exceptions import LaunchError, SinkNotFound
from spiderhub.task.domain.value_objects.create_task_request import CreateTaskRequest
from spiderhub.task.domain.value_objects.task_rule import TaskRule
from spiderhub.task.domain.value_objects.task_status import RecurrenceStatus, TaskStatus
from spiderhub.task.infrastructure.apscheduler_trigger_impl import fire
from spiderhub.task.infrastructure.database.models import SysDBModel
from spiderhub.task.infrastructure.database.sqlalchemy_task_dao_impl import SqlAlchemyTaskDaoImpl
from spiderhub.task.infrastructure.database.sysdb_store_impl import SysDBStoreImpl
from spiderhub.task.infrastructure.database.task_repository_impl import TaskRepositoryImpl
from spiderhub.task.infrastructure.rule_registry_impl import RuleRegistryImpl
from spiderhub.task.infrastructure.thread_crawl_engine_impl import ThreadCrawlEngineImpl
from spiderhub.task.services.task_orchestrator_service import TaskOrchestratorService


class ManualTrigger(IRecurrenceTrigger):
    """测试用周期触发器：调用 tick() 模拟一次 cron 触发"""

    def __init__(self):
        self.active = {}
        self._next = 0

    def register(self, job, channel, spec):
        self._next += 1
        self.active[self._next] = (job, channel)
        return self._next

    def start(self, handle):
        pass

    def stop(self, handle):
        self.active.pop(handle, None)

    def shutdown(self):
        self.active.clear()

    def tick(self):
        for job, channel in list(self.active.values()):
            fire(job, channel)


def wait_until(predicate, timeout=5.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


@pytest.fixture
def dao(tmp_path):
    init_engine(f"sqlite:///{tmp_path / 'spiderhub.db'}")
    init_db()
    yield SqlAlchemyTaskDaoImpl(db_session)
    db_session.remove()


@pytest.fixture
def sink_id(dao):
    sysdb = dao.create_sysdb(SysDBModel(host="localhost", port=3306, user="root", password="", db_name="spider"))
    return sysdb.id


@pytest.fixture
def gate():
    """每次运行结束前等待放行，便于控制运行次数"""
    return threading.Semaphore(0)


@pytest.fixture
def rules(gate):
    registry = RuleRegistryImpl()

    def run(config):
        gate.acquire(timeout=5)

    registry.register(TaskRule(name="default", run=run))
    registry.register(TaskRule(name="broken", run=lambda config: 1 / 0))
    return registry


@pytest.fixture
def trigger():
    return ManualTrigger()


@pytest.fixture
def repository(dao):
    return TaskRepositoryImpl(dao)


@pytest.fixture
def service(dao, rules, repository, trigger):
    event_bus = EventBus()
    event_bus.subscribe_to_all(LoggingEventHandler().handle)
    svc = TaskOrchestratorService(
        rule_store=rules,
        config_assembler=ConfigAssembler(SysDBStoreImpl(dao)),
        repository=repository,
        engine=ThreadCrawlEngineImpl(),
        recurrence_trigger=trigger,
        event_bus=event_bus
    )
    yield svc
    svc.shutdown(timeout=2)


def load(repository, task_id):
    # 丢弃本线程会话中的缓存，读取监听线程写入的最新状态
    db_session.remove()
    return repository.get_task(task_id)


def make_request(sink_id, **overrides):
    values = dict(task_name="news", task_rule_name="default", output_sysdb_id=str(sink_id))
    values.update(overrides)
    return CreateTaskRequest(**values)


def test_one_shot_task_completes(service, repository, sink_id, gate):
    summary = service.create_task(make_request(sink_id))

    task = load(repository, summary.id)
    assert task.status == TaskStatus.RUNNING
    assert task.counts == 0

    gate.release()

    assert wait_until(lambda: load(repository, summary.id).status == TaskStatus.COMPLETED)
    assert load(repository, summary.id).counts == 1


def test_failing_rule_marks_failed(service, repository, sink_id):
    summary = service.create_task(make_request(sink_id, task_rule_name="broken"))

    assert wait_until(lambda: load(repository, summary.id).status == TaskStatus.FAILED)
    assert load(repository, summary.id).counts == 0


def test_recurring_task_counts_every_run(service, repository, trigger, sink_id, gate):
    summary = service.create_task(make_request(sink_id, cron_spec="*/5 * * * *"))
    assert load(repository, summary.id).recurrence_status == RecurrenceStatus.ACTIVE

    gate.release()
    assert wait_until(lambda: load(repository, summary.id).counts == 1)

    trigger.tick()
    gate.release()
    assert wait_until(lambda: load(repository, summary.id).counts == 2)

    task = load(repository, summary.id)
    assert task.status == TaskStatus.COMPLETED


def test_stop_recurring_task(service, repository, trigger, sink_id, gate):
    summary = service.create_task(make_request(sink_id, cron_spec="0 * * * *"))
    gate.release()
    assert wait_until(lambda: load(repository, summary.id).counts == 1)

    service.stop_task(summary.id)

    assert wait_until(lambda: load(repository, summary.id).status == TaskStatus.STOPPED)
    assert trigger.active == {}
    task = load(repository, summary.id)
    assert task.counts == 1
    assert task.recurrence_status == RecurrenceStatus.NONE
    assert summary.id not in service.active_task_ids()


def test_unknown_sink_leaves_no_record(service, repository, dao):
    with pytest.raises(SinkNotFound):
        service.create_task(make_request(404))

    assert dao.get_all_tasks() == []


def test_launch_error_persists_failed(service, repository, dao, sink_id):
    with pytest.raises(LaunchError):
        service.create_task(make_request(sink_id, output_type="csv"))

    tasks = repository.get_all_tasks()
    assert len(tasks) == 1
    assert tasks[0].status == TaskStatus.FAILED


def test_http_create_and_status(service, repository, sink_id, gate):
    client = create_app(service=service).test_client()

    response = client.post('/api/task/create', json={
        "task_name": "news", "task_rule_name": "default", "sysdb_id": sink_id
    })
    assert response.status_code == 200
    task_id = response.get_json()["id"]

    status = client.get(f'/api/task/status/{task_id}').get_json()
    assert status["status"] == "RUNNING"
    assert status["listening"] is True

    gate.release()
    assert wait_until(lambda: load(repository, task_id).counts == 1)


def test_http_mistyped_field_leaves_no_record(service, dao, sink_id):
    client = create_app(service=service).test_client()

    response = client.post('/api/task/create', json={
        "task_name": "news", "task_rule_name": "default", "sysdb_id": sink_id, "opt_max_depth": "deep"
    })

    assert response.status_code == 400
    assert dao.get_all_tasks() == []
    assert service.active_task_ids() == []
