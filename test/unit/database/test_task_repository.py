from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from spiderhub.shared.db_manager import Base
from spiderhub.task.domain.entity.spider_task import SpiderTask
from spiderhub.task.domain.exceptions import SinkNotFound, StoreError
from spiderhub.task.domain.value_objects.create_task_request import CreateTaskRequest
from spiderhub.task.domain.value_objects.task_patch import TaskPatch
from spiderhub.task.domain.value_objects.task_status import RecurrenceStatus, TaskStatus
from spiderhub.task.infrastructure.database.models import SysDBModel
from spiderhub.task.infrastructure.database.sqlalchemy_task_dao_impl import SqlAlchemyTaskDaoImpl
from spiderhub.task.infrastructure.database.sysdb_store_impl import SysDBStoreImpl
from spiderhub.task.infrastructure.database.task_repository_impl import TaskRepositoryImpl


@pytest.fixture
def dao():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    yield SqlAlchemyTaskDaoImpl(session)
    session.close()
    Base.metadata.drop_all(engine)


@pytest.fixture
def repository(dao):
    return TaskRepositoryImpl(dao)


def make_task(**overrides):
    values = dict(
        task_name="news",
        task_rule_name="default",
        output_sysdb_id="7",
        cron_spec="*/5 * * * *",
        opt_allowed_domains="a.com,b.com",
        limit_delay=200
    )
    values.update(overrides)
    return SpiderTask(request=CreateTaskRequest(**values))


def test_create_sets_running_and_identity(repository):
    task = make_task()
    task.status = TaskStatus.COMPLETED
    task.counts = 4

    created = repository.create(task)

    assert created.id > 0
    assert created.created_at is not None
    assert created.status == TaskStatus.RUNNING
    assert created.counts == 0
    assert [e.event_type for e in created.get_uncommitted_events()] == ["TaskCreatedEvent"]


def test_roundtrip_keeps_request_fields(repository):
    created = repository.create(make_task())

    loaded = repository.get_task(created.id)

    assert loaded.request == created.request
    assert loaded.request.output_sysdb_id == "7"
    assert loaded.status == TaskStatus.RUNNING
    assert loaded.recurrence_status == RecurrenceStatus.NONE


def test_update_writes_only_patched_fields(repository):
    task = repository.create(make_task())
    repository.update(task, TaskPatch(recurrence_status=RecurrenceStatus.ACTIVE))

    task.status = TaskStatus.FAILED  # in-memory only, not part of the patch
    repository.update(task, TaskPatch(counts=2))

    loaded = repository.get_task(task.id)
    assert loaded.status == TaskStatus.RUNNING
    assert loaded.counts == 2
    assert loaded.recurrence_status == RecurrenceStatus.ACTIVE


def test_update_is_idempotent(repository):
    task = repository.create(make_task())
    patch = TaskPatch(status=TaskStatus.COMPLETED, counts=1)

    repository.update(task, patch)
    once = repository.get_task(task.id)
    repository.update(task, patch)
    twice = repository.get_task(task.id)

    assert (once.status, once.counts, once.request) == (twice.status, twice.counts, twice.request)


def test_update_missing_record_raises_store_error(repository):
    task = make_task()
    task.id = 12345

    with pytest.raises(StoreError):
        repository.update(task, TaskPatch(status=TaskStatus.COMPLETED))


def test_dao_errors_become_store_errors():
    dao = Mock()
    dao.create_task.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
    dao.update_task_fields.side_effect = OperationalError("UPDATE", {}, Exception("locked"))
    repository = TaskRepositoryImpl(dao)
    task = make_task()

    with pytest.raises(StoreError):
        repository.create(task)
    assert task.id is None

    task.id = 1
    with pytest.raises(StoreError):
        repository.update(task, TaskPatch(counts=1))


def test_get_all_tasks(repository):
    repository.create(make_task(task_name="a"))
    repository.create(make_task(task_name="b"))

    assert sorted(t.task_name for t in repository.get_all_tasks()) == ["a", "b"]


def test_sysdb_store_lookup(dao):
    sysdb = dao.create_sysdb(SysDBModel(show_name="main", host="db.local", port=3307,
                                        user="spider", password="pw", db_name="news"))
    store = SysDBStoreImpl(dao)

    record = store.lookup(sysdb.id)

    assert (record.host, record.port, record.user, record.password, record.db_name) == \
        ("db.local", 3307, "spider", "pw", "news")
    assert "pw" not in repr(record)


def test_sysdb_store_unknown_id(dao):
    with pytest.raises(SinkNotFound):
        SysDBStoreImpl(dao).lookup(42)
