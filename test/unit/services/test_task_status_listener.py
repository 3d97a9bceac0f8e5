from datetime import datetime
from unittest.mock import Mock

import pytest

from spiderhub.task.domain.demand_interface.completion_channel import CompletionChannel
from spiderhub.task.domain.entity.spider_task import SpiderTask
from spiderhub.task.domain.exceptions import StoreError
from spiderhub.task.domain.value_objects.create_task_request import CreateTaskRequest
from spiderhub.task.domain.value_objects.task_patch import TaskPatch
from spiderhub.task.domain.value_objects.task_status import RecurrenceStatus, TaskStatus
from spiderhub.task.services.task_status_listener import TaskStatusListener


@pytest.fixture
def task():
    t = SpiderTask(request=CreateTaskRequest(task_name="news", task_rule_name="default", output_sysdb_id="7"))
    t.mark_created(11, datetime(2026, 1, 1))
    t.clear_events()
    return t


@pytest.fixture
def repository():
    return Mock()


@pytest.fixture
def event_bus():
    return Mock()


def make_listener(task, channel, repository, event_bus, on_exit=None):
    return TaskStatusListener(
        task=task,
        receiver=channel.take_receiver(),
        repository=repository,
        event_bus=event_bus,
        on_exit=on_exit
    )


def test_persists_each_signal_in_order(task, repository, event_bus):
    channel = CompletionChannel()
    listener = make_listener(task, channel, repository, event_bus)

    for status in [TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.COMPLETED]:
        channel.send(status)
    channel.close(reason="shutdown")
    listener.run()

    patches = [c.args[1] for c in repository.update.call_args_list]
    assert patches == [
        TaskPatch(status=TaskStatus.COMPLETED, counts=1),
        TaskPatch(status=TaskStatus.FAILED, counts=1),
        TaskPatch(status=TaskStatus.COMPLETED, counts=2),
    ]
    assert listener.exit_reason == "shutdown"


def test_store_error_terminates_listener(task, repository, event_bus):
    channel = CompletionChannel()
    on_exit = Mock()
    listener = make_listener(task, channel, repository, event_bus, on_exit)
    repository.update.side_effect = [None, StoreError("db down")]

    channel.send(TaskStatus.COMPLETED)
    channel.send(TaskStatus.COMPLETED)
    channel.send(TaskStatus.COMPLETED)
    listener.run()

    assert repository.update.call_count == 2
    assert listener.exit_reason == "store_error"
    on_exit.assert_called_once_with(11)
    published = [c.args[0].event_type for c in event_bus.publish.call_args_list]
    assert published[-1] == "StatusListenerExitedEvent"


def test_close_with_stopped_writes_final_status(task, repository, event_bus):
    channel = CompletionChannel()
    listener = make_listener(task, channel, repository, event_bus)

    channel.close(final_status=TaskStatus.STOPPED, reason="用户手动停止")
    listener.run()

    repository.update.assert_called_once_with(
        task, TaskPatch(status=TaskStatus.STOPPED, recurrence_status=RecurrenceStatus.NONE)
    )
    assert task.status == TaskStatus.STOPPED


def test_shutdown_close_does_not_write(task, repository, event_bus):
    channel = CompletionChannel()
    listener = make_listener(task, channel, repository, event_bus)

    channel.close(reason="shutdown")
    listener.run()

    repository.update.assert_not_called()


def test_runs_in_background_thread(task, repository, event_bus):
    channel = CompletionChannel()
    listener = make_listener(task, channel, repository, event_bus)

    listener.start()
    channel.send(TaskStatus.COMPLETED)
    channel.close(reason="shutdown")
    listener.join(timeout=5)

    assert not listener.is_alive()
    assert task.counts == 1
    with pytest.raises(RuntimeError):
        listener.start()
