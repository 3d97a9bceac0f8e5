import logging
from unittest.mock import MagicMock, patch

import pytest

from spiderhub.shared.event_handlers.logging_handler import LoggingEventHandler
from spiderhub.task.domain.domain_event.task_life_cycle_event import (
    StatusListenerExitedEvent, TaskCreatedEvent, TaskFailedEvent, TaskRunFinishedEvent, TaskStoppedEvent
)


class TestLoggingEventHandler:

    @pytest.fixture
    def mock_logger(self):
        return MagicMock()

    @pytest.fixture
    def handler(self, mock_logger):
        with patch('spiderhub.shared.event_handlers.logging_handler.get_task_lifecycle_logger',
                   return_value=mock_logger):
            yield LoggingEventHandler(max_logs_per_task=3)

    def test_created_event_logged_as_info(self, handler, mock_logger):
        handler.handle(TaskCreatedEvent(
            task_id=1, task_name="news", task_rule_name="default", cron_spec="", output_sysdb_id=7
        ))

        level, message = mock_logger.log.call_args.args
        assert level == logging.INFO
        assert "news" in message
        assert mock_logger.log.call_args.kwargs['extra']['event_type'] == "TaskCreatedEvent"

        logs = handler.get_logs(1)
        assert len(logs) == 1
        assert logs[0]['data']['task_rule_name'] == "default"

    def test_completed_run_maps_success_to_info(self, handler, mock_logger):
        handler.handle(TaskRunFinishedEvent(task_id=1, status="COMPLETED", counts=2))

        assert mock_logger.log.call_args.args[0] == logging.INFO
        assert handler.get_logs(1)[0]['level'] == "SUCCESS"

    def test_failure_and_stop_levels(self, handler, mock_logger):
        handler.handle(TaskFailedEvent(task_id=1, error_message="boom"))
        handler.handle(TaskStoppedEvent(task_id=1, reason="用户手动停止"))

        levels = [c.args[0] for c in mock_logger.log.call_args_list]
        assert levels == [logging.ERROR, logging.WARNING]
        assert handler.has_errors(1)

    def test_listener_store_error_is_error(self, handler):
        handler.handle(StatusListenerExitedEvent(task_id=2, reason="store_error"))
        handler.handle(StatusListenerExitedEvent(task_id=3, reason="shutdown"))

        assert handler.has_errors(2)
        assert not handler.has_errors(3)

    def test_logs_bounded_per_task(self, handler):
        for i in range(5):
            handler.handle(TaskRunFinishedEvent(task_id=1, status="COMPLETED", counts=i + 1))

        logs = handler.get_logs(1)
        assert [log['data']['counts'] for log in logs] == [3, 4, 5]
        assert [log['data']['counts'] for log in handler.get_logs(1, last_n=1)] == [5]

    def test_task_ids_and_clear(self, handler):
        handler.handle(TaskStoppedEvent(task_id=1, reason="x"))
        handler.handle(TaskStoppedEvent(task_id=2, reason="y"))

        assert sorted(handler.get_all_task_ids()) == [1, 2]
        handler.clear_logs(1)
        assert handler.get_logs(1) == []
        assert len(handler.get_logs(2)) == 1
