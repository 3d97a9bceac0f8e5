# Orchestration exceptions module
from .orchestration_exceptions import (
    OrchestrationError,
    ValidationError,
    InvalidFilterPattern,
    InvalidSinkId,
    InvalidRequestField,
    NotFoundError,
    RuleNotFound,
    SinkNotFound,
    TaskNotFound,
    StoreError,
    LaunchError,
    ScheduleError,
    ChannelAlreadyConsumed,
)

__all__ = [
    'OrchestrationError', 'ValidationError', 'InvalidFilterPattern', 'InvalidSinkId', 'InvalidRequestField',
    'NotFoundError', 'RuleNotFound', 'SinkNotFound', 'TaskNotFound',
    'StoreError', 'LaunchError', 'ScheduleError', 'ChannelAlreadyConsumed',
]
