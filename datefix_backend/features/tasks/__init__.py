from .base import ScheduledTask, TaskTriggerInfo, describe_task
from .fix_date_created import FixDateCreatedTask
from .runner import TaskRunner

__all__ = ["ScheduledTask", "TaskTriggerInfo", "describe_task", "FixDateCreatedTask", "TaskRunner"]
