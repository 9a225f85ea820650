from .status import register_status_routes
from .tasks import register_task_routes

__all__ = ["register_status_routes", "register_task_routes"]
