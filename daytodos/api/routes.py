"""
API routes for day todos.
"""
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from daytodos.core.calendar import Day, UnknownDayError, parse_day
from daytodos.core.models import TaskList, Todo, TodoError
from daytodos.core.todos import TodoService
from daytodos.monitoring.health import HealthCheck
from daytodos.storage.buckets import BucketError

from .schemas import ClearDayResponse, CreateTodoResponse, HealthCheckResponse, WeekResponse

logger = structlog.get_logger(__name__)

# Create routers
todo_router = APIRouter(tags=["todos"])
monitoring_router = APIRouter(tags=["monitoring"])

# Initialize services
todo_service = TodoService()
health_check = HealthCheck()


def get_todo_service() -> TodoService:
    """Dependency returning the shared todo service."""
    return todo_service


def resolve_day(day: str) -> Day:
    """Dependency resolving the ``{day}`` path parameter."""
    try:
        return parse_day(day)
    except UnknownDayError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _server_error(event: str, error: Exception, **context: Any) -> HTTPException:
    logger.error(event, error=str(error), error_type=type(error).__name__, **context)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


@todo_router.post(
    "/day/{day}",
    response_model=CreateTodoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a todo",
    description="Store a todo for a day of the week",
)
async def create_todo(
    todo: Todo,
    day: Day = Depends(resolve_day),
    service: TodoService = Depends(get_todo_service),
) -> Dict[str, Any]:
    """Store a todo under the day given in the path."""
    try:
        key = await service.add(day, todo)
    except (BucketError, TodoError) as e:
        raise _server_error("api_create_todo_error", e, day=day.value)

    return {
        "key": key,
        "day": day.value,
        "task": todo.task,
        "message": f"put todo for {key}: {todo.task}",
    }


@todo_router.get(
    "/day/{day}",
    response_model=TaskList,
    summary="Tasks for a day",
    description="Task list for a single day of the week",
)
async def get_day_tasks(
    day: Day = Depends(resolve_day),
    service: TodoService = Depends(get_todo_service),
) -> TaskList:
    try:
        return await service.day_tasks(day)
    except (BucketError, TodoError) as e:
        raise _server_error("api_day_tasks_error", e, day=day.value)


@todo_router.delete(
    "/day/{day}",
    response_model=ClearDayResponse,
    summary="Clear a day",
    description="Delete every todo filed under a day",
)
async def clear_day(
    day: Day = Depends(resolve_day),
    service: TodoService = Depends(get_todo_service),
) -> Dict[str, Any]:
    try:
        deleted = await service.clear_day(day)
    except (BucketError, TodoError) as e:
        raise _server_error("api_clear_day_error", e, day=day.value)
    return {"day": day.value, "deleted": deleted}


@todo_router.get(
    "/weekdays",
    response_model=TaskList,
    summary="Weekday tasks",
    description="Combined task list for Monday through Friday",
)
async def get_weekday_tasks(service: TodoService = Depends(get_todo_service)) -> TaskList:
    try:
        return await service.weekday_tasks()
    except (BucketError, TodoError) as e:
        raise _server_error("api_weekday_tasks_error", e)


@todo_router.get(
    "/weekend",
    response_model=TaskList,
    summary="Weekend tasks",
    description="Combined task list for Saturday and Sunday",
)
async def get_weekend_tasks(service: TodoService = Depends(get_todo_service)) -> TaskList:
    try:
        return await service.weekend_tasks()
    except (BucketError, TodoError) as e:
        raise _server_error("api_weekend_tasks_error", e)


@todo_router.get(
    "/week",
    response_model=WeekResponse,
    summary="Whole week",
    description="Task lists for every day of the week, Monday first",
)
async def get_week(service: TodoService = Depends(get_todo_service)) -> Dict[str, Any]:
    try:
        return {"days": await service.week()}
    except (BucketError, TodoError) as e:
        raise _server_error("api_week_error", e)


@monitoring_router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="Check overall system health",
)
async def health() -> Dict[str, Any]:
    """Health check endpoint for monitoring."""
    return await health_check.check_all()


@monitoring_router.get(
    "/health/live",
    response_model=HealthCheckResponse,
    summary="Liveness probe",
)
async def liveness() -> Dict[str, Any]:
    """Liveness probe endpoint."""
    return await health_check.liveness()


@monitoring_router.get(
    "/health/ready",
    response_model=HealthCheckResponse,
    summary="Readiness probe",
)
async def readiness() -> Dict[str, Any]:
    """Readiness probe endpoint."""
    result = await health_check.readiness()
    if result["status"] != "healthy":
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result)
    return result


@monitoring_router.get(
    "/metrics",
    summary="Prometheus metrics",
    include_in_schema=False,
)
async def prometheus_metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
