"""FastAPI application and routes."""
from .main import app
from .schemas import ClearDayResponse, CreateTodoResponse, HealthCheckResponse, WeekResponse

__all__ = [
    "app",
    "ClearDayResponse",
    "CreateTodoResponse",
    "HealthCheckResponse",
    "WeekResponse",
]
