"""Core todo logic: calendar keys, models and the todo service."""
from .calendar import WEEKDAYS, WEEKEND, Day, DayRange, UnknownDayError, parse_day, todo_key
from .models import TaskList, Todo, TodoDecodeError, TodoError
from .todos import TodoService

__all__ = [
    "Day",
    "DayRange",
    "TaskList",
    "Todo",
    "TodoDecodeError",
    "TodoError",
    "TodoService",
    "UnknownDayError",
    "WEEKDAYS",
    "WEEKEND",
    "parse_day",
    "todo_key",
]
