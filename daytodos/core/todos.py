"""
Todo service: stores todos by day and reads them back as task lists.

Writes build a key from the day number and creation time. Reads turn a day
into a prefix scan and a run of days into a range scan, decode the stored
JSON and collect the task text in key order.
"""
from typing import List, Optional, Sequence, Union

import structlog

from daytodos.config import get_settings
from daytodos.core.calendar import WEEKDAYS, WEEKEND, Day, DayRange, parse_day, stamper, todo_key
from daytodos.core.models import TaskList, Todo, TodoDecodeError
from daytodos.monitoring.metrics import metrics
from daytodos.storage.buckets import Bucket, BucketStore, Item

logger = structlog.get_logger(__name__)

DayLike = Union[Day, str]


class TodoService:
    """
    Handles todo reads and writes against the todos bucket.

    Args:
        store: Optional bucket store (uses the global store if omitted)
        bucket_name: Bucket holding the todos (``settings.todos_bucket``
            if omitted)
    """

    def __init__(self, store: Optional[BucketStore] = None, bucket_name: Optional[str] = None):
        self.settings = get_settings()
        self.store = store or BucketStore()
        self.bucket_name = bucket_name or self.settings.todos_bucket

    @property
    def todos(self) -> Bucket:
        return self.store.bucket(self.bucket_name)

    async def add(self, day: DayLike, todo: Todo) -> str:
        """
        Store ``todo`` under ``day``.

        The todo is stamped with the current time if it has no creation time,
        and its ``day`` is set to the day it is filed under.

        Returns:
            str: The key the todo was stored under
        """
        day = parse_day(day)
        created = todo.created or stamper.now()
        stored = todo.model_copy(update={"day": day.value, "created": created})
        key = todo_key(day, created)

        await self.todos.put(key, stored.encode())

        metrics.record_todo_created(day.value)
        logger.info("todo_created", key=key.decode(), day=day.value, task=stored.task)
        return key.decode()

    async def day_tasks(self, day: DayLike) -> TaskList:
        """Task list for a single day."""
        day = parse_day(day)
        items = await self.todos.prefix_items(day.prefix)
        return self._task_list(day.value, items)

    async def weekday_tasks(self) -> TaskList:
        """Combined task list for Monday through Friday."""
        return await self.range_tasks(WEEKDAYS)

    async def weekend_tasks(self) -> TaskList:
        """Combined task list for Saturday and Sunday."""
        return await self.range_tasks(WEEKEND)

    async def range_tasks(self, day_range: DayRange) -> TaskList:
        items = await self.todos.range_items(day_range.start, day_range.end)
        return self._task_list(day_range.name, items)

    async def week(self) -> List[TaskList]:
        """
        One task list per day, Monday first.

        Reads the whole bucket in a single scan and groups by key prefix.
        """
        items = await self.todos.items()
        grouped = []
        for day in Day:
            day_items = [item for item in items if item.key.startswith(day.prefix)]
            grouped.append(self._task_list(day.value, day_items, record=False))

        metrics.record_task_list("week", sum(len(tl.tasks) for tl in grouped))
        return grouped

    async def clear_day(self, day: DayLike) -> int:
        """Delete every todo filed under ``day``. Returns how many were removed."""
        day = parse_day(day)
        removed = await self.todos.prefix_delete(day.prefix)

        metrics.record_todos_deleted(day.value, removed)
        logger.info("todos_cleared", day=day.value, removed=removed)
        return removed

    def _task_list(self, when: str, items: Sequence[Item], record: bool = True) -> TaskList:
        tasks = []
        for item in items:
            try:
                todo = Todo.decode(item.value)
            except TodoDecodeError:
                metrics.record_decode_error()
                logger.error(
                    "todo_decode_failed",
                    bucket=self.bucket_name,
                    key=item.key.decode("utf-8", "replace"),
                )
                raise
            tasks.append(todo.task)

        if record:
            metrics.record_task_list(when, len(tasks))
        logger.debug("task_list_built", when=when, tasks=len(tasks))
        return TaskList(when=when, tasks=tasks)
