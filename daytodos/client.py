"""
HTTP client for the day todos API, plus the demo walkthrough.

The demo posts a week of chores and reads them back per day, for the
weekdays and for the weekend.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
import structlog

from daytodos.core.calendar import Day, parse_day, stamper
from daytodos.core.models import TaskList, Todo

logger = structlog.get_logger(__name__)


class ClientError(Exception):
    """Raised when a request fails or the server answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


DEMO_TODOS = [
    Todo(day="mon", task="milk cows"),
    Todo(day="mon", task="feed cows"),
    Todo(day="mon", task="wash cows"),
    Todo(day="tue", task="wash laundry"),
    Todo(day="tue", task="fold laundry"),
    Todo(day="tue", task="iron laundry"),
    Todo(day="wed", task="flip burgers"),
    Todo(day="thu", task="join army"),
    Todo(day="fri", task="kill time"),
    Todo(day="sat", task="have beer"),
    Todo(day="sat", task="make merry"),
    Todo(day="sun", task="take aspirin"),
    Todo(day="sun", task="pray quietly"),
]


class TodoClient:
    """
    Async client for the day todos API.

    Args:
        base_url: Server root, e.g. ``http://127.0.0.1:8000``
        transport: Optional httpx transport (``httpx.ASGITransport`` to talk
            to an in-process app)
        timeout: Request timeout in seconds

    Example:
        async with TodoClient("http://127.0.0.1:8000") as client:
            await client.post(Todo(day="mon", task="milk cows"))
            print(await client.day_tasks("mon"))
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "TodoClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post(self, todo: Todo) -> Dict[str, Any]:
        """
        Send ``todo`` to the day it names, stamped with the current time.

        Returns:
            Dict[str, Any]: The server's receipt (key, day, task, message)
        """
        if not todo.day:
            raise ClientError("Todo has no day")
        day = parse_day(todo.day)
        stamped = todo.model_copy(update={"created": stamper.now()})

        response = await self._request(
            "POST", f"/day/{day.value}", json=stamped.model_dump(mode="json", by_alias=True)
        )
        logger.debug("client_post", status_code=response.status_code, day=day.value)
        return response.json()

    async def day_tasks(self, day: Day | str) -> List[str]:
        return await self._tasks(f"/day/{parse_day(day).value}")

    async def weekday_tasks(self) -> List[str]:
        return await self._tasks("/weekdays")

    async def weekend_tasks(self) -> List[str]:
        return await self._tasks("/weekend")

    async def week(self) -> Dict[str, List[str]]:
        """Tasks for every day, keyed by short day name."""
        response = await self._request("GET", "/week")
        lists = [TaskList.model_validate(item) for item in response.json()["days"]]
        return {task_list.when: task_list.tasks for task_list in lists}

    async def clear_day(self, day: Day | str) -> int:
        response = await self._request("DELETE", f"/day/{parse_day(day).value}")
        return response.json()["deleted"]

    async def _tasks(self, path: str) -> List[str]:
        response = await self._request("GET", path)
        return TaskList.model_validate(response.json()).tasks

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ClientError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            raise ClientError(
                f"{method} {path} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response


@dataclass
class DemoReport:
    """Task strings collected by :func:`run_demo`."""

    daily: Dict[str, str] = field(default_factory=dict)
    weekdays: str = ""
    weekend: str = ""

    def lines(self) -> List[str]:
        out = ["daily tasks ..."]
        out.extend(f"  {day}: {tasks}" for day, tasks in self.daily.items())
        out.append("")
        out.append(f"weekday tasks: {self.weekdays}")
        out.append("")
        out.append(f"weekend tasks: {self.weekend}")
        return out


async def run_demo(client: TodoClient, todos: Optional[List[Todo]] = None) -> DemoReport:
    """Post the demo todos, then read them back by day, weekdays and weekend."""
    for todo in todos if todos is not None else DEMO_TODOS:
        await client.post(todo)

    report = DemoReport()
    for day in Day:
        report.daily[day.value] = ", ".join(await client.day_tasks(day))
    report.weekdays = ", ".join(await client.weekday_tasks())
    report.weekend = ", ".join(await client.weekend_tasks())
    return report
