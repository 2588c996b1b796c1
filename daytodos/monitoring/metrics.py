"""
Prometheus metrics for day todos.

Tracks:
- Todos created per day
- Task lists served per scope (a day, weekdays, weekend, week)
- Tasks returned per task list
- Bucket operation duration
- Records that failed to decode
"""
from prometheus_client import Counter, Histogram

todos_created_total = Counter(
    "todos_created_total",
    "Total number of todos stored",
    ["day"],
)

todos_deleted_total = Counter(
    "todos_deleted_total",
    "Total number of todos deleted",
    ["day"],
)

task_list_requests_total = Counter(
    "task_list_requests_total",
    "Total task lists served",
    ["when"],
)

task_list_size = Histogram(
    "task_list_size",
    "Number of tasks in a served task list",
    buckets=(0, 1, 2, 5, 10, 25, 50, 100, 250, 1000),
)

storage_operation_duration_seconds = Histogram(
    "storage_operation_duration_seconds",
    "Bucket operation duration in seconds",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

todo_decode_errors_total = Counter(
    "todo_decode_errors_total",
    "Total stored records that could not be decoded",
)


class MetricsCollector:
    """Helper class for collecting metrics."""

    @staticmethod
    def record_todo_created(day: str) -> None:
        """Record a stored todo."""
        todos_created_total.labels(day=day).inc()

    @staticmethod
    def record_todos_deleted(day: str, count: int) -> None:
        todos_deleted_total.labels(day=day).inc(count)

    @staticmethod
    def record_task_list(when: str, size: int) -> None:
        """Record a served task list."""
        task_list_requests_total.labels(when=when).inc()
        task_list_size.observe(size)

    @staticmethod
    def record_storage_operation(operation: str, duration_seconds: float) -> None:
        """Record a bucket operation."""
        storage_operation_duration_seconds.labels(operation=operation).observe(duration_seconds)

    @staticmethod
    def record_decode_error() -> None:
        todo_decode_errors_total.inc()


# Export singleton instance
metrics = MetricsCollector()
