"""Day todos: todo items scoped by day of week over an embedded ordered key/value store."""

__version__ = "1.0.0"
