"""Todo module."""

from todoapp.todos.models import Todo
from todoapp.todos.service import TodoService

__all__ = ["Todo", "TodoService"]
