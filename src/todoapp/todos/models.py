"""Todo models."""

from datetime import datetime

from pydantic import BaseModel


class Todo(BaseModel):
    """Todo item owned by a single user."""

    id: str
    user_id: str | None = None
    title: str
    description: str | None = ""
    is_completed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __repr__(self):
        return f"<Todo(id={self.id}, title={self.title!r}, completed={self.is_completed})>"
