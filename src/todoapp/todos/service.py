"""Todo service: CRUD against the data service, scoped to one user."""

from todoapp.auth.models import Session
from todoapp.exceptions import PersistenceError, ValidationError
from todoapp.graphql import documents
from todoapp.graphql.client import GraphQLClient
from todoapp.logging_config import get_logger
from todoapp.todos.models import Todo

logger = get_logger(__name__)

# Server-side timestamp for updated_at
SERVER_NOW = "now()"


class TodoService:
    """Service for the signed-in user's todo items.

    Every operation takes the session explicitly and only ever uses its
    user id.
    """

    def __init__(self, graphql: GraphQLClient):
        self.graphql = graphql
        self.logger = get_logger(__name__)

    async def list_todos(self, session: Session, refresh: bool = False) -> list[Todo]:
        """List the user's todos, newest first.

        Args:
            session: Current session
            refresh: Bypass the response cache

        Returns:
            Todos ordered by creation time descending
        """
        data = await self.graphql.query(
            documents.GET_TODOS,
            {"userId": session.user_id},
            session=session,
            refresh=refresh,
        )
        return [Todo(**row) for row in data.get("todos") or []]

    async def add_todo(self, session: Session, title: str, description: str = "") -> Todo:
        """Create a todo.

        Args:
            session: Current session
            title: Required title
            description: Optional description

        Returns:
            Created todo

        Raises:
            ValidationError: If the title is empty
            PersistenceError: If the data service returns no row
        """
        if not title or not title.strip():
            raise ValidationError("Please enter a title for your todo.", error_code="title_required")

        data = await self.graphql.mutate(
            documents.ADD_TODO,
            {"userId": session.user_id, "title": title, "description": description or ""},
            session=session,
        )
        row = data.get("insert_todos_one")
        if not row:
            raise PersistenceError("No todo returned", error_code="no_row")

        todo = Todo(**row)
        self.logger.info("todo_created", user_id=session.user_id, todo_id=todo.id)
        return todo

    async def update_todo(
        self,
        session: Session,
        todo_id: str,
        title: str | None = None,
        description: str | None = None,
        is_completed: bool | None = None,
    ) -> Todo:
        """Update some fields of a todo.

        Fields left as None are not sent and stay unchanged. The updated
        timestamp is set by the data service.

        Args:
            session: Current session
            todo_id: Todo ID
            title: New title
            description: New description
            is_completed: New completion flag

        Returns:
            Updated todo

        Raises:
            ValidationError: If a title is given but empty
            PersistenceError: If no todo with this ID belongs to the user
        """
        changes: dict = {"updated_at": SERVER_NOW}
        if title is not None:
            if not title.strip():
                raise ValidationError("Please enter a title for your todo.", error_code="title_required")
            changes["title"] = title
        if description is not None:
            changes["description"] = description
        if is_completed is not None:
            changes["is_completed"] = is_completed

        data = await self.graphql.mutate(
            documents.UPDATE_TODO,
            {"id": todo_id, "userId": session.user_id, "changes": changes},
            session=session,
        )
        returning = (data.get("update_todos") or {}).get("returning") or []
        if not returning:
            raise PersistenceError(f"Todo {todo_id} not found", error_code="not_found")

        todo = Todo(**returning[0])
        self.logger.info(
            "todo_updated",
            user_id=session.user_id,
            todo_id=todo_id,
            fields=sorted(k for k in changes if k != "updated_at"),
        )
        return todo

    async def toggle_todo(self, session: Session, todo_id: str, current_status: bool) -> Todo:
        """Flip the completion flag of a todo."""
        return await self.update_todo(session, todo_id, is_completed=not current_status)

    async def delete_todo(self, session: Session, todo_id: str) -> None:
        """Delete a todo.

        Raises:
            PersistenceError: If no todo with this ID belongs to the user
        """
        data = await self.graphql.mutate(
            documents.DELETE_TODO,
            {"id": todo_id, "userId": session.user_id},
            session=session,
        )
        returning = (data.get("delete_todos") or {}).get("returning") or []
        if not returning:
            raise PersistenceError(f"Todo {todo_id} not found", error_code="not_found")

        self.logger.info("todo_deleted", user_id=session.user_id, todo_id=todo_id)
