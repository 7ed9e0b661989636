"""Todo list screen."""

from todoapp.auth.models import Session
from todoapp.exceptions import PersistenceError, ValidationError
from todoapp.logging_config import get_logger
from todoapp.screens.base import Notifier, Screen, user_action
from todoapp.todos.models import Todo
from todoapp.todos.service import TodoService

logger = get_logger(__name__)


class TodoListScreen(Screen):
    """List, add, edit, toggle and delete the signed-in user's todos.

    After every successful mutation the whole list is fetched again
    instead of being patched locally.
    """

    def __init__(self, todos: TodoService, session: Session, notifier: Notifier):
        super().__init__(notifier)
        self.todos = todos
        self.session = session
        self.items: list[Todo] = []
        self.title = ""
        self.description = ""
        self.editing: Todo | None = None

    async def _refetch(self) -> None:
        try:
            self.items = await self.todos.list_todos(self.session, refresh=True)
        except PersistenceError as e:
            logger.warning("todo_refetch_failed", error=e.message, error_code=e.error_code)
            self.notifier.alert("Oops!", "We couldn't refresh your todos. Please try again later.")

    @user_action("load_todos", failure_message="We couldn't load your todos. Please try again later.")
    async def load(self) -> list[Todo]:
        self.items = await self.todos.list_todos(self.session, refresh=True)
        return self.items

    @user_action("add_todo", failure_message="We couldn't add your todo. Please try again later.")
    async def handle_add_todo(self) -> Todo:
        todo = await self.todos.add_todo(self.session, self.title, self.description)
        self.title = ""
        self.description = ""
        await self._refetch()
        return todo

    # ==================== EDITING ====================

    def start_editing(self, todo: Todo) -> None:
        self.editing = todo.model_copy()

    def cancel_editing(self) -> None:
        self.editing = None

    @user_action("update_todo", failure_message="We couldn't update your todo. Please try again later.")
    async def handle_update_todo(self) -> Todo | None:
        if self.editing is None:
            return None
        if not self.editing.title.strip():
            raise ValidationError("Please enter a title for your todo.", error_code="title_required")

        todo = await self.todos.update_todo(
            self.session,
            self.editing.id,
            title=self.editing.title,
            description=self.editing.description or "",
            is_completed=self.editing.is_completed,
        )
        self.editing = None
        await self._refetch()
        return todo

    # ==================== ITEM ACTIONS ====================

    @user_action("toggle_todo", failure_message="We couldn't update your todo status. Please try again later.")
    async def handle_toggle_todo(self, todo_id: str, current_status: bool) -> Todo:
        todo = await self.todos.toggle_todo(self.session, todo_id, current_status)
        await self._refetch()
        return todo

    @user_action("delete_todo", failure_message="We couldn't delete your todo. Please try again later.")
    async def handle_delete_todo(self, todo_id: str) -> bool:
        await self.todos.delete_todo(self.session, todo_id)
        await self._refetch()
        return True
