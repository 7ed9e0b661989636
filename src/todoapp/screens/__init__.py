"""Screen controllers: input state plus the async handlers behind each action."""

from todoapp.screens.auth import LoginScreen, RegisterScreen
from todoapp.screens.base import Notifier, Screen, user_action
from todoapp.screens.referral import ReferralScreen
from todoapp.screens.todos import TodoListScreen

__all__ = [
    "LoginScreen",
    "Notifier",
    "ReferralScreen",
    "RegisterScreen",
    "Screen",
    "TodoListScreen",
    "user_action",
]
