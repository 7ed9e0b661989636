"""Authentication module: identity provider, session store and login workflow."""

from todoapp.auth.models import Session, User

__all__ = ["Session", "User"]
