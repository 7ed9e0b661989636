"""Account and session models."""

from datetime import datetime, timezone

from jose import JWTError, jwt
from pydantic import BaseModel

from todoapp.exceptions import AuthenticationError


class User(BaseModel):
    """Account issued by the identity provider."""

    id: str
    email: str


class Session(BaseModel):
    """Signed-in user together with the token presented to the data service.

    Passed explicitly into every workflow; nothing reads the token from
    ambient storage.
    """

    user_id: str
    email: str | None = None
    token: str
    expires_at: datetime | None = None

    def __repr__(self):
        return f"<Session(user_id={self.user_id}, email={self.email})>"

    @classmethod
    def from_token(cls, token: str) -> "Session":
        """Build a session from a stored ID token.

        The signature is not checked here; the data service verifies the
        token on every request. Only the identity claims are read.

        Args:
            token: Firebase ID token (JWT)

        Returns:
            Session for the token's subject

        Raises:
            AuthenticationError: If the token cannot be decoded or has no subject
        """
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError as e:
            raise AuthenticationError(f"Stored token is unreadable: {e}", error_code="invalid_token")

        user_id = claims.get("user_id") or claims.get("sub")
        if not user_id:
            raise AuthenticationError("Stored token has no subject", error_code="invalid_token")

        expires_at = None
        if claims.get("exp") is not None:
            expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)

        return cls(
            user_id=user_id,
            email=claims.get("email"),
            token=token,
            expires_at=expires_at,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at
