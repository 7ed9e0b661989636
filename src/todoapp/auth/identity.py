"""Firebase Authentication REST integration for email/password accounts.

Endpoints used:
- accounts:signInWithPassword: verify credentials and issue an ID token
- accounts:signUp: create a new email/password account

API Documentation: https://firebase.google.com/docs/reference/rest/auth
"""

from dataclasses import dataclass

import httpx

from todoapp.exceptions import AuthenticationError, ConfigurationError
from todoapp.logging_config import get_logger
from todoapp.settings import Settings, settings

logger = get_logger(__name__)

# Firebase error codes mapped to readable messages
ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "No account exists for this email",
    "INVALID_PASSWORD": "The password is incorrect",
    "INVALID_LOGIN_CREDENTIALS": "The email or password is incorrect",
    "USER_DISABLED": "This account has been disabled",
    "EMAIL_EXISTS": "Email already registered",
    "INVALID_EMAIL": "The email address is badly formatted",
    "WEAK_PASSWORD": "Password should be at least 6 characters",
    "MISSING_PASSWORD": "A password is required",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts, try again later",
}


@dataclass
class IdentityUser:
    """Account returned by the identity provider."""

    user_id: str
    email: str
    id_token: str
    expires_in: int | None = None

    async def get_token(self) -> str:
        """Return the ID token to present to the data service."""
        return self.id_token


class IdentityClient:
    """Client for the Firebase Auth REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        config: Settings | None = None,
    ):
        """Initialize identity client.

        Args:
            api_key: Firebase Web API key. If not provided, uses config.
            base_url: REST API base URL. If not provided, uses config.
            timeout: Request timeout in seconds. If not provided, uses config
                (where None waits indefinitely).
            transport: Optional httpx transport, used by tests
            config: Settings for unset arguments (the global settings by default)
        """
        config = config or settings
        if api_key is None and config.firebase_api_key is not None:
            api_key = config.firebase_api_key.get_secret_value()
        self.api_key = api_key
        self.base_url = (base_url or config.identity_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.transport = transport
        self.logger = get_logger(__name__)

    async def _request(self, endpoint: str, payload: dict) -> dict:
        """Post to an identity endpoint.

        Raises:
            AuthenticationError: If the provider rejects the request
        """
        if not self.api_key:
            raise ConfigurationError("Identity provider API key is not configured", error_code="not_configured")

        url = f"{self.base_url}/{endpoint}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
            except httpx.TimeoutException:
                raise AuthenticationError("Request timeout", error_code="timeout")
            except httpx.RequestError as e:
                raise AuthenticationError(f"Request failed: {str(e)}", error_code="request_error")

        try:
            data = response.json()
        except ValueError:
            raise AuthenticationError(
                "Identity provider returned invalid JSON",
                status_code=response.status_code,
                error_code="invalid_response",
            )

        if response.status_code >= 400 or "error" in data:
            error = data.get("error") or {}
            # Firebase appends details after " : ", e.g. "WEAK_PASSWORD : Password should be..."
            code = str(error.get("message", "UNKNOWN")).split(" : ")[0].strip()
            raise AuthenticationError(
                ERROR_MESSAGES.get(code, "Authentication failed"),
                status_code=response.status_code,
                error_code=code,
            )

        return data

    @staticmethod
    def _to_user(data: dict) -> IdentityUser:
        expires_in = data.get("expiresIn")
        return IdentityUser(
            user_id=data["localId"],
            email=data.get("email", ""),
            id_token=data["idToken"],
            expires_in=int(expires_in) if expires_in else None,
        )

    async def authenticate(self, email: str, password: str) -> IdentityUser:
        """Sign in with email and password.

        Args:
            email: Account email
            password: Plain password

        Returns:
            Signed-in user

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        data = await self._request("accounts:signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        user = self._to_user(data)
        self.logger.info("identity_authenticated", user_id=user.user_id)
        return user

    async def create_account(self, email: str, password: str) -> IdentityUser:
        """Create an email/password account.

        Args:
            email: Account email
            password: Plain password

        Returns:
            Newly created user (already signed in)

        Raises:
            AuthenticationError: If the provider refuses the account
        """
        data = await self._request("accounts:signUp", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        user = self._to_user(data)
        self.logger.info("identity_account_created", user_id=user.user_id)
        return user
