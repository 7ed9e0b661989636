"""Account workflows: registration, login with referral code, logout."""

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel

from todoapp.auth.identity import IdentityClient
from todoapp.auth.models import Session, User
from todoapp.auth.session_store import SessionStore
from todoapp.exceptions import AuthenticationError, PersistenceError
from todoapp.graphql import documents
from todoapp.graphql.client import GraphQLClient
from todoapp.logging_config import get_logger
from todoapp.referral.models import RedemptionOutcome, RedemptionResult
from todoapp.referral.service import ReferralService

logger = get_logger(__name__)


class LoginResult(BaseModel):
    """Outcome of a successful login."""

    session: Session
    referral: RedemptionResult


class AuthService:
    """Service tying the identity provider, the session store and referrals together."""

    def __init__(
        self,
        identity: IdentityClient,
        store: SessionStore,
        graphql: GraphQLClient,
        referrals: ReferralService,
    ):
        self.identity = identity
        self.store = store
        self.graphql = graphql
        self.referrals = referrals
        self.logger = get_logger(__name__)

    # ==================== REGISTRATION ====================

    async def register(self, email: str, password: str) -> User:
        """Create an account and its user row.

        The account is created first; the users row is written with the
        new account's token. The password never leaves the identity provider.

        Args:
            email: Account email
            password: Plain password

        Returns:
            Created user

        Raises:
            AuthenticationError: If the identity provider refuses the account
            PersistenceError: If the user row could not be written
        """
        account = await self.identity.create_account(email, password)
        session = Session(
            user_id=account.user_id,
            email=account.email,
            token=await account.get_token(),
        )

        data = await self.graphql.mutate(
            documents.CREATE_USER,
            {"id": account.user_id, "email": account.email},
            session=session,
        )
        row = data.get("insert_users_one")
        if not row:
            raise PersistenceError("No user returned", error_code="no_row")

        self.logger.info("user_registered", user_id=account.user_id)
        return User(**row)

    # ==================== LOGIN ====================

    async def login(self, email: str, password: str, referral_code: str = "") -> LoginResult:
        """Sign in, persist the session token and redeem an optional referral code.

        The referral step runs only after the credentials were accepted and
        the token stored. It never turns a successful login into a failure.

        Args:
            email: Account email
            password: Plain password
            referral_code: Code entered by the user (empty to skip)

        Returns:
            Session and referral outcome

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        account = await self.identity.authenticate(email, password)
        token = await account.get_token()
        self.store.set_token(token)

        expires_at = None
        if account.expires_in:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=account.expires_in)

        session = Session(
            user_id=account.user_id,
            email=account.email,
            token=token,
            expires_at=expires_at,
        )
        self.logger.info("user_logged_in", user_id=session.user_id)

        try:
            referral = await self.referrals.redeem(session, referral_code)
        except PersistenceError as e:
            self.logger.warning(
                "referral_lookup_failed",
                user_id=session.user_id,
                error=e.message,
                error_code=e.error_code,
            )
            referral = RedemptionResult(outcome=RedemptionOutcome.UNAVAILABLE, code=referral_code)

        return LoginResult(session=session, referral=referral)

    # ==================== SESSION ====================

    def current_session(self) -> Session | None:
        """Restore the session from the stored token.

        Returns:
            Session, or None if nobody is signed in or the token expired
        """
        token = self.store.get_token()
        if not token:
            return None

        try:
            session = Session.from_token(token)
        except AuthenticationError:
            self.logger.warning("stored_token_unreadable")
            self.store.clear_token()
            return None

        if session.is_expired():
            self.logger.info("session_expired", user_id=session.user_id)
            self.store.clear_token()
            return None

        return session

    def require_session(self) -> Session:
        """Return the current session.

        Raises:
            AuthenticationError: If nobody is signed in
        """
        session = self.current_session()
        if session is None:
            raise AuthenticationError("Please log in first.", error_code="not_authenticated")
        return session

    def logout(self) -> None:
        self.store.clear_token()
        self.graphql.cache.clear()
        self.logger.info("user_logged_out")
