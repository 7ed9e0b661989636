"""Referral service for generating, looking up and redeeming referral codes."""

import re
import secrets
import string

from todoapp.auth.models import Session
from todoapp.exceptions import PersistenceError
from todoapp.graphql import documents
from todoapp.graphql.client import GraphQLClient
from todoapp.logging_config import get_logger
from todoapp.referral.models import RedemptionOutcome, RedemptionResult, Referral

logger = get_logger(__name__)

REFERRAL_CODE_PREFIX = "REF-"
REFERRAL_CODE_LENGTH = 9
REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits
REFERRAL_CODE_PATTERN = re.compile(r"^REF-[A-Z0-9]{9}$")


def generate_referral_code() -> str:
    """Generate a shareable referral code.

    Format: REF-XXXXXXXXX (9 uppercase base-36 characters). Not checked
    against existing codes; 36^9 combinations make collisions unlikely.
    """
    suffix = "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH))
    return f"{REFERRAL_CODE_PREFIX}{suffix}"


def is_referral_code(value: str) -> bool:
    return bool(REFERRAL_CODE_PATTERN.match(value))


class ReferralService:
    """Service for referral codes stored in the data service."""

    def __init__(self, graphql: GraphQLClient):
        """Initialize referral service.

        Args:
            graphql: Data service client
        """
        self.graphql = graphql
        self.logger = get_logger(__name__)

    async def list_referrals(self, session: Session, refresh: bool = False) -> list[Referral]:
        """List the referral rows created by the signed-in user.

        Args:
            session: Current session
            refresh: Bypass the response cache

        Returns:
            Referral rows, each with the redeeming user's ID once redeemed
        """
        data = await self.graphql.query(
            documents.GET_REFERRALS_BY_REFERRER,
            {"referrerId": session.user_id},
            session=session,
            refresh=refresh,
        )
        return [Referral(**row) for row in data.get("referrals") or []]

    async def get_code(self, session: Session, refresh: bool = False) -> Referral | None:
        """Get the referral code held by the signed-in user.

        Returns:
            First referral row of the user, or None if they have none
        """
        rows = await self.list_referrals(session, refresh=refresh)
        return rows[0] if rows else None

    async def generate_code(self, session: Session) -> Referral:
        """Generate a new referral code and persist it.

        Args:
            session: Current session

        Returns:
            The stored referral

        Raises:
            PersistenceError: If the data service returns no row
        """
        code = generate_referral_code()
        data = await self.graphql.mutate(
            documents.ADD_REFERRAL,
            {"referrerId": session.user_id, "referralCode": code},
            session=session,
        )

        returning = (data.get("insert_referrals") or {}).get("returning") or []
        if not returning:
            raise PersistenceError("No referral code returned", error_code="no_row")

        referral = Referral(**returning[0])
        self.logger.info(
            "referral_code_generated",
            user_id=session.user_id,
            code=referral.referral_code,
        )
        return referral

    async def get_or_create_code(self, session: Session) -> Referral:
        """Return the user's referral code, generating one if they have none."""
        existing = await self.get_code(session, refresh=True)
        if existing:
            return existing
        return await self.generate_code(session)

    async def lookup(self, session: Session, code: str) -> Referral | None:
        """Find the referral matching a code exactly.

        Matching is case-sensitive and the code is not normalized.

        Args:
            session: Current session
            code: Candidate referral code

        Returns:
            First matching referral, or None for an empty or unknown code
        """
        if not code:
            return None

        data = await self.graphql.query(
            documents.GET_REFERRER,
            {"referralCode": code},
            session=session,
            refresh=True,
        )
        rows = data.get("referrals") or []
        if not rows:
            self.logger.info("referral_code_not_found", code=code)
            return None
        return Referral(**rows[0])

    async def redeem(self, session: Session, code: str) -> RedemptionResult:
        """Link the signed-in user to the referral behind a code.

        The write only succeeds while ``referred_id`` is still unset, so a
        code is redeemed at most once. Redeeming again as the same user is
        reported as redeemed.

        Args:
            session: Session of the user supplying the code
            code: Referral code entered at login

        Returns:
            Redemption result

        Raises:
            PersistenceError: If the lookup fails. A failed link write is
                reported as REDEEMED_UNRECORDED instead.
        """
        if not code:
            return RedemptionResult(outcome=RedemptionOutcome.SKIPPED)

        referral = await self.lookup(session, code)
        if referral is None:
            return RedemptionResult(outcome=RedemptionOutcome.INVALID, code=code)

        result = RedemptionResult(
            outcome=RedemptionOutcome.REDEEMED,
            code=code,
            referrer_id=referral.referrer_id,
        )

        if referral.referred_id == session.user_id:
            return result
        if referral.is_redeemed:
            result.outcome = RedemptionOutcome.ALREADY_REDEEMED
            return result

        try:
            data = await self.graphql.mutate(
                documents.REDEEM_REFERRAL,
                {"referralCode": code, "referredId": session.user_id},
                session=session,
            )
        except PersistenceError as e:
            self.logger.warning(
                "referral_redemption_not_recorded",
                referrer_id=referral.referrer_id,
                referred_id=session.user_id,
                error=e.message,
                error_code=e.error_code,
            )
            result.outcome = RedemptionOutcome.REDEEMED_UNRECORDED
            return result

        affected = (data.get("update_referrals") or {}).get("affected_rows", 0)

        if not affected:
            result.outcome = RedemptionOutcome.ALREADY_REDEEMED
            self.logger.info("referral_already_redeemed", code=code)
            return result

        self.logger.info(
            "referral_redeemed",
            referrer_id=referral.referrer_id,
            referred_id=session.user_id,
        )
        return result
