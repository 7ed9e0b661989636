"""Referral models."""

from enum import Enum

from pydantic import BaseModel


class Referral(BaseModel):
    """Referral row as stored by the data service.

    ``referred_id`` stays null until someone redeems the code.
    """

    referrer_id: str
    referral_code: str
    referred_id: str | None = None

    @property
    def is_redeemed(self) -> bool:
        return self.referred_id is not None


class RedemptionOutcome(str, Enum):
    """Result of supplying a referral code at login."""
    SKIPPED = "skipped"                    # No code supplied
    INVALID = "invalid"                    # No referral with this code
    REDEEMED = "redeemed"                  # Linked to the signed-in user
    REDEEMED_UNRECORDED = "redeemed_unrecorded"  # Matched but the link was not saved
    ALREADY_REDEEMED = "already_redeemed"  # Linked to someone else earlier
    UNAVAILABLE = "unavailable"            # Lookup failed; login still succeeded


class RedemptionResult(BaseModel):
    """Outcome of the referral step of a login."""

    outcome: RedemptionOutcome
    code: str = ""
    referrer_id: str | None = None
