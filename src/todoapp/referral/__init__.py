"""Referral module.

Users generate one shareable code; a new user who enters it at login is
linked to the referrer once.
"""

from todoapp.referral.models import RedemptionOutcome, RedemptionResult, Referral
from todoapp.referral.service import ReferralService, generate_referral_code, is_referral_code

__all__ = [
    "Referral",
    "RedemptionOutcome",
    "RedemptionResult",
    "ReferralService",
    "generate_referral_code",
    "is_referral_code",
]
