"""Referral screen: show, generate, copy and share the user's code."""

from typing import Callable

from todoapp.auth.models import Session
from todoapp.exceptions import ValidationError
from todoapp.referral.models import Referral
from todoapp.referral.service import ReferralService
from todoapp.referral.sharing import copy_to_clipboard, share_referral_code
from todoapp.screens.base import Notifier, Screen, user_action


class ReferralScreen(Screen):
    """Refer-a-friend screen.

    ``referrals`` holds every row the user created, so the screen can show
    who redeemed each code.
    """

    def __init__(
        self,
        service: ReferralService,
        session: Session,
        notifier: Notifier,
        opener: Callable[[str], bool] | None = None,
    ):
        super().__init__(notifier)
        self.service = service
        self.session = session
        self.opener = opener
        self.referral_code = ""
        self.referrals: list[Referral] = []

    @property
    def show_referral_code(self) -> bool:
        return bool(self.referral_code)

    def _require_code(self) -> str:
        if not self.referral_code:
            raise ValidationError("Generate a referral code first.", error_code="no_code")
        return self.referral_code

    @user_action("load_referral", failure_message="We couldn't load your referral code. Please try again later.")
    async def load(self) -> list[Referral]:
        self.referrals = await self.service.list_referrals(self.session)
        if self.referrals:
            self.referral_code = self.referrals[0].referral_code
        return self.referrals

    @user_action(
        "generate_referral_code",
        failure_title="Error",
        failure_message="Failed to generate referral code. Please try again.",
    )
    async def handle_generate_referral_code(self) -> Referral:
        referral = await self.service.get_or_create_code(self.session)
        self.referral_code = referral.referral_code
        if referral not in self.referrals:
            self.referrals.append(referral)
        self.notifier.alert("Success", "Referral code generated successfully")
        return referral

    @user_action("copy_referral_code", failure_title="Error")
    async def handle_copy(self) -> str:
        code = self._require_code()
        copy_to_clipboard(code)
        self.notifier.alert("Success", "Referral code copied to clipboard!")
        return code

    @user_action(
        "share_referral_code",
        failure_title="Error",
        failure_message="WhatsApp is not installed or failed to share the referral code.",
    )
    async def handle_share(self) -> str:
        return share_referral_code(self._require_code(), opener=self.opener)
