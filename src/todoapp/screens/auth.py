"""Login and registration screens."""

from todoapp.auth.models import User
from todoapp.auth.service import AuthService, LoginResult
from todoapp.referral.models import RedemptionOutcome, RedemptionResult
from todoapp.screens.base import Notifier, Screen, user_action


class LoginScreen(Screen):
    """Email/password login with an optional referral code."""

    def __init__(self, auth: AuthService, notifier: Notifier):
        super().__init__(notifier)
        self.auth = auth
        self.email = ""
        self.password = ""
        self.referral_code = ""

    @user_action(
        "login",
        failure_title="Error",
        failure_message="Failed to log in. Please check your credentials and try again.",
    )
    async def handle_login(self) -> LoginResult:
        result = await self.auth.login(self.email, self.password, self.referral_code)
        self._announce_referral(result)
        return result

    def _announce_referral(self, result: LoginResult) -> None:
        referral: RedemptionResult = result.referral
        email = result.session.email or self.email

        if referral.outcome in (RedemptionOutcome.REDEEMED, RedemptionOutcome.REDEEMED_UNRECORDED):
            self.notifier.alert(
                "Welcome",
                f"Welcome to the app, {email}! You were referred by user {referral.referrer_id}.",
            )
        elif referral.outcome == RedemptionOutcome.INVALID:
            self.notifier.alert("Info", "Invalid referral code. Proceeding with normal login.")
        elif referral.outcome == RedemptionOutcome.ALREADY_REDEEMED:
            self.notifier.alert(
                "Info",
                f"This referral code from user {referral.referrer_id} has already been used. "
                "Proceeding with normal login.",
            )
        elif referral.outcome == RedemptionOutcome.UNAVAILABLE:
            self.notifier.alert("Info", "We couldn't check your referral code. Proceeding with normal login.")


class RegisterScreen(Screen):
    """Account registration."""

    def __init__(self, auth: AuthService, notifier: Notifier):
        super().__init__(notifier)
        self.auth = auth
        self.email = ""
        self.password = ""

    @user_action(
        "register",
        failure_title="Error",
        failure_message="Failed to register. Please try again.",
    )
    async def handle_register(self) -> User:
        user = await self.auth.register(self.email, self.password)
        self.notifier.alert("Success", "User registered successfully")
        return user
