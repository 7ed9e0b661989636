"""
End-to-end scenarios against the in-memory data service and identity provider.
"""
import pytest

from todoapp.referral.models import RedemptionOutcome
from todoapp.screens import LoginScreen, ReferralScreen, RegisterScreen, TodoListScreen


async def register(services, notifier, email, password):
    screen = RegisterScreen(services.auth, notifier)
    screen.email = email
    screen.password = password
    return await screen.handle_register()


async def login(services, notifier, email, password, referral_code=""):
    screen = LoginScreen(services.auth, notifier)
    screen.email = email
    screen.password = password
    screen.referral_code = referral_code
    return await screen.handle_login()


class TestRegisterAndLogin:
    """Scenario A: register, log in, token persisted"""

    @pytest.mark.asyncio
    async def test_register_then_login(self, services, notifier, fake_hasura):
        user = await register(services, notifier, "a@x.com", "secret1")

        assert user.email == "a@x.com"
        assert fake_hasura.users[user.id] == {"id": user.id, "email": "a@x.com"}
        assert ("Success", "User registered successfully") in notifier.alerts

        result = await login(services, notifier, "a@x.com", "secret1")

        assert result.session.user_id == user.id
        assert result.session.token
        assert services.store.get_token() == result.session.token
        assert result.referral.outcome == RedemptionOutcome.SKIPPED

        restored = services.auth.current_session()
        assert restored.user_id == user.id
        assert restored.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_registration_never_sends_password_to_data_service(self, services, notifier, fake_hasura):
        await register(services, notifier, "a@x.com", "secret1")

        for request in fake_hasura.requests:
            assert b"secret1" not in request.content

    @pytest.mark.asyncio
    async def test_bad_credentials(self, services, notifier):
        await register(services, notifier, "a@x.com", "secret1")
        notifier.alerts.clear()

        assert await login(services, notifier, "a@x.com", "wrong-password") is None
        assert notifier.titles == ["Error"]
        assert services.store.get_token() is None

    @pytest.mark.asyncio
    async def test_duplicate_registration_is_reported(self, services, notifier):
        await register(services, notifier, "a@x.com", "secret1")
        notifier.alerts.clear()

        assert await register(services, notifier, "a@x.com", "secret1") is None
        assert notifier.alerts == [("Error", "Failed to register. Please try again.")]


class TestReferralLinking:
    """Scenario B: a referral code generated by one user is redeemed at another user's login"""

    @pytest.mark.asyncio
    async def test_known_code_names_referrer(self, services, notifier, fake_hasura):
        referrer = await register(services, notifier, "u@x.com", "secret1")
        await register(services, notifier, "v@x.com", "secret2")
        fake_hasura.referrals.append(
            {"referrer_id": referrer.id, "referral_code": "REF-ABC123XYZ", "referred_id": None},
        )
        notifier.alerts.clear()

        result = await login(services, notifier, "v@x.com", "secret2", referral_code="REF-ABC123XYZ")

        assert result.referral.outcome == RedemptionOutcome.REDEEMED
        assert result.referral.referrer_id == referrer.id
        assert notifier.alerts == [(
            "Welcome",
            f"Welcome to the app, v@x.com! You were referred by user {referrer.id}.",
        )]
        assert fake_hasura.referrals[0]["referred_id"] == result.session.user_id

    @pytest.mark.asyncio
    async def test_unknown_code_does_not_block_login(self, services, notifier, fake_hasura):
        await register(services, notifier, "v@x.com", "secret2")
        notifier.alerts.clear()

        result = await login(services, notifier, "v@x.com", "secret2", referral_code="REF-NOTREAL1")

        assert result is not None
        assert result.referral.outcome == RedemptionOutcome.INVALID
        assert notifier.alerts == [("Info", "Invalid referral code. Proceeding with normal login.")]
        assert services.store.get_token() == result.session.token
        assert "RedeemReferral" not in fake_hasura.operations

    @pytest.mark.asyncio
    async def test_generated_code_is_redeemed_once(self, services, notifier, fake_hasura):
        await register(services, notifier, "u@x.com", "secret1")
        await register(services, notifier, "v@x.com", "secret2")
        await register(services, notifier, "w@x.com", "secret3")

        owner = await login(services, notifier, "u@x.com", "secret1")
        referral_screen = ReferralScreen(services.referrals, owner.session, notifier)
        await referral_screen.handle_generate_referral_code()
        code = referral_screen.referral_code
        assert code.startswith("REF-")

        # Generating again keeps the existing code
        await referral_screen.handle_generate_referral_code()
        assert referral_screen.referral_code == code
        assert len(fake_hasura.referrals) == 1

        first = await login(services, notifier, "v@x.com", "secret2", referral_code=code)
        second = await login(services, notifier, "w@x.com", "secret3", referral_code=code)

        assert first.referral.outcome == RedemptionOutcome.REDEEMED
        assert second.referral.outcome == RedemptionOutcome.ALREADY_REDEEMED
        assert fake_hasura.referrals[0]["referred_id"] == first.session.user_id

    @pytest.mark.asyncio
    async def test_lookup_failure_does_not_block_login(self, services, notifier, fake_hasura):
        await register(services, notifier, "v@x.com", "secret2")
        fake_hasura.fail_operations.add("GetReferrer")
        notifier.alerts.clear()

        result = await login(services, notifier, "v@x.com", "secret2", referral_code="REF-ABC123XYZ")

        assert result.referral.outcome == RedemptionOutcome.UNAVAILABLE
        assert notifier.titles == ["Info"]
        assert services.store.get_token() == result.session.token

    @pytest.mark.asyncio
    async def test_failed_link_write_still_names_referrer(self, services, notifier, fake_hasura):
        referrer = await register(services, notifier, "u@x.com", "secret1")
        await register(services, notifier, "v@x.com", "secret2")
        fake_hasura.referrals.append(
            {"referrer_id": referrer.id, "referral_code": "REF-ABC123XYZ", "referred_id": None},
        )
        fake_hasura.fail_operations.add("RedeemReferral")
        notifier.alerts.clear()

        result = await login(services, notifier, "v@x.com", "secret2", referral_code="REF-ABC123XYZ")

        assert result.referral.outcome == RedemptionOutcome.REDEEMED_UNRECORDED
        assert result.referral.referrer_id == referrer.id
        assert notifier.alerts == [(
            "Welcome",
            f"Welcome to the app, v@x.com! You were referred by user {referrer.id}.",
        )]
        assert fake_hasura.referrals[0]["referred_id"] is None

    @pytest.mark.asyncio
    async def test_used_code_message_names_referrer(self, services, notifier, fake_hasura):
        referrer = await register(services, notifier, "u@x.com", "secret1")
        await register(services, notifier, "v@x.com", "secret2")
        fake_hasura.referrals.append(
            {"referrer_id": referrer.id, "referral_code": "REF-ABC123XYZ", "referred_id": "someone-else"},
        )
        notifier.alerts.clear()

        await login(services, notifier, "v@x.com", "secret2", referral_code="REF-ABC123XYZ")

        assert notifier.titles == ["Info"]
        assert referrer.id in notifier.alerts[0][1]

    @pytest.mark.asyncio
    async def test_referrer_sees_who_redeemed(self, services, notifier):
        await register(services, notifier, "u@x.com", "secret1")
        await register(services, notifier, "v@x.com", "secret2")
        owner = await login(services, notifier, "u@x.com", "secret1")
        screen = ReferralScreen(services.referrals, owner.session, notifier)

        await screen.load()
        assert screen.referrals == []

        await screen.handle_generate_referral_code()
        friend = await login(services, notifier, "v@x.com", "secret2", referral_code=screen.referral_code)
        await screen.load()

        assert len(screen.referrals) == 1
        assert screen.referrals[0].referred_id == friend.session.user_id


class TestTodoLifecycle:
    """Scenario C: add, toggle, delete with a refetch after each mutation"""

    @pytest.mark.asyncio
    async def test_add_toggle_delete(self, services, notifier, fake_hasura):
        await register(services, notifier, "a@x.com", "secret1")
        result = await login(services, notifier, "a@x.com", "secret1")
        screen = TodoListScreen(services.todos, result.session, notifier)

        await screen.load()
        assert screen.items == []

        screen.title = "Buy milk"
        screen.description = ""
        await screen.handle_add_todo()

        assert len(screen.items) == 1
        todo = screen.items[0]
        assert todo.title == "Buy milk"
        assert todo.is_completed is False
        created_at = todo.created_at
        first_updated_at = todo.updated_at

        await screen.handle_toggle_todo(todo.id, todo.is_completed)

        assert len(screen.items) == 1
        toggled = screen.items[0]
        assert toggled.is_completed is True
        assert toggled.updated_at > first_updated_at
        assert toggled.created_at == created_at

        await screen.handle_toggle_todo(toggled.id, toggled.is_completed)

        restored = screen.items[0]
        assert restored.is_completed is False
        assert restored.updated_at > toggled.updated_at
        assert restored.created_at == created_at

        await screen.handle_delete_todo(todo.id)
        assert screen.items == []
        assert notifier.titles.count("Oops!") == 0

    @pytest.mark.asyncio
    async def test_list_is_newest_first_and_per_user(self, services, notifier, fake_hasura):
        await register(services, notifier, "a@x.com", "secret1")
        await register(services, notifier, "b@x.com", "secret2")
        session_a = (await login(services, notifier, "a@x.com", "secret1")).session
        session_b = (await login(services, notifier, "b@x.com", "secret2")).session

        screen_a = TodoListScreen(services.todos, session_a, notifier)
        for title in ("first", "second"):
            screen_a.title = title
            await screen_a.handle_add_todo()

        screen_b = TodoListScreen(services.todos, session_b, notifier)
        await screen_b.load()

        assert [t.title for t in screen_a.items] == ["second", "first"]
        assert screen_b.items == []

    @pytest.mark.asyncio
    async def test_other_users_todo_cannot_be_deleted(self, services, notifier, fake_hasura):
        await register(services, notifier, "a@x.com", "secret1")
        await register(services, notifier, "b@x.com", "secret2")
        session_a = (await login(services, notifier, "a@x.com", "secret1")).session
        session_b = (await login(services, notifier, "b@x.com", "secret2")).session

        screen_a = TodoListScreen(services.todos, session_a, notifier)
        screen_a.title = "private"
        await screen_a.handle_add_todo()
        todo_id = screen_a.items[0].id

        screen_b = TodoListScreen(services.todos, session_b, notifier)
        assert await screen_b.handle_delete_todo(todo_id) is None
        assert todo_id in fake_hasura.todos

    @pytest.mark.asyncio
    async def test_edit_updates_fields(self, services, notifier):
        await register(services, notifier, "a@x.com", "secret1")
        session = (await login(services, notifier, "a@x.com", "secret1")).session
        screen = TodoListScreen(services.todos, session, notifier)
        screen.title = "Buy milk"
        await screen.handle_add_todo()

        screen.start_editing(screen.items[0])
        screen.editing.title = "Buy oat milk"
        screen.editing.description = "2 litres"
        await screen.handle_update_todo()

        assert len(screen.items) == 1
        assert screen.items[0].title == "Buy oat milk"
        assert screen.items[0].description == "2 litres"
        assert screen.items[0].is_completed is False
