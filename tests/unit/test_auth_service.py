"""
Unit tests for the authentication service.
"""
from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy import select

from legacyapi.auth.exceptions import (
    AccountDisabled,
    InvalidCredentials,
    MissingCredentials,
    PasswordPolicyError,
    PrincipalNotFound,
    RateLimited,
    SessionCollision,
    SessionExpired,
    Unauthenticated,
)
from legacyapi.auth.rate_limiting import LoginRateLimiter
from legacyapi.db.models import AuthSession, PrincipalKind
from legacyapi.services.auth import AuthService
from legacyapi.services.sessions import ClientMeta, SessionStore
from legacyapi.utils.datetime import utcnow


@pytest.fixture
def limiter() -> LoginRateLimiter:
    return LoginRateLimiter(max_attempts=15, window_seconds=15 * 60)


@pytest_asyncio.fixture
async def service(db_session, limiter, hasher, test_settings) -> AuthService:
    return AuthService(db_session, rate_limiter=limiter, hasher=hasher, settings=test_settings)


async def active_sessions(db_session, kind: PrincipalKind, principal_id: int):
    result = await db_session.execute(
        select(AuthSession).where(
            AuthSession.principal_kind == kind,
            AuthSession.principal_id == principal_id,
            AuthSession.is_active == True,  # noqa: E712
        )
    )
    return list(result.scalars().all())


class TestLogin:
    @pytest.mark.asyncio
    async def test_admin_login_by_email(self, service, admin_user):
        result = await service.login("admin@x.com", "secret123", ClientMeta(ip_address="10.0.0.1"))

        assert result.kind == PrincipalKind.ADMIN
        assert result.role == "admin"
        assert result.principal.id == admin_user.id
        assert result.token.startswith("admin_")
        assert result.principal.last_login is not None

    @pytest.mark.asyncio
    async def test_family_member_login_by_username(self, service, family_user):
        result = await service.login("jane.doe", "jane.doe")

        assert result.kind == PrincipalKind.FAMILY_MEMBER
        assert result.role == "member"
        assert result.token.startswith("member_")

    @pytest.mark.asyncio
    async def test_admin_login_by_username(self, service, make_admin):
        admin = await make_admin(email="ops@x.com", username="ops", password="opspass1", role="member")
        result = await service.login("ops", "opspass1")

        assert result.kind == PrincipalKind.ADMIN
        assert result.principal.id == admin.id
        assert result.role == "member"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("handle,password", [("", "x"), ("jane.doe", ""), (None, None)])
    async def test_missing_credentials(self, service, handle, password):
        with pytest.raises(MissingCredentials):
            await service.login(handle, password)

    @pytest.mark.asyncio
    async def test_email_handle_only_matches_admins(self, service, make_member):
        await make_member(first_name="Mail", last_name="Name", username="mail@x.com", password="password1")

        with pytest.raises(InvalidCredentials):
            await service.login("mail@x.com", "password1")

    @pytest.mark.asyncio
    async def test_username_collision_resolves_to_family_member(self, service, make_admin, make_member):
        await make_admin(email="shared@x.com", username="shared", password="adminpass")
        member = await make_member(first_name="Sha", last_name="Red", username="shared", password="memberpass")

        result = await service.login("shared", "memberpass")
        assert result.kind == PrincipalKind.FAMILY_MEMBER
        assert result.principal.id == member.id

        with pytest.raises(InvalidCredentials):
            await service.login("shared", "adminpass")

    @pytest.mark.asyncio
    async def test_wrong_password_records_failure(self, service, limiter, family_user):
        with pytest.raises(InvalidCredentials):
            await service.login("jane.doe", "wrong-password")

        assert limiter.entries[f"member_{family_user.id}"].attempts == 1

    @pytest.mark.asyncio
    async def test_unknown_handle_is_keyed_by_handle(self, service, limiter):
        with pytest.raises(InvalidCredentials):
            await service.login("nobody", "whatever")

        assert limiter.entries["unknown_nobody"].attempts == 1

    @pytest.mark.asyncio
    async def test_account_without_password_is_rejected(self, service, make_member):
        await make_member(first_name="No", last_name="Hash", username="no.hash", password="")

        with pytest.raises(InvalidCredentials):
            await service.login("no.hash", "anything")

    @pytest.mark.asyncio
    async def test_inactive_account_is_rejected_and_counted(self, service, limiter, make_member):
        member = await make_member(is_active=False)

        with pytest.raises(AccountDisabled) as exc_info:
            await service.login("jane.doe", "jane.doe")

        assert exc_info.value.message == "Invalid username/email or password"
        assert limiter.entries[f"member_{member.id}"].attempts == 1

    @pytest.mark.asyncio
    async def test_fifteen_failures_block_correct_password(self, service, limiter, family_user):
        for _ in range(15):
            with pytest.raises(InvalidCredentials):
                await service.login("jane.doe", "wrong-password")

        with pytest.raises(RateLimited) as exc_info:
            await service.login("jane.doe", "jane.doe")
        assert exc_info.value.remaining_attempts == 0

    @pytest.mark.asyncio
    async def test_block_lifts_after_window(self, service, limiter, family_user):
        now = [1_000_000.0]
        limiter.clock = lambda: now[0]

        for _ in range(15):
            with pytest.raises(InvalidCredentials):
                await service.login("jane.doe", "wrong-password")
        with pytest.raises(RateLimited):
            await service.login("jane.doe", "jane.doe")

        now[0] += 15 * 60 + 1
        result = await service.login("jane.doe", "jane.doe")
        assert result.kind == PrincipalKind.FAMILY_MEMBER

    @pytest.mark.asyncio
    async def test_success_clears_failures(self, service, limiter, family_user):
        for _ in range(5):
            with pytest.raises(InvalidCredentials):
                await service.login("jane.doe", "wrong-password")

        await service.login("jane.doe", "jane.doe")
        assert f"member_{family_user.id}" not in limiter.entries

    @pytest.mark.asyncio
    async def test_session_row_is_stored(self, service, db_session, admin_user, test_settings):
        result = await service.login("admin@x.com", "secret123", ClientMeta(ip_address="10.0.0.1", user_agent="pytest"))

        rows = await active_sessions(db_session, PrincipalKind.ADMIN, admin_user.id)
        assert len(rows) == 1
        row = rows[0]
        assert row.token == result.token
        assert row.ip_address == "10.0.0.1"
        assert row.user_agent == "pytest"
        ttl = row.expires_at - row.created_at
        assert abs(ttl - timedelta(hours=test_settings.SESSION_TTL_HOURS)) < timedelta(seconds=5)


class TestResolveSession:
    @pytest.mark.asyncio
    async def test_round_trip(self, service, family_user):
        result = await service.login("jane.doe", "jane.doe")
        current = await service.resolve_session(result.token)

        assert current.id == family_user.id
        assert current.kind == PrincipalKind.FAMILY_MEMBER
        assert current.role == "member"
        assert current.session_token == result.token

    @pytest.mark.asyncio
    async def test_unknown_token(self, service):
        with pytest.raises(Unauthenticated):
            await service.resolve_session("member_" + "0" * 64)

    @pytest.mark.asyncio
    async def test_prefix_must_match_row_kind(self, service, db_session, family_user):
        token = "admin_" + "b" * 64
        await SessionStore(db_session).create(
            token, PrincipalKind.FAMILY_MEMBER, family_user.id, timedelta(hours=1)
        )
        await db_session.commit()

        with pytest.raises(Unauthenticated):
            await service.resolve_session(token)

    @pytest.mark.asyncio
    async def test_legacy_unprefixed_token(self, service, db_session, admin_user):
        token = "c" * 64
        await SessionStore(db_session).create(token, PrincipalKind.ADMIN, admin_user.id, timedelta(hours=1))
        await db_session.commit()

        current = await service.resolve_session(token)
        assert current.kind == PrincipalKind.ADMIN
        assert current.id == admin_user.id
        assert current.is_admin

    @pytest.mark.asyncio
    async def test_legacy_token_matching_two_principals_is_refused(
        self, service, admin_user, family_user, monkeypatch
    ):
        rows = [
            AuthSession(token="d" * 64, principal_kind=PrincipalKind.ADMIN, principal_id=admin_user.id,
                        expires_at=utcnow() + timedelta(hours=1), is_active=True),
            AuthSession(token="d" * 64, principal_kind=PrincipalKind.FAMILY_MEMBER, principal_id=family_user.id,
                        expires_at=utcnow() + timedelta(hours=1), is_active=True),
        ]

        async def find_active(token, kind=None):
            assert kind is None
            return rows

        monkeypatch.setattr(service.sessions, "find_active", find_active)

        with pytest.raises(SessionCollision):
            await service.resolve_session("d" * 64)

    @pytest.mark.asyncio
    async def test_expired_session(self, service, db_session, family_user):
        result = await service.login("jane.doe", "jane.doe")
        row = (await active_sessions(db_session, PrincipalKind.FAMILY_MEMBER, family_user.id))[0]
        row.expires_at = utcnow() - timedelta(seconds=1)
        await db_session.commit()

        with pytest.raises(SessionExpired):
            await service.resolve_session(result.token)

        # the row was deactivated, so the token is now simply unknown
        with pytest.raises(Unauthenticated):
            await service.resolve_session(result.token)

    @pytest.mark.asyncio
    async def test_deactivated_principal(self, service, db_session, family_user):
        result = await service.login("jane.doe", "jane.doe")
        await service.principals.set_active(PrincipalKind.FAMILY_MEMBER, family_user.id, False)
        await db_session.commit()

        with pytest.raises(AccountDisabled):
            await service.resolve_session(result.token)


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_ends_session(self, service, family_user):
        result = await service.login("jane.doe", "jane.doe")
        await service.logout(result.token)

        with pytest.raises(Unauthenticated):
            await service.resolve_session(result.token)

    @pytest.mark.asyncio
    async def test_logout_is_idempotent(self, service, family_user):
        result = await service.login("jane.doe", "jane.doe")
        await service.logout(result.token)
        await service.logout(result.token)
        await service.logout("member_" + "f" * 64)
        await service.logout(None)

    @pytest.mark.asyncio
    async def test_logout_leaves_other_sessions(self, service, family_user):
        first = await service.login("jane.doe", "jane.doe")
        second = await service.login("jane.doe", "jane.doe")

        await service.logout(first.token)
        current = await service.resolve_session(second.token)
        assert current.id == family_user.id


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_change_password_invalidates_every_session(self, service, db_session, family_user):
        first = await service.login("jane.doe", "jane.doe")
        second = await service.login("jane.doe", "jane.doe")

        ended = await service.change_password(
            family_user.id, PrincipalKind.FAMILY_MEMBER, "jane.doe", "a-much-better-password"
        )
        assert ended == 2

        for token in (first.token, second.token):
            with pytest.raises(Unauthenticated):
                await service.resolve_session(token)

        with pytest.raises(InvalidCredentials):
            await service.login("jane.doe", "jane.doe")
        result = await service.login("jane.doe", "a-much-better-password")
        assert result.principal.password_changed is True

    @pytest.mark.asyncio
    async def test_change_password_clears_rate_limit(self, service, limiter, family_user):
        for _ in range(3):
            with pytest.raises(InvalidCredentials):
                await service.login("jane.doe", "wrong-password")

        await service.change_password(
            family_user.id, PrincipalKind.FAMILY_MEMBER, "jane.doe", "a-much-better-password"
        )
        assert f"member_{family_user.id}" not in limiter.entries

    @pytest.mark.asyncio
    async def test_short_password_is_rejected(self, service, family_user):
        with pytest.raises(PasswordPolicyError):
            await service.change_password(family_user.id, PrincipalKind.FAMILY_MEMBER, "jane.doe", "short")

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, service, family_user):
        with pytest.raises(InvalidCredentials) as exc_info:
            await service.change_password(
                family_user.id, PrincipalKind.FAMILY_MEMBER, "nope", "a-much-better-password"
            )
        assert exc_info.value.message == "Current password is incorrect"

    @pytest.mark.asyncio
    async def test_missing_principal(self, service):
        with pytest.raises(PrincipalNotFound):
            await service.change_password(999, PrincipalKind.ADMIN, "whatever", "a-much-better-password")


class TestRateLimitKey:
    @pytest.mark.asyncio
    async def test_key_resolution(self, service, make_admin, make_member):
        member = await make_member()
        admin = await make_admin(email="boss@x.com", username="boss")

        assert await service.rate_limit_key("jane.doe") == f"member_{member.id}"
        assert await service.rate_limit_key("boss") == f"admin_{admin.id}"
        assert await service.rate_limit_key("boss@x.com") == f"admin_{admin.id}"
        assert await service.rate_limit_key("ghost") == "unknown_ghost"
