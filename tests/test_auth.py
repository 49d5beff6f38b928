from qrmenu.services.auth import INVALID_CREDENTIALS, create_admin_user, ensure_admin_user
from qrmenu.services.result import CONFLICT

from tests.conftest import ADMIN_EMAIL, ADMIN_PASSWORD


async def test_sign_in_and_session_lookup(db, auth, admin_user):
    result = await auth.sign_in(db, ADMIN_EMAIL.upper(), ADMIN_PASSWORD)

    assert result.success
    assert result.user.email == ADMIN_EMAIL
    user = await auth.get_current_user(result.token)
    assert user == admin_user


async def test_wrong_password_and_unknown_email(db, auth, admin_user):
    wrong = await auth.sign_in(db, ADMIN_EMAIL, "nasi-goreng")
    unknown = await auth.sign_in(db, "nobody@parmato.test", ADMIN_PASSWORD)

    assert not wrong.success and wrong.token is None
    assert wrong.error_message == unknown.error_message == INVALID_CREDENTIALS


async def test_sign_out_ends_session(db, auth, admin_user):
    token = (await auth.sign_in(db, ADMIN_EMAIL, ADMIN_PASSWORD)).token

    assert await auth.sign_out(token)
    assert await auth.get_current_user(token) is None
    assert not await auth.sign_out(token)
    assert not await auth.sign_out(None)


async def test_auth_state_listeners(db, auth, admin_user):
    changes = []
    subscription = auth.on_auth_state_change(changes.append)

    token = (await auth.sign_in(db, ADMIN_EMAIL, ADMIN_PASSWORD)).token
    await auth.sign_out(token)
    subscription.unsubscribe()
    await auth.sign_in(db, ADMIN_EMAIL, ADMIN_PASSWORD)

    assert [c.email if c else None for c in changes] == [ADMIN_EMAIL, None]


async def test_password_is_hashed(db, admin_user):
    from qrmenu.models import AdminUser

    stored = await db.get(AdminUser, admin_user.id)
    assert stored.password_hash != ADMIN_PASSWORD


async def test_duplicate_admin_is_a_conflict(db, admin_user):
    result = await create_admin_user(db, ADMIN_EMAIL, "other")
    assert result.error_code == CONFLICT


async def test_ensure_admin_user(db):
    assert not await ensure_admin_user(db, None, None)
    assert await ensure_admin_user(db, "boss@parmato.test", "secret")
    assert not await ensure_admin_user(db, "boss@parmato.test", "secret")
