import pytest

from assistant_dashboard.identity import (
    AuthError,
    InvalidCredentialsError,
    PermissionDeniedError,
    UserExistsError,
)
from assistant_dashboard.models import Role


def test_sign_up_sign_in_and_role(identity):
    user = identity.sign_up("Client@Example.com", "pw", "Мария")
    assert user.email == "client@example.com"
    assert user.password_hash and "pw" not in user.password_hash
    assert identity.get_role(user.id) is Role.CLIENT

    session = identity.sign_in("client@example.com", "pw")
    assert identity.get_user(session.token) is user


def test_wrong_password(identity):
    identity.sign_up("client@example.com", "pw")
    with pytest.raises(InvalidCredentialsError):
        identity.sign_in("client@example.com", "nope")


def test_unknown_user(identity):
    with pytest.raises(InvalidCredentialsError):
        identity.sign_in("ghost@example.com", "pw")


def test_duplicate_sign_up(identity):
    identity.sign_up("client@example.com", "pw")
    with pytest.raises(UserExistsError):
        identity.sign_up("CLIENT@example.com", "other")


@pytest.mark.parametrize("email", ["not-an-email", "a@b", "x" * 250 + "@example.com"])
def test_sign_up_rejects_bad_email(identity, email):
    with pytest.raises(AuthError):
        identity.sign_up(email, "pw")


def test_sign_out_invalidates_token(identity):
    identity.sign_up("client@example.com", "pw")
    session = identity.sign_in("client@example.com", "pw")
    identity.sign_out(session.token)
    with pytest.raises(InvalidCredentialsError):
        identity.get_user(session.token)


def test_assign_role(identity):
    user = identity.sign_up("client@example.com", "pw")
    identity.assign_role(user.id, Role.ADMIN)
    assert identity.get_role(user.id) is Role.ADMIN
    assert identity.get_role("nobody") is None


def test_admin_updates_email(identity, admin_session):
    user = identity.sign_up("client@example.com", "pw")
    updated = identity.update_user_email(admin_session.token, user.id, "new@example.com")
    assert updated.email == "new@example.com"
    assert identity.sign_in("new@example.com", "pw").user_id == user.id


def test_client_cannot_update_email(identity):
    user = identity.sign_up("client@example.com", "pw")
    session = identity.sign_in("client@example.com", "pw")
    with pytest.raises(PermissionDeniedError):
        identity.update_user_email(session.token, user.id, "new@example.com")


def test_email_update_validation(identity, admin_session):
    user = identity.sign_up("client@example.com", "pw")
    identity.sign_up("taken@example.com", "pw")
    with pytest.raises(AuthError):
        identity.update_user_email(admin_session.token, user.id, "broken")
    with pytest.raises(UserExistsError):
        identity.update_user_email(admin_session.token, user.id, "taken@example.com")
    with pytest.raises(AuthError):
        identity.update_user_email(admin_session.token, "missing", "free@example.com")


def test_email_update_needs_valid_token(identity):
    with pytest.raises(InvalidCredentialsError):
        identity.update_user_email("bad-token", "whatever", "new@example.com")
