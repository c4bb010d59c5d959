import pytest
from datetime import timedelta
from core.exceptions import MalformedInputError, UnauthorizedError
from models.refresh_tokens import RefreshToken
from services.refresh_token_store import RefreshTokenStore
import services.session_service as session_module
from services.session_service import SessionService, _get_dummy_hash
from services.token_service import TokenService
from utils.hashing import verify_password

SECRET = "session-test-secret"
PASSWORD = "TestPassword123!"


@pytest.fixture
def sessions(session, clock):
    return SessionService(session, token_secret=SECRET, clock=clock)


def test_login_success(sessions, user, session, clock):
    result = sessions.login(user.email, PASSWORD)

    assert result.user.id == user.id
    assert TokenService.validate_access_token(result.token, SECRET, now=clock()) == user.id

    # valid for an hour, not longer
    TokenService.validate_access_token(result.token, SECRET, now=clock() + timedelta(minutes=59))
    with pytest.raises(UnauthorizedError):
        TokenService.validate_access_token(result.token, SECRET, now=clock() + timedelta(hours=1))

    db_token = session.query(RefreshToken).filter(RefreshToken.token == result.refresh_token).one()
    assert db_token.user_id == user.id


def test_login_email_is_case_insensitive(sessions, user):
    assert sessions.login(user.email.upper(), PASSWORD).user.id == user.id


def test_each_login_mints_a_new_refresh_token(sessions, user, session):
    first = sessions.login(user.email, PASSWORD)
    second = sessions.login(user.email, PASSWORD)

    assert first.refresh_token != second.refresh_token
    assert session.query(RefreshToken).filter(RefreshToken.user_id == user.id).count() == 2


def test_wrong_password_and_unknown_email_look_the_same(sessions, user):
    with pytest.raises(UnauthorizedError) as wrong_password:
        sessions.login(user.email, "WrongPassword123!")

    with pytest.raises(UnauthorizedError) as unknown_email:
        sessions.login("nobody@example.com", PASSWORD)

    assert str(wrong_password.value) == str(unknown_email.value)
    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.reason == "wrong_password"
    assert unknown_email.value.reason == "unknown_email"


def test_unknown_email_hash_is_computed_once(sessions):
    for email in ("nobody@example.com", "nobody-else@example.com"):
        with pytest.raises(UnauthorizedError):
            sessions.login(email, PASSWORD)

    assert _get_dummy_hash() is _get_dummy_hash()
    assert _get_dummy_hash().startswith("$argon2id$")
    assert _get_dummy_hash.cache_info().misses == 1
    assert not hasattr(session_module, "_dummy_hash")


def test_malformed_stored_hash_is_unauthorized(sessions, user, session):
    user.hashed_password = "not-a-hash"
    session.commit()

    with pytest.raises(UnauthorizedError) as exc_info:
        sessions.login(user.email, PASSWORD)

    assert exc_info.value.reason == "malformed_hash"


def test_refresh_issues_new_access_token(sessions, user, session, clock):
    login = sessions.login(user.email, PASSWORD)

    clock.advance(timedelta(minutes=90))
    token = sessions.refresh(login.refresh_token)

    assert TokenService.validate_access_token(token, SECRET, now=clock()) == user.id

    # no rotation: the refresh token is still there and still usable
    db_token = session.query(RefreshToken).filter(RefreshToken.token == login.refresh_token).one()
    assert db_token.revoked_at is None
    sessions.refresh(login.refresh_token)


def test_refresh_unknown_token(sessions):
    with pytest.raises(UnauthorizedError) as exc_info:
        sessions.refresh("f" * 64)

    assert exc_info.value.reason == "not_found"


def test_refresh_revoked_token(sessions, user):
    login = sessions.login(user.email, PASSWORD)
    sessions.revoke(login.refresh_token)

    with pytest.raises(UnauthorizedError) as exc_info:
        sessions.refresh(login.refresh_token)

    assert exc_info.value.reason == "revoked"


def test_refresh_expired_token(sessions, user, clock):
    login = sessions.login(user.email, PASSWORD)

    clock.advance(timedelta(days=60))

    with pytest.raises(UnauthorizedError) as exc_info:
        sessions.refresh(login.refresh_token)

    assert exc_info.value.reason == "expired"


def test_expired_and_revoked_reports_expired(sessions, user, clock):
    login = sessions.login(user.email, PASSWORD)
    sessions.revoke(login.refresh_token)
    clock.advance(timedelta(days=61))

    with pytest.raises(UnauthorizedError) as exc_info:
        sessions.refresh(login.refresh_token)

    assert exc_info.value.reason == "expired"


def test_revoke_is_idempotent(sessions, user):
    login = sessions.login(user.email, PASSWORD)

    sessions.revoke(login.refresh_token)
    sessions.revoke(login.refresh_token)
    sessions.revoke("never-issued")


def test_custom_refresh_lifetime(session, user, clock):
    store = RefreshTokenStore(session, clock=clock, lifetime=timedelta(days=1))
    sessions = SessionService(session, token_secret=SECRET, refresh_tokens=store, clock=clock)
    login = sessions.login(user.email, PASSWORD)

    clock.advance(timedelta(days=1))

    with pytest.raises(UnauthorizedError):
        sessions.refresh(login.refresh_token)


def test_update_credentials(sessions, user, session, clock):
    login = sessions.login(user.email, PASSWORD)

    updated = sessions.update_credentials(login.token, "Walter@Example.com", "NewPassword456!")

    assert updated.id == user.id
    assert updated.email == "walter@example.com"
    assert verify_password("NewPassword456!", updated.hashed_password)

    with pytest.raises(UnauthorizedError):
        sessions.login(user.email, PASSWORD)
    assert sessions.login("walter@example.com", "NewPassword456!").user.id == user.id


def test_update_credentials_rejects_refresh_token(sessions, user):
    login = sessions.login(user.email, PASSWORD)

    with pytest.raises(UnauthorizedError):
        sessions.update_credentials(login.refresh_token, user.email, "NewPassword456!")


def test_update_credentials_rejects_expired_access_token(sessions, user, clock):
    login = sessions.login(user.email, PASSWORD)
    clock.advance(timedelta(hours=2))

    with pytest.raises(UnauthorizedError) as exc_info:
        sessions.update_credentials(login.token, user.email, "NewPassword456!")

    assert exc_info.value.reason == "expired"


def test_update_credentials_rejects_foreign_secret(session, user, clock):
    login = SessionService(session, token_secret="other-secret", clock=clock).login(user.email, PASSWORD)
    sessions = SessionService(session, token_secret=SECRET, clock=clock)

    with pytest.raises(UnauthorizedError):
        sessions.update_credentials(login.token, user.email, "NewPassword456!")


def test_update_credentials_email_taken(sessions, user, make_user):
    other = make_user(email="jesse@example.com")
    login = sessions.login(user.email, PASSWORD)

    with pytest.raises(MalformedInputError):
        sessions.update_credentials(login.token, other.email, "NewPassword456!")
