"""
Login, token refresh, logout and credential changes.

Every authentication failure leaves here as UnauthorizedError. The reason
attribute says which check failed; responses never do.
"""
import functools
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
from sqlalchemy.orm import Session
from core.exceptions import InvalidTokenError, NotFoundError, UnauthorizedError
from models.users import User
from services.auth_service import AuthService
from services.refresh_token_store import RefreshTokenStore
from services.token_service import TokenService
from utils.clock import utc_now
from utils.hashing import get_password_hash, verify_password
from utils.logger import get_logger, sanitize_log_data

logger = get_logger(__name__)

ACCESS_TOKEN_LIFETIME = timedelta(hours=1)
LOGIN_FAILED = "Incorrect email or password"


@functools.cache
def _get_dummy_hash() -> str:
    # Verified against when the email is unknown, so both failures cost one argon2 run
    return get_password_hash("chirpy-no-such-user")


@dataclass
class LoginResult:
    user: User
    token: str
    refresh_token: str


class SessionService:

    def __init__(self, db: Session, token_secret: str,
                 access_token_lifetime: timedelta = ACCESS_TOKEN_LIFETIME,
                 refresh_tokens: Optional[RefreshTokenStore] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.token_secret = token_secret
        self.access_token_lifetime = access_token_lifetime
        self.clock = clock
        self.refresh_tokens = refresh_tokens or RefreshTokenStore(db, clock=clock)

    def _issue_access_token(self, user_id) -> str:
        return TokenService.create_access_token(
            user_id, self.token_secret, self.access_token_lifetime, now=self.clock()
        )

    def login(self, email: str, password: str) -> LoginResult:
        user = AuthService.get_user_by_email(email, self.db)

        if user is None:
            verify_password(password, _get_dummy_hash())
            logger.warning("Login failed - user not found", extra={"email": email})
            raise UnauthorizedError(LOGIN_FAILED, reason="unknown_email")

        try:
            matched = verify_password(password, user.hashed_password)
        except ValueError:
            logger.error("Stored password hash is malformed", extra={"user_id": str(user.id)})
            raise UnauthorizedError(LOGIN_FAILED, reason="malformed_hash")

        if not matched:
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": str(user.id), "email": email}
            )
            raise UnauthorizedError(LOGIN_FAILED, reason="wrong_password")

        token = self._issue_access_token(user.id)
        refresh_token = self.refresh_tokens.issue(user.id)

        logger.info("User logged in successfully", extra={"user_id": str(user.id)})

        return LoginResult(user=user, token=token, refresh_token=refresh_token.token)

    def refresh(self, refresh_token: str) -> str:
        """
        Mints a new access token from a usable refresh token. The refresh
        token itself is left untouched.
        """
        try:
            model = self.refresh_tokens.lookup(refresh_token)
        except NotFoundError:
            self._log_refresh_failure(refresh_token, "not_found")
            raise UnauthorizedError("Invalid token", reason="not_found")

        if model.is_expired(self.clock()):
            self._log_refresh_failure(refresh_token, "expired")
            raise UnauthorizedError("Invalid token", reason="expired")

        if model.is_revoked:
            self._log_refresh_failure(refresh_token, "revoked")
            raise UnauthorizedError("Invalid token", reason="revoked")

        token = self._issue_access_token(model.user_id)

        logger.info("Access token refreshed", extra={"user_id": str(model.user_id)})

        return token

    def revoke(self, refresh_token: str) -> None:
        """Revokes a refresh token. Unknown and already revoked tokens are not errors."""
        try:
            self.refresh_tokens.revoke(refresh_token)
        except NotFoundError:
            logger.info("Revoke requested for unknown refresh token",
                        extra=sanitize_log_data({"refresh_token": refresh_token}))
            return

        logger.info("Refresh token revoked", extra=sanitize_log_data({"refresh_token": refresh_token}))

    def authenticate(self, access_token: str):
        """Returns the user id an access token asserts."""
        try:
            return TokenService.validate_access_token(access_token, self.token_secret, now=self.clock())
        except InvalidTokenError as e:
            logger.warning("Access token rejected", extra={"reason": e.reason})
            raise UnauthorizedError("Invalid token", reason=e.reason) from e

    def update_credentials(self, access_token: str, email: str, password: str) -> User:
        """
        Sets a new email and password for the user the access token belongs
        to. Requires an access token, a refresh token is not enough.
        """
        user_id = self.authenticate(access_token)
        user = AuthService.set_credentials(user_id, email, get_password_hash(password), self.db)

        logger.info("User credentials updated", extra={"user_id": str(user_id)})

        return user

    def _log_refresh_failure(self, refresh_token: str, reason: str):
        logger.warning(
            "Refresh failed",
            extra=sanitize_log_data({"refresh_token": refresh_token, "reason": reason})
        )
