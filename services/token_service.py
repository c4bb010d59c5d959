import uuid
from datetime import datetime, timedelta
from typing import Optional
from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError, JWTClaimsError
from core.exceptions import InvalidTokenError, UnauthorizedError
from utils.clock import utc_now

ALGORITHM = "HS256"
TOKEN_ISSUER = "chirpy"


class TokenService:
    """
    Issues and validates access tokens.

    Access tokens are HS256 JWTs asserting a user id. They are stateless:
    nothing is stored, so they stay valid until they expire. The signing
    secret is always passed in by the caller.
    """

    @staticmethod
    def create_access_token(user_id: uuid.UUID, token_secret: str, expires_delta: timedelta,
                            now: Optional[datetime] = None) -> str:
        """
        Creates a signed access token.

        Args:
            user_id: Subject of the token
            token_secret: HMAC key
            expires_delta: Lifetime; zero or negative yields an already expired token
            now: Issue time (defaults to the current UTC time)

        Returns:
            JWT string
        """
        issued_at = now or utc_now()

        payload = {
            "iss": TOKEN_ISSUER,
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + expires_delta,
        }

        return jwt.encode(payload, token_secret, algorithm=ALGORITHM)

    @staticmethod
    def validate_access_token(token: str, token_secret: str,
                              now: Optional[datetime] = None) -> uuid.UUID:
        """
        Verifies an access token and returns the user id it asserts.

        Raises:
            InvalidTokenError: reason is one of "malformed", "wrong_algorithm",
                "bad_signature", "invalid_claims", "expired", "invalid_subject"
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise InvalidTokenError("malformed") from e

        # Reject before touching the key: an attacker picks the header
        if header.get("alg") != ALGORITHM:
            raise InvalidTokenError("wrong_algorithm")

        try:
            payload = jwt.decode(
                token,
                token_secret,
                algorithms=[ALGORITHM],
                issuer=TOKEN_ISSUER,
                # exp is checked below against our own clock, with exp == now counting as expired
                options={"verify_exp": False},
            )
        except ExpiredSignatureError as e:
            raise InvalidTokenError("expired") from e
        except JWTClaimsError as e:
            raise InvalidTokenError("invalid_claims") from e
        except JWTError as e:
            raise InvalidTokenError("bad_signature") from e

        if "iat" not in payload or "sub" not in payload:
            raise InvalidTokenError("invalid_claims")

        current = (now or utc_now()).timestamp()
        expires_at = payload.get("exp")
        if not isinstance(expires_at, (int, float)) or expires_at <= current:
            raise InvalidTokenError("expired")

        try:
            return uuid.UUID(payload["sub"])
        except (ValueError, TypeError) as e:
            raise InvalidTokenError("invalid_subject") from e

    @staticmethod
    def get_bearer_token(authorization: Optional[str]) -> str:
        """
        Pulls the token out of an `Authorization: Bearer <token>` header value.

        Raises:
            UnauthorizedError: header missing or not a bearer header
        """
        if not authorization:
            raise UnauthorizedError("Invalid token", reason="missing_authorization")

        scheme, _, token = authorization.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token or " " in token:
            raise UnauthorizedError("Invalid token", reason="malformed_authorization")

        return token
