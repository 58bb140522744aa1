"""JWT helpers for identities issued by the external provider."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from vayam.core.settings import settings


class InvalidTokenError(ValueError):
    """Raised when a bearer token cannot be decoded into a user id."""


def create_access_token(uid: int, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT access token whose subject is the numeric user id."""
    to_encode: dict[str, object] = {"sub": str(uid)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> int:
    """Return the user id carried by `token`.

    Raises:
        InvalidTokenError: If the token is malformed, expired or has no numeric subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise InvalidTokenError("Could not validate credentials") from err

    subject = payload.get("sub")
    if subject is None:
        raise InvalidTokenError("Could not validate credentials")
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise InvalidTokenError("Could not validate credentials") from err
