from datetime import datetime, timedelta, timezone

import jwt

from glowbook.core import config


def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    issued_at = datetime.now(timezone.utc)
    payload = {"sub": subject, "exp": issued_at + timedelta(minutes=expire_minutes), "iat": issued_at}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def get_token_subject(token: str) -> str | None:
    """Email carried in the token, or None when the token has no subject.

    Raises ``jwt.InvalidTokenError`` for expired or tampered tokens.
    """
    subject = decode_access_token(token).get("sub")
    if not subject or not isinstance(subject, str):
        return None
    return subject.strip().lower()
