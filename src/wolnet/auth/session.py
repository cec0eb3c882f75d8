"""Signed flash-message cookies (itsdangerous) and HTTP Basic password checks."""

import secrets
from typing import Optional

from fastapi.security import HTTPBasicCredentials
from itsdangerous import BadSignature, URLSafeTimedSerializer

FLASH_COOKIE = "wolnet_flash"
DEFAULT_MAX_AGE = 300  # 5 minutes

_FLASH_SALT = "wolnet.flash"


def generate_secret() -> str:
    """Generate a cryptographically secure 32-byte hex secret for cookie signing."""
    return secrets.token_hex(32)


def make_flash_cookie(secret: str, message: str) -> str:
    """
    Create a signed flash cookie value.

    Args:
        secret: Signing secret of the running app.
        message: Message to show on the next page load.

    Returns:
        Signed string to set as the cookie value.
    """
    serializer = URLSafeTimedSerializer(secret, salt=_FLASH_SALT)
    return serializer.dumps(message)


def read_flash_cookie(cookie: str, secret: str, max_age: int = DEFAULT_MAX_AGE) -> Optional[str]:
    """
    Verify a flash cookie and return its message.

    Returns:
        The message, or None if the cookie is empty, tampered with or expired.
    """
    if not cookie:
        return None
    serializer = URLSafeTimedSerializer(secret, salt=_FLASH_SALT)
    try:
        message = serializer.loads(cookie, max_age=max_age)
    except BadSignature:  # includes SignatureExpired
        return None
    return str(message)


def check_basic_auth(credentials: Optional[HTTPBasicCredentials], password: str) -> bool:
    """
    Check Basic credentials parsed by ``fastapi.security.HTTPBasic`` against the configured password.

    Any user name is accepted; only the password is compared.
    """
    if credentials is None:
        return False
    return secrets.compare_digest(credentials.password.encode(), password.encode())
