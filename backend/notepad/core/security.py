import base64
import binascii
import hmac
import time
from typing import Optional

from fastapi import Response

from notepad.core.config import settings
from notepad.schemas.auth import AdminConfig


# NOTE: the session token is a reversible encoding of the admin credentials,
# not a signature. Anyone holding the string can replay it, and the embedded
# issue time is never checked; only the cookie Max-Age bounds its lifetime.
def issue_session_token(username: str, password: str, issued_at: Optional[int] = None) -> str:
    if issued_at is None:
        issued_at = int(time.time() * 1000)
    raw = f"{username}:{password}:{issued_at}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def verify_session_token(token: Optional[str], config: Optional[AdminConfig]) -> bool:
    """
    Decode a session token and compare its credentials with the stored config.
    Malformed tokens are simply not authenticated.
    """
    if not token or config is None:
        return False
    try:
        decoded = base64.b64decode(token.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return False

    # username:password, optionally followed by ":<anything>" (normally the issue time)
    expected = f"{config.username}:{config.password}"
    head, rest = decoded[:len(expected)], decoded[len(expected):]
    if rest and not rest.startswith(":"):
        return False
    return hmac.compare_digest(head.encode("utf-8"), expected.encode("utf-8"))


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE,
        path="/",
        secure=settings.SESSION_COOKIE_SECURE,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
