"""E-mail verification codes and signed session tokens.

Codes are 6 digits, single-use, and kept in memory keyed by e-mail.
Tokens are `<base64 payload>.<base64 HMAC-SHA256>` with an expiry claim.
"""

import base64
import hashlib
import hmac
import json
import logging
import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic import BaseModel

from runconquer.core.config import settings
from runconquer.core.errors import InvalidToken, VerificationFailed
from runconquer.core.time_utils import utcnow

logger = logging.getLogger(__name__)


class PendingCode(BaseModel):
    email: str
    code: str
    expires_at: datetime


def log_sender(email: str, code: str) -> None:
    # Actual delivery (SMTP etc.) is plugged in by the deployment.
    logger.info("Verification code issued for %s", email)


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


class VerificationCodes:
    def __init__(
        self,
        ttl_minutes: Optional[int] = None,
        sender: Callable[[str, str], None] = log_sender,
    ):
        self._ttl = timedelta(minutes=ttl_minutes or settings.verification_code_ttl_minutes)
        self._sender = sender
        self._codes: dict[str, PendingCode] = {}
        self._lock = threading.Lock()

    def issue(self, email: str, now: Optional[datetime] = None) -> None:
        now = now or utcnow()
        pending = PendingCode(email=email, code=generate_code(), expires_at=now + self._ttl)
        with self._lock:
            self._codes[email] = pending
            self._purge(now)
        self._sender(email, pending.code)

    def pending(self, email: str) -> Optional[PendingCode]:
        with self._lock:
            return self._codes.get(email)

    def verify(self, email: str, code: str, now: Optional[datetime] = None) -> None:
        """Consume the code for `email`; raises VerificationFailed."""
        now = now or utcnow()
        with self._lock:
            stored = self._codes.get(email)
            if stored is None:
                raise VerificationFailed("Verification code not found")
            if stored.expires_at < now:
                del self._codes[email]
                raise VerificationFailed("Verification code expired")
            if not hmac.compare_digest(stored.code, code):
                raise VerificationFailed("Invalid verification code")
            del self._codes[email]

    def _purge(self, now: datetime) -> None:
        expired = [e for e, p in self._codes.items() if p.expires_at < now]
        for e in expired:
            del self._codes[e]


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _sign(payload: str, secret: str) -> str:
    return _b64(hmac.new(secret.encode(), payload.encode("ascii"), hashlib.sha256).digest())


def issue_token(subject: str, now: Optional[datetime] = None, secret: Optional[str] = None) -> str:
    now = now or utcnow()
    exp = now + timedelta(hours=settings.session_token_ttl_hours)
    payload = _b64(json.dumps({"sub": subject, "exp": int(exp.timestamp())}).encode())
    return f"{payload}.{_sign(payload, secret or settings.secret_key)}"


def read_token(token: str, now: Optional[datetime] = None, secret: Optional[str] = None) -> str:
    """Return the token subject; raises InvalidToken."""
    now = now or utcnow()
    try:
        payload, signature = token.split(".")
    except ValueError:
        raise InvalidToken("Malformed token") from None
    if not hmac.compare_digest(signature, _sign(payload, secret or settings.secret_key)):
        raise InvalidToken("Bad signature")
    try:
        claims = json.loads(_unb64(payload))
    except ValueError:
        raise InvalidToken("Malformed token") from None
    if claims.get("exp", 0) < now.timestamp():
        raise InvalidToken("Token expired")
    return claims["sub"]


verification_codes = VerificationCodes()
