from __future__ import annotations

import hashlib
import hmac
import math
import time
from typing import Optional

# Nonces are valid for the current and the previous tick (12-24 hours).
NONCE_LIFE = 24 * 60 * 60
NONCE_LENGTH = 10


class SecurityCheckError(Exception):
    """Raised when a dashboard request carries a nonce that does not verify."""

    def __init__(self, message: str = "Security check"):
        super().__init__(message)
        self.message = message


def nonce_tick(now: Optional[float] = None) -> int:
    t = time.time() if now is None else now
    return int(math.ceil(t / (NONCE_LIFE / 2)))


def _nonce_for_tick(tick: int, action: str, secret: str) -> str:
    msg = f"{tick}|{action}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), msg, hashlib.sha256).hexdigest()
    return digest[-12:-2]


def create_nonce(action: str, secret: str, *, now: Optional[float] = None) -> str:
    return _nonce_for_tick(nonce_tick(now), action, secret)


def verify_nonce(
    nonce: Optional[str],
    action: str,
    secret: str,
    *,
    now: Optional[float] = None,
) -> bool:
    if not nonce:
        return False

    given = nonce.encode("utf-8")
    tick = nonce_tick(now)
    for candidate_tick in (tick, tick - 1):
        expected = _nonce_for_tick(candidate_tick, action, secret)
        if hmac.compare_digest(expected.encode("utf-8"), given):
            return True
    return False
