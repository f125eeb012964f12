from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from domain.errors import AuthenticationError
from domain.models import Account

logger = logging.getLogger(__name__)

DEV_SECRET = "grana-zero-dev-secret"


class TokenService:
    """Issues and verifies HS256 session tokens for accounts."""

    algorithm = "HS256"

    def __init__(self, secret: str | None = None, expires_days: float | None = None) -> None:
        self._secret = secret or os.getenv("JWT_SECRET", DEV_SECRET)
        self.expires_in = timedelta(days=expires_days or float(os.getenv("JWT_EXPIRES_DAYS", "7")))
        if self._secret == DEV_SECRET:
            logger.warning("TokenService using the development secret; set JWT_SECRET in production")

    def issue(self, account: Account, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims: dict[str, Any] = {
            "sub": account.id,
            "email": account.email,
            "name": account.name,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_in).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise AuthenticationError("Invalid or expired token", code="INVALID_TOKEN", status_code=403) from exc
        if not claims.get("sub"):
            raise AuthenticationError("Invalid or expired token", code="INVALID_TOKEN", status_code=403)
        return claims
