from __future__ import annotations

import logging
import re
import time
import uuid
from datetime import datetime
from typing import Callable

from domain.errors import AuthenticationError, ConflictError, InputValidationError
from domain.models import Account
from domain.schemas import AccountView, AuthResult, LoginRequest, RegisterRequest
from infrastructure.persistence.store import DocumentStore
from infrastructure.security.passwords import PasswordHasher
from infrastructure.security.tokens import TokenService

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
_COMPLEXITY_RE = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def account_view(account: Account) -> AccountView:
    prefs = account.preferences
    return AccountView(
        id=account.id,
        name=account.name,
        email=account.email,
        preferences={
            "currency": prefs.currency,
            "theme": prefs.theme,
            "notifications": prefs.notifications,
            "language": prefs.language,
        },
        stats={
            "totalTransactions": account.stats.total_transactions,
            "totalSaved": float(account.stats.total_saved),
            "streak": account.stats.streak,
        },
    )


class AuthService:
    """Registration, login and bearer-token resolution."""

    MIN_NAME_LENGTH = 2
    MAX_NAME_LENGTH = 30
    MIN_PASSWORD_LENGTH = 8
    # bcrypt only looks at the first 72 bytes.
    MAX_PASSWORD_BYTES = 72

    def __init__(
        self,
        store: DocumentStore,
        hasher: PasswordHasher | None = None,
        tokens: TokenService | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._hasher = hasher or PasswordHasher()
        self._tokens = tokens or TokenService()
        self._clock = clock

    def register(self, request: RegisterRequest) -> AuthResult:
        name = request.name.strip()
        email = request.email.strip()
        self._check_registration(name, email, request.password, request.confirm_password)

        t = time.perf_counter()
        document = self._store.load()
        if document.find_account_by_email(email) is not None:
            raise ConflictError("Email already registered", code="EMAIL_EXISTS")

        now = self._clock().replace(microsecond=0)
        account = Account(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=self._hasher.hash(request.password),
            created_at=now,
            last_login_at=now,
        )
        document.accounts.append(account)
        self._store.save(document)
        logger.info("AuthService registered account_id=%s in %.2fs", account.id, time.perf_counter() - t)
        return AuthResult(token=self._tokens.issue(account), user=account_view(account))

    def login(self, request: LoginRequest) -> AuthResult:
        email = request.email.strip()
        if not email or not request.password:
            raise InputValidationError("Email and password are required", code="MISSING_CREDENTIALS")

        document = self._store.load()
        account = document.find_account_by_email(email)
        if account is None or not self._hasher.verify(request.password, account.password_hash):
            logger.info("AuthService login rejected")
            raise InputValidationError("Invalid credentials", code="INVALID_CREDENTIALS")

        account.last_login_at = self._clock().replace(microsecond=0)
        account.stats.streak += 1
        self._store.save(document)
        logger.info("AuthService login account_id=%s streak=%d", account.id, account.stats.streak)
        return AuthResult(token=self._tokens.issue(account), user=account_view(account))

    def authenticate(self, token: str | None) -> Account:
        if not token:
            raise AuthenticationError("Access token required", code="AUTH_REQUIRED")
        claims = self._tokens.verify(token)
        account = self._store.load().find_account(str(claims["sub"]))
        if account is None:
            raise AuthenticationError("Invalid or expired token", code="INVALID_TOKEN", status_code=403)
        return account

    def _check_registration(self, name: str, email: str, password: str, confirm_password: str) -> None:
        if not (self.MIN_NAME_LENGTH <= len(name) <= self.MAX_NAME_LENGTH):
            raise InputValidationError(
                f"Name must have between {self.MIN_NAME_LENGTH} and {self.MAX_NAME_LENGTH} characters",
                code="INVALID_NAME",
            )
        if not _EMAIL_RE.match(email):
            raise InputValidationError("Email must be valid", code="INVALID_EMAIL")
        if len(password) < self.MIN_PASSWORD_LENGTH:
            raise InputValidationError(
                f"Password must have at least {self.MIN_PASSWORD_LENGTH} characters",
                code="WEAK_PASSWORD",
            )
        if len(password.encode("utf-8")) > self.MAX_PASSWORD_BYTES:
            raise InputValidationError("Password is too long", code="WEAK_PASSWORD")
        if not _COMPLEXITY_RE.match(password):
            raise InputValidationError(
                "Password must contain lowercase and uppercase letters and digits",
                code="PASSWORD_COMPLEXITY",
            )
        if password != confirm_password:
            raise InputValidationError("Passwords do not match", code="PASSWORD_MISMATCH")
