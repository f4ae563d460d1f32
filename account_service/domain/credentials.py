"""Login and registration flows that end in a signed access token."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .account import Account
from .service import AccountService
from ..config import Settings, get_settings
from ..security.tokens import issue_access_token

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Invalid email or password"
LOGIN_SUCCEEDED_MESSAGE = "Login successful"
REGISTERED_MESSAGE = "Registration successful"


@dataclass(slots=True)
class AuthenticationResult:
    """Outcome of a login or registration attempt returned to the transport."""

    success: bool
    message: str
    token: str | None = None
    expires_in: int | None = None
    account: Account | None = None

    @classmethod
    def failure(cls, message: str = LOGIN_FAILED_MESSAGE) -> "AuthenticationResult":
        """Build the neutral negative outcome shared by every failed login."""
        return cls(success=False, message=message)


class CredentialIssuer:
    """Issue session tokens for accounts verified by the :class:`AccountService`."""

    def __init__(self, accounts: AccountService, settings: Settings | None = None) -> None:
        self._accounts = accounts
        self._settings = settings or get_settings()

    def login(self, email: str | None, password: str | None) -> AuthenticationResult:
        """Verify credentials and return a token on success.

        Every failure carries the same message so callers cannot tell an
        unknown email from a wrong password or an inactive account.
        """
        account = self._accounts.authenticate(email, password)
        if account is None:
            logger.info("login rejected")
            return AuthenticationResult.failure()

        logger.info("login succeeded", extra={"account_id": account.id})
        return self._issue(account, LOGIN_SUCCEEDED_MESSAGE)

    def register(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> AuthenticationResult:
        """Register an account and sign the caller in straight away.

        Validation and conflict errors from the account service propagate.
        """
        account = self._accounts.register(name, email, password, confirm_password)
        return self._issue(account, REGISTERED_MESSAGE)

    def _issue(self, account: Account, message: str) -> AuthenticationResult:
        token, expires_in = issue_access_token(
            account,
            signing_key=self._settings.jwt_secret,
            issuer=self._settings.jwt_issuer,
            audience=self._settings.jwt_audience,
            ttl_seconds=self._settings.jwt_ttl_seconds,
        )
        return AuthenticationResult(
            success=True,
            message=message,
            token=token,
            expires_in=expires_in,
            account=account,
        )
