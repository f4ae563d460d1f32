"""Account service enforcing validation and uniqueness rules over the storage port."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .account import DEFAULT_ROLE, Account
from .contracts import NewAccount
from .errors import ConflictError, NotFoundError, ValidationError
from .ports import AccountStore
from .validation import (
    is_blank,
    normalize_email,
    validate_email,
    validate_name,
    validate_password,
)
from ..security.passwords import dummy_hash, hash_password, verify_password

logger = logging.getLogger(__name__)


def _require_positive_id(account_id: int) -> None:
    if account_id <= 0:
        raise ValidationError("account id must be positive")


class AccountService:
    """Account workflows backed by an :class:`AccountStore`."""

    def __init__(self, repository: AccountStore, *, bcrypt_rounds: int | None = None) -> None:
        """Store the repository and the bcrypt cost used for new password hashes."""
        self._repository = repository
        self._bcrypt_rounds = bcrypt_rounds

    def list_accounts(self) -> list[Account]:
        """Return all accounts, oldest first."""
        return self._repository.list_all()

    def get_account(self, account_id: int) -> Account | None:
        _require_positive_id(account_id)
        return self._repository.get_by_id(account_id)

    def get_account_by_email(self, email: str | None) -> Account | None:
        """Case-insensitive lookup; blank input is simply not found."""
        if is_blank(email):
            return None
        return self._repository.get_by_email(normalize_email(email))

    def create_account(self, name: str, email: str) -> Account:
        """Create an account without credentials (administrative creation).

        Raises
        ------
        ValidationError
            If the name or email is missing or malformed.
        ConflictError
            If another account already uses the email.
        """
        clean_name = validate_name(name)
        clean_email = validate_email(email)
        if self._repository.exists_by_email(clean_email):
            raise ConflictError("an account with this email already exists")

        account = self._repository.insert(
            NewAccount(
                name=clean_name,
                email=clean_email,
                created_at=datetime.now(timezone.utc),
            )
        )
        self._repository.commit()
        logger.info("account created", extra={"account_id": account.id})
        return account

    def update_account(
        self,
        account_id: int,
        name: str | None = None,
        email: str | None = None,
    ) -> Account:
        """Apply a partial update; ``None`` leaves a field unchanged.

        A supplied field is always validated, so an explicit blank value is
        rejected rather than treated as "not supplied".
        """
        _require_positive_id(account_id)
        if is_blank(name) and is_blank(email):
            raise ValidationError("at least one field (name or email) must be provided")

        clean_name = validate_name(name) if name is not None else None
        clean_email = validate_email(email) if email is not None else None

        account = self._repository.get_by_id(account_id)
        if account is None:
            raise NotFoundError("account not found")

        if clean_email is not None and clean_email != account.email:
            if self._repository.exists_by_email(clean_email, exclude_id=account.id):
                raise ConflictError("another account already uses this email")
            account.email = clean_email
        if clean_name is not None:
            account.name = clean_name

        self._repository.update(account)
        self._repository.commit()
        logger.info("account updated", extra={"account_id": account.id})
        return account

    def delete_account(self, account_id: int) -> bool:
        """Hard-delete an account; return ``False`` when there was nothing to delete."""
        _require_positive_id(account_id)
        deleted = self._repository.remove(account_id)
        if deleted:
            self._repository.commit()
            logger.info("account deleted", extra={"account_id": account_id})
        return deleted

    def register(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> Account:
        """Create an account holding a bcrypt password hash."""
        clean_name = validate_name(name)
        clean_email = validate_email(email)
        validate_password(password, confirm_password)
        if self._repository.get_by_email(clean_email) is not None:
            raise ConflictError("an account with this email already exists")

        account = self._repository.insert(
            NewAccount(
                name=clean_name,
                email=clean_email,
                created_at=datetime.now(timezone.utc),
                password_hash=hash_password(password, self._bcrypt_rounds),
                role=DEFAULT_ROLE,
                is_active=True,
            )
        )
        self._repository.commit()
        logger.info("account registered", extra={"account_id": account.id})
        return account

    def authenticate(self, email: str | None, password: str | None) -> Account | None:
        """Return the account when the credentials match, otherwise ``None``.

        Unknown email, inactive account, missing hash and wrong password all
        produce the same ``None`` and cost one bcrypt verification each.
        """
        if is_blank(email) or is_blank(password):
            return None

        account = self._repository.get_by_email(normalize_email(email))
        if account is None or not account.is_active or not account.password_hash:
            verify_password(password, dummy_hash(self._bcrypt_rounds))
            return None
        if not verify_password(password, account.password_hash):
            return None

        self._stamp_login(account)
        return account

    def update_last_login(self, account_id: int) -> None:
        """Refresh the login timestamp; does nothing if the account is gone."""
        account = self._repository.get_by_id(account_id)
        if account is not None:
            self._stamp_login(account)

    def _stamp_login(self, account: Account) -> None:
        account.last_login_at = datetime.now(timezone.utc)
        self._repository.update(account)
        self._repository.commit()
