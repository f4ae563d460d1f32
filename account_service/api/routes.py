"""HTTP route definitions for the account service."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from prometheus_client import Counter
from psycopg_pool import ConnectionPool
from pydantic import BaseModel

from ..config import get_settings
from ..domain.account import Account
from ..domain.credentials import AuthenticationResult, CredentialIssuer
from ..domain.errors import ConflictError, DomainError, NotFoundError, StorageError
from ..domain.service import AccountService
from ..repository import AccountRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")

LOGIN_ATTEMPTS = Counter(
    "account_login_attempts",
    "Login attempts handled by the account service.",
    ["outcome"],
)


class AccountResponse(BaseModel):
    """Serialised representation of an `Account` aggregate, without its password hash."""

    id: int
    name: str
    email: str
    role: str
    created_at: datetime
    last_login_at: datetime | None = None
    is_active: bool

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        """Build a response model from the domain aggregate."""
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role,
            created_at=account.created_at,
            last_login_at=account.last_login_at,
            is_active=account.is_active,
        )


class CreateAccountRequest(BaseModel):
    """Payload accepted when creating an account without credentials."""

    name: str
    email: str


class UpdateAccountRequest(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    name: str | None = None
    email: str | None = None


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    """Result of a login or registration, carrying the bearer token on success."""

    success: bool
    message: str
    token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    account: AccountResponse | None = None

    @classmethod
    def from_result(cls, result: AuthenticationResult) -> "AuthResponse":
        if not result.success:
            return cls(success=False, message=result.message)
        return cls(
            success=True,
            message=result.message,
            token=result.token,
            token_type="bearer",
            expires_in=result.expires_in,
            account=AccountResponse.from_domain(result.account) if result.account else None,
        )


def get_service(request: Request) -> Iterator[AccountService]:
    """Bind an `AccountService` to a pooled connection for the duration of the request."""
    pool: ConnectionPool = request.app.state.pool
    settings = get_settings()
    with pool.connection() as conn:
        yield AccountService(AccountRepository(conn), bcrypt_rounds=settings.bcrypt_rounds)


def get_issuer(service: AccountService = Depends(get_service)) -> CredentialIssuer:
    return CredentialIssuer(service, get_settings())


@router.get("/accounts", response_model=list[AccountResponse])
def list_accounts(service: AccountService = Depends(get_service)) -> list[AccountResponse]:
    """Return every account ordered by creation time."""
    try:
        accounts = service.list_accounts()
    except DomainError as exc:
        raise _http_error_from_domain_error(exc) from exc
    return [AccountResponse.from_domain(account) for account in accounts]


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    try:
        account = service.get_account(account_id)
    except DomainError as exc:
        raise _http_error_from_domain_error(exc) from exc
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="account not found")
    return AccountResponse.from_domain(account)


@router.post("/accounts", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: CreateAccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Create an account without a password (administrative creation)."""
    try:
        account = service.create_account(payload.name, payload.email)
    except DomainError as exc:
        raise _http_error_from_domain_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.put("/accounts/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: int,
    payload: UpdateAccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Update the name and/or email of an existing account."""
    try:
        account = service.update_account(account_id, name=payload.name, email=payload.email)
    except DomainError as exc:
        raise _http_error_from_domain_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: int,
    service: AccountService = Depends(get_service),
) -> Response:
    try:
        deleted = service.delete_account(account_id)
    except DomainError as exc:
        raise _http_error_from_domain_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="account not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/auth/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    issuer: CredentialIssuer = Depends(get_issuer),
) -> AuthResponse:
    """Register an account with a password and return a bearer token."""
    try:
        result = issuer.register(
            payload.name,
            payload.email,
            payload.password,
            payload.confirm_password,
        )
    except DomainError as exc:
        raise _http_error_from_domain_error(exc) from exc
    return AuthResponse.from_result(result)


@router.post("/auth/login", response_model=AuthResponse)
def login(
    response: Response,
    payload: LoginRequest,
    issuer: CredentialIssuer = Depends(get_issuer),
) -> AuthResponse:
    """Exchange an email and password for a bearer token."""
    try:
        result = issuer.login(payload.email, payload.password)
    except DomainError as exc:
        raise _http_error_from_domain_error(exc) from exc
    if not result.success:
        LOGIN_ATTEMPTS.labels(outcome="failure").inc()
        response.status_code = status.HTTP_401_UNAUTHORIZED
        response.headers["WWW-Authenticate"] = "Bearer"
    else:
        LOGIN_ATTEMPTS.labels(outcome="success").inc()
    return AuthResponse.from_result(result)


def _http_error_from_domain_error(exc: DomainError) -> HTTPException:
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ConflictError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, StorageError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HTTPException(status_code=status_code, detail=str(exc))
