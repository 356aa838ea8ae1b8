"""HTTP route definitions for the account service."""

from __future__ import annotations

import logging
import secrets

from datetime import datetime

from fastapi import APIRouter, Depends, Form, Header, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from ..config import Settings
from ..domain.account import Account
from ..domain.contracts import LoginOutcome, OnLoginFailure, OnLoginSuccess
from ..domain.service import AccountService
from ..domain.sweep import InactivitySweepTask

logger = logging.getLogger(__name__)

router = APIRouter()


class AccountResponse(BaseModel):
    """Security status of an account; the credential is never included."""

    account_id: int
    username: str
    active: bool
    last_login_at: datetime | None
    failed_login_attempts: int

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        """Build a response model from the domain aggregate."""
        return cls(
            account_id=account.account_id,
            username=account.username,
            active=account.active,
            last_login_at=account.last_login_at if account.has_logged_in else None,
            failed_login_attempts=account.failed_login_attempts,
        )


class SweepResponse(BaseModel):
    """Result of an on-demand inactivity sweep."""

    started_at: datetime
    deactivated: list[str]
    count: int


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def get_success_handler(request: Request) -> OnLoginSuccess:
    return request.app.state.login_success_handler


def get_failure_handler(request: Request) -> OnLoginFailure:
    return request.app.state.login_failure_handler


def get_sweep_task(request: Request) -> InactivitySweepTask:
    return request.app.state.sweep_task


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_admin(
    settings: Settings = Depends(get_app_settings),
    admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
) -> None:
    """Reject callers without the operator token; an unset token disables admin routes."""
    if not settings.admin_token or not admin_token or not secrets.compare_digest(
        admin_token, settings.admin_token
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin token required")


def _redirect(outcome: LoginOutcome) -> RedirectResponse:
    return RedirectResponse(outcome.redirect_to, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/login", tags=["auth"])
def login(
    username: str = Form(default=""),
    password: str = Form(default=""),
    service: AccountService = Depends(get_service),
    on_success: OnLoginSuccess = Depends(get_success_handler),
    on_failure: OnLoginFailure = Depends(get_failure_handler),
) -> RedirectResponse:
    """Check form credentials and redirect to the landing or failure page."""
    account = service.authenticate(username, password)
    if account is None:
        outcome = on_failure.on_login_failure(username or None)
    else:
        outcome = on_success.on_login_success(account.username)
    return _redirect(outcome)


@router.get("/logout", tags=["auth"])
def logout(settings: Settings = Depends(get_app_settings)) -> RedirectResponse:
    """Send the browser to the logged-out page."""
    return RedirectResponse(settings.logout_path, status_code=status.HTTP_303_SEE_OTHER)


@router.get(
    "/v1/accounts/{account_id}",
    response_model=AccountResponse,
    dependencies=[Depends(require_admin)],
)
def get_account(
    account_id: int,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Retrieve the security status of an account (operators only)."""
    account = service.get_account(account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="account not found")
    return AccountResponse.from_domain(account)


@router.post("/v1/sweeps", response_model=SweepResponse, dependencies=[Depends(require_admin)])
def run_sweep(task: InactivitySweepTask = Depends(get_sweep_task)) -> SweepResponse:
    """Run the inactivity sweep now instead of waiting for the next tick (operators only)."""
    result = task.run()
    if result is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="sweep already running")
    logger.info("on-demand sweep deactivated %d account(s)", result.count)
    return SweepResponse(started_at=result.started_at, deactivated=result.deactivated, count=result.count)
