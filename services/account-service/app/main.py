"""FastAPI application wiring for the account service."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.routes import router
from .config import Settings, get_settings
from .domain.contracts import AccountStore, PasswordEncoder
from .domain.handlers import LoginFailureHandler, LoginSuccessHandler
from .domain.service import AccountService
from .domain.sweep import InactivitySweepTask
from .memory_repository import InMemoryAccountRepository
from .repository import AccountRepository
from .scheduler import SweepScheduler
from .security.passwords import BcryptPasswordEncoder

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def configure_state(
    app: FastAPI,
    store: AccountStore,
    config: Settings,
    encoder: PasswordEncoder | None = None,
) -> None:
    """Attach the account service, login handlers and sweep task to ``app.state``."""
    app.state.settings = config
    app.state.account_service = AccountService(store, encoder or BcryptPasswordEncoder())
    app.state.login_success_handler = LoginSuccessHandler(store, config)
    app.state.login_failure_handler = LoginFailureHandler(store, config)
    app.state.sweep_task = InactivitySweepTask(store, config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (account store, services, sweep timer) for the app lifecycle."""
    pool: ConnectionPool | None = None
    if settings.store_backend == "memory":
        logger.warning("using in-memory account store; accounts are lost on restart")
        store: AccountStore = InMemoryAccountRepository()
    else:
        pool = ConnectionPool(settings.database_url, open=False)
        pool.open()
        store = AccountRepository(pool)
    configure_state(app, store, settings)

    scheduler: SweepScheduler | None = None
    if settings.sweep_enabled:
        scheduler = SweepScheduler(app.state.sweep_task, settings.sweep_interval_seconds)
        scheduler.start()
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.stop()
        if pool is not None:
            pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", tags=["health"])
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(router)
