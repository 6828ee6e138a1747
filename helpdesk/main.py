from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from helpdesk.api.routes import auth, customers, dashboard, ping, reports, tickets, users
from helpdesk.core.config import get_settings
from helpdesk.core.logging import configure_logging, init_tracer, shutdown_tracer
from helpdesk.services.auth import AuthService
from helpdesk.services.customers import CustomerService
from helpdesk.services.record_store import RecordStoreClient, RecordStoreError
from helpdesk.services.reports import ReportService
from helpdesk.services.users import UserService
from helpdesk.tickets.repository import TicketRepository
from helpdesk.tickets.service import TicketService


def install_services(app: FastAPI, client: RecordStoreClient, *, demo_password: str = "password") -> None:
    """Attach every service backed by ``client`` to the application state."""

    app.state.store_client = client
    app.state.auth_service = AuthService(client, demo_password=demo_password)
    app.state.ticket_service = TicketService(TicketRepository(client))
    app.state.customer_service = CustomerService(client)
    app.state.user_service = UserService(client)
    app.state.report_service = ReportService(client)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    logger = configure_logging(settings, logger_name="helpdesk")
    tracer_provider = init_tracer(settings)

    app.state.logger = logger
    app.state.tracer_provider = tracer_provider
    client = RecordStoreClient(base_url=settings.store_url, timeout=settings.store_timeout)
    install_services(app, client, demo_password=settings.demo_password)
    logger.info("Using record store at %s", settings.store_url)
    try:
        yield
    finally:
        await client.close()
        shutdown_tracer(tracer_provider)


async def record_store_error_handler(request: Request, exc: RecordStoreError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": f"Record store error: {exc}"})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_exception_handler(RecordStoreError, record_store_error_handler)
    app.include_router(ping.router)
    app.include_router(auth.router)
    app.include_router(tickets.router)
    app.include_router(customers.router)
    app.include_router(users.router)
    app.include_router(reports.router)
    app.include_router(dashboard.router)
    return app


app = create_app()
