from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from intake.api.routes import companies, exports, ping, sessions, tickets
from intake.companies import CompanyStore
from intake.conversation import AnthropicCompletionClient, CompletionClient, SessionManager
from intake.conversation.prompts import build_system_prompt
from intake.core.config import Settings, get_settings
from intake.core.logging import configure_logging, init_tracer, shutdown_tracer
from intake.export import ExportAssembler
from intake.tickets import TicketRegistry


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings: Settings = app.state.settings
    logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)

    app.state.logger = logger
    app.state.tracer_provider = tracer_provider
    logger.info("Starting %s (%s)", settings.app_name, settings.environment)
    try:
        yield
    finally:
        close = getattr(app.state.completion_client, "close", None)
        if close is not None:
            await close()
        shutdown_tracer(tracer_provider)


def build_completion_client(settings: Settings) -> AnthropicCompletionClient:
    return AnthropicCompletionClient(
        api_key=settings.anthropic_api_key,
        model=settings.anthropic_model,
        base_url=settings.anthropic_base_url,
        version=settings.anthropic_version,
        max_tokens=settings.completion_max_tokens,
        timeout=settings.completion_timeout,
    )


def create_app(
    settings: Settings | None = None,
    *,
    completion_client: CompletionClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    company_store = CompanyStore()
    ticket_registry = TicketRegistry(companies=company_store)
    client = completion_client or build_completion_client(settings)
    session_manager = SessionManager(
        companies=company_store,
        registry=ticket_registry,
        completion_client=client,
        system_prompt=build_system_prompt(settings.vendor_name, settings.response_language),
        vendor_name=settings.vendor_name,
        timeout=settings.completion_timeout,
    )

    app.state.settings = settings
    app.state.companies = company_store
    app.state.ticket_registry = ticket_registry
    app.state.completion_client = client
    app.state.session_manager = session_manager
    app.state.export_assembler = ExportAssembler(
        companies=company_store,
        sessions=session_manager,
        registry=ticket_registry,
    )

    app.include_router(ping.router)
    app.include_router(companies.router)
    app.include_router(sessions.router)
    app.include_router(tickets.router)
    app.include_router(exports.router)
    return app


app = create_app()
