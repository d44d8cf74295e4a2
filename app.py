"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires all services, registers routers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from bto.controllers.application_controller import router as application_router
from bto.controllers.auth_controller import router as auth_router
from bto.controllers.booking_controller import router as booking_router
from bto.controllers.enquiry_controller import router as enquiry_router
from bto.controllers.project_controller import router as project_router
from bto.controllers.registration_controller import router as registration_router
from bto.controllers.report_controller import router as report_router
from bto.repository.data_repository import DataRepository
from bto.services.application_service import ApplicationLifecycleService
from bto.services.auth_service import AuthService
from bto.services.booking_service import BookingWorkflowService
from bto.services.enquiry_service import EnquiryService
from bto.services.inventory_ledger import InventoryLedger
from bto.services.project_service import ProjectService
from bto.services.registration_service import RegistrationService
from bto.services.report_service import ReportService
from bto.utils.config import Settings, get_settings
from bto.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Instantiates all services with explicit dependency injection via app.state.
    Booking and application services share one InventoryLedger so that its
    per-counter locks cover every caller.
    """
    settings = settings or get_settings()

    # --- Repository (SQLite connection factory + unit of work) ---
    repository = DataRepository(settings)

    # --- Services ---
    ledger = InventoryLedger(repository)
    application_service = ApplicationLifecycleService(repository, ledger=ledger)
    booking_service = BookingWorkflowService(repository, ledger=ledger)
    project_service = ProjectService(repository, settings=settings)
    registration_service = RegistrationService(repository)
    enquiry_service = EnquiryService(repository)
    report_service = ReportService(repository)
    auth_service = AuthService(repository, settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(auth_router)
    app.include_router(project_router)
    app.include_router(application_router)
    app.include_router(booking_router)
    app.include_router(registration_router)
    app.include_router(enquiry_router)
    app.include_router(report_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.inventory_ledger = ledger
    app.state.application_service = application_service
    app.state.booking_service = booking_service
    app.state.project_service = project_service
    app.state.registration_service = registration_service
    app.state.enquiry_service = enquiry_service
    app.state.report_service = report_service
    app.state.auth_service = auth_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Schema must exist before seeding; seeding is skipped once Users has rows.
    """
    repository: DataRepository = app.state.repository
    settings: Settings = app.state.settings

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_on_startup:
        logger.info("Startup: seeding users and projects from %s", settings.seed_data_dir)
        repository.seed_from_csv(settings.seed_data_dir)

    logger.info("Startup complete; system ready")


# Module-level app object for uvicorn
app = create_app()
