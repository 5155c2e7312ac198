from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dismantlepro.api.routers.crm import companies_router, contacts_router, customers_router
from dismantlepro.api.routers.documents import email_router, exports_router, imports_router, public_router
from dismantlepro.api.routers.equipment import router as equipment_router
from dismantlepro.api.routers.followups import activity_router, reminders_router
from dismantlepro.api.routers.insights import reports_router, search_router
from dismantlepro.api.routers.quotes import inland_router, router as quotes_router
from dismantlepro.api.routers.settings import settings_router, templates_router, user_router
from dismantlepro.config import get_settings
from dismantlepro.db.init import init_database
from dismantlepro.logging_config import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    for router in (
        equipment_router,
        quotes_router,
        inland_router,
        companies_router,
        contacts_router,
        customers_router,
        reminders_router,
        activity_router,
        reports_router,
        search_router,
        settings_router,
        templates_router,
        user_router,
        email_router,
        imports_router,
        exports_router,
        public_router,
    ):
        app.include_router(router)
    return app
