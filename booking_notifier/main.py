# booking_notifier/main.py
"""
Main FastAPI app: wiring, request-id middleware and error envelopes.
"""
from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from booking_notifier import __version__
from booking_notifier.config import Settings, settings as default_settings
from booking_notifier.core.message_service import MessageService
from booking_notifier.db.message_log_store import MessageLogStore
from booking_notifier.db.session import SessionLocal, init_models
from booking_notifier.integrations.whatsapp_api import WhatsAppClient
from booking_notifier.monitoring.context import set_request_context
from booking_notifier.monitoring.logger import log
from booking_notifier.monitoring.slack_alerts import send_slack_alert
from booking_notifier.registry.brands import build_brand_registry
from booking_notifier.registry.templates import DEFAULT_CATALOG, TemplateCatalog
from booking_notifier.api.admin.health import router as health_router
from booking_notifier.api.admin.monitoring import router as monitoring_router
from booking_notifier.api.notifications.whatsapp import router as whatsapp_router
from booking_notifier.api.notifications.pdf import router as pdf_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await init_models()
        log("INFO", "Message log store ready", module="main")
    except (SQLAlchemyError, OSError) as exc:
        # Sends keep working without the log store
        log("ERROR", f"Message log store unavailable at startup: {exc}", module="main")
    yield


def _validation_errors(exc: RequestValidationError) -> list:
    errors = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ())]
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.append({
            "msg": msg,
            "param": ".".join(loc[1:]) if len(loc) > 1 else "",
            "location": loc[0] if loc else "body",
        })
    return errors


def create_app(
    settings: Optional[Settings] = None,
    client: Optional[WhatsAppClient] = None,
    store: Optional[MessageLogStore] = None,
    catalog: TemplateCatalog = DEFAULT_CATALOG,
) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(title="WhatsApp Notification Backend", version=__version__, lifespan=lifespan)

    brands = build_brand_registry(settings)
    if client is None:
        client = WhatsAppClient(settings.WHATSAPP_API_URL, brands, language_code=settings.WHATSAPP_LANGUAGE_CODE)
    if store is None:
        store = MessageLogStore(SessionLocal)
    app.state.brands = brands
    app.state.catalog = catalog
    app.state.message_log_store = store
    app.state.message_service = MessageService(
        brands=brands,
        catalog=catalog,
        client=client,
        store=store,
        country_code=settings.DEFAULT_COUNTRY_CODE,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        set_request_context(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"success": False, "errors": _validation_errors(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", None)
        tb = traceback.format_exc()
        log("ERROR", f"Unhandled exception: {exc}", module="main", request_id=request_id)
        await send_slack_alert(
            message=f"Critical error: {exc}",
            context={"traceback": tb},
            severity="CRITICAL",
            module="main",
            request_id=request_id
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Something went wrong!",
                "error": str(exc),
                "request_id": request_id,
            }
        )

    # Mount routers
    app.include_router(health_router)
    app.include_router(whatsapp_router)
    app.include_router(pdf_router)
    app.include_router(monitoring_router)

    log("INFO", f"WhatsApp Notification Backend configured with brands {brands.keys()}, catalog {catalog.version}", module="main")
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("booking_notifier.main:app", host="0.0.0.0", port=default_settings.PORT)


if __name__ == "__main__":
    run()
