import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import load_settings
from services.identity import build_resolver
from services.llm_client import build_providers
from services.quota import GuestGate, QuotaLedger
from services.summarize_routes import summarize_router

LOGGER = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Failed to generate summary. See server logs for details."


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"Invalid request: {field}: {message}" if field else f"Invalid request: {message}"


def create_app(settings=None, resolver=None, ledger=None, providers=None) -> FastAPI:
    """
    Build the API. Collaborators default to ones built from settings;
    pass them in to swap the identity service, ledger or model backends.
    """
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")

    app = FastAPI(title="Gistal Backend")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.resolver = resolver or build_resolver(settings)
    app.state.ledger = ledger or QuotaLedger(
        settings.database_path,
        limit=settings.free_summary_limit,
        strict=settings.strict_quota,
    )
    app.state.guest_gate = GuestGate()
    app.state.providers = providers or build_providers(settings)

    # ============================ ERRORS ============================
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse({"summary": _describe_validation_error(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        LOGGER.exception("General API error: %s", exc)
        return JSONResponse({"summary": INTERNAL_ERROR_MESSAGE}, status_code=500)

    # ============================ HEALTH CHECK ============================
    @app.get("/")
    def health_check():
        return {"status": "Gistal backend running"}

    app.include_router(summarize_router)
    return app
