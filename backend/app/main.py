"""InvoiceFlow backend entrypoint."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api import businesses
from backend.app.api import categories
from backend.app.api import clients
from backend.app.api import currencies
from backend.app.api import dashboard
from backend.app.api import expenses
from backend.app.api import invoice_templates
from backend.app.api import invoices
from backend.app.api import login
from backend.app.api import preferences
from backend.app.api import products
from backend.app.api import register
from backend.app.api import reports
from backend.app.core.dev_seed import seed_startup_data
from backend.app.core.errors import InvoiceFlowError, InvoiceValidationError
from backend.app.core.logging import configure_logging
from backend.app.core.settings import get_settings
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine

configure_logging()
LOGGER = structlog.get_logger(__name__)

settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (
    register,
    login,
    businesses,
    clients,
    categories,
    products,
    expenses,
    invoices,
    invoice_templates,
    preferences,
    dashboard,
    reports,
    currencies,
):
    app.include_router(module.router)


@app.exception_handler(InvoiceFlowError)
async def handle_invoiceflow_error(request: Request, exc: InvoiceFlowError):
    body = {"detail": exc.detail}
    if isinstance(exc, InvoiceValidationError):
        body["errors"] = exc.errors
    if exc.status_code >= 500:
        LOGGER.error("request_failed", path=request.url.path, error=exc.detail)
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(error.get("loc", [])), "msg": error.get("msg", "")} for error in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": "Validation error", "errors": errors})


@app.get("/")
def read_root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def prepare_database():
    LOGGER.info("startup", environment=settings.environment, database=engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_startup_data(db)
    finally:
        db.close()
