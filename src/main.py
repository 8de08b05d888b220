import logging
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from create_tables import create_tables
from database import get_db
from exception_handler import setup_exception_handlers

from modules.contracts.job import start_finalization_retry_job
from modules.contracts.services import FinalizationService, SigningService
from modules.integrations.email_client import EmailClient
from modules.integrations.renderer import HttpPdfRenderer
from modules.integrations.signer import ExternalSigner
from modules.notifications.services.notification_service import NotificationService
from modules.notifications.controllers.notification_controller import router as notification_router
from modules.contracts.controllers.contract_controller import router as contract_router
from modules.contracts.controllers.signature_controller import router as signature_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def build_services(app: FastAPI):
    """Creates the process-wide service handles and binds them to app.state."""
    email_client = EmailClient(
        smtp_host=settings.SMTP_HOST,
        smtp_port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_ssl=settings.SMTP_USE_SSL,
    )
    notifier = NotificationService(
        email_client,
        sender=f'"{settings.EMAIL_SENDER_NAME}" <{settings.EMAIL_SENDER}>',
        frontend_base_url=settings.FRONTEND_BASE_URL,
    )

    signer = None
    if settings.SIGNER_ENABLED:
        if not settings.SIGNER_URL:
            raise RuntimeError("SIGNER_ENABLED is set but SIGNER_URL is empty")
        signer = ExternalSigner(
            settings.SIGNER_URL,
            client_cert=settings.SIGNER_CLIENT_CERT,
            client_key=settings.SIGNER_CLIENT_KEY,
            ca_bundle=settings.SIGNER_CA_BUNDLE,
            timeout=settings.SIGNER_TIMEOUT_SECONDS,
        )

    finalizer = FinalizationService(
        renderer=HttpPdfRenderer(settings.RENDERER_URL, timeout=settings.RENDER_TIMEOUT_SECONDS),
        notifier=notifier,
        signer=signer,
        view_url_template=settings.FRONTEND_BASE_URL.rstrip("/") + "/print/{document_id}",
    )

    app.state.notification_service = notifier
    app.state.finalization_service = finalizer
    app.state.signing_service = SigningService(notifier, finalizer)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup logic ---
    logger.info("Starting application")
    create_tables()
    build_services(app)
    scheduler = start_finalization_retry_job(
        app.state.finalization_service, settings.FINALIZE_RETRY_MINUTES
    )
    yield
    # --- Shutdown logic ---
    scheduler.shutdown(wait=False)
    logger.info("Application stopped")

app = FastAPI(
    title="E-Sign Contract Service",
    description="Two-party contract signing with one-time finalization",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Accept", "Content-Type", "Authorization", "Origin"],
    max_age=86400,
)
setup_exception_handlers(app)

@app.get("/health", tags=["health"])
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return JSONResponse(status_code=500, content={"status": "error", "error": str(e)})
    return {"status": "ok", "db": True}

# Routers
app.include_router(notification_router, prefix="/notifications", tags=["notifications"])
app.include_router(contract_router)
app.include_router(signature_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=4000, reload=True)
