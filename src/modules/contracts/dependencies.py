from fastapi import Request

from config import settings
from modules.contracts.services.finalization_service import FinalizationService
from modules.contracts.services.signing_service import SigningService
from modules.notifications.services.notification_service import NotificationService


def get_signing_service(request: Request) -> SigningService:
    return request.app.state.signing_service


def get_finalization_service(request: Request) -> FinalizationService:
    return request.app.state.finalization_service


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service


def get_company_email() -> str:
    return settings.COMPANY_EMAIL
