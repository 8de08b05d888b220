# modules/notifications/controllers/notification_controller.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from database import get_db
from modules.contracts.dependencies import get_notification_service, get_signing_service
from modules.contracts.services.signing_service import SigningService
from modules.notifications.models.schemas import EmailLogResponse
from modules.notifications.services.notification_service import NotificationService

router = APIRouter()


@router.get(
    "/contracts/{document_id}",
    response_model=List[EmailLogResponse],
    summary="List emails sent for a contract"
)
def list_contract_emails(
    document_id: str,
    db: Session = Depends(get_db),
    signing: SigningService = Depends(get_signing_service),
    service: NotificationService = Depends(get_notification_service)
):
    contract = signing.get_contract(db, document_id)
    return service.get_email_logs(db, contract)
