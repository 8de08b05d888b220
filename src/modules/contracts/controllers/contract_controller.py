import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from modules.contracts.dependencies import get_company_email, get_signing_service
from modules.contracts.models.contract import Contract
from modules.contracts.schemas import (
    ContractCreate, ContractCreatedResponse, ContractResponse, SendSignEmailRequest,
    SignatureListResponse, SignatureResponse
)
from modules.contracts.services.contract_state_service import ContractStateService
from modules.contracts.services.errors import ConfigError, ErrorKind, SigningError
from modules.contracts.services.signing_service import SigningService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/contracts",
    tags=["contracts"]
)

def to_contract_response(contract: Contract) -> ContractResponse:
    return ContractResponse(
        id=contract.id,
        documentId=contract.document_id,
        config=contract.config,
        status=contract.status,
        allowedParties=ContractStateService.get_allowed_parties(contract),
        createdAt=contract.created_at,
        finalSentAt=contract.final_sent_at,
    )

@router.post("", response_model=ContractCreatedResponse)
def create_contract(
    payload: ContractCreate,
    db: Session = Depends(get_db),
    service: SigningService = Depends(get_signing_service),
    company_email: Optional[str] = Depends(get_company_email),
):
    if not company_email:
        logger.error("COMPANY_EMAIL is missing from the configuration")
        raise ConfigError("Server misconfiguration: COMPANY_EMAIL not set")

    contract = service.create_contract(db, payload.config, company_email, payload.customer_email)
    return ContractCreatedResponse(
        documentId=contract.document_id,
        message="Contract created successfully",
    )

@router.get("/{document_id}", response_model=ContractResponse)
def get_contract(
    document_id: str,
    db: Session = Depends(get_db),
    service: SigningService = Depends(get_signing_service),
):
    return to_contract_response(service.get_contract(db, document_id))

@router.get("/{document_id}/signatures", response_model=SignatureListResponse)
def list_signatures(
    document_id: str,
    db: Session = Depends(get_db),
    service: SigningService = Depends(get_signing_service),
):
    signatures = service.list_signatures(db, document_id)
    if not signatures:
        raise SigningError(ErrorKind.NOT_FOUND, "No signatures found for this contract")
    return SignatureListResponse(
        signatures=[SignatureResponse.model_validate(sig) for sig in signatures]
    )

@router.post("/send-sign-email")
def send_sign_email(
    payload: SendSignEmailRequest,
    db: Session = Depends(get_db),
    service: SigningService = Depends(get_signing_service),
):
    service.send_sign_request(db, payload.documentId, payload.email)
    return {"message": "Email sent successfully"}
