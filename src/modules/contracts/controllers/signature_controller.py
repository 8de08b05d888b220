# src/modules/contracts/controllers/signature_controller.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from modules.contracts.dependencies import get_finalization_service, get_signing_service
from modules.contracts.models.signature import SignerParty
from modules.contracts.schemas import FinalizationResponse, SignRequest, SignResponse
from modules.contracts.services.finalization_service import FinalizationResult, FinalizationService
from modules.contracts.services.signing_service import SignResult, SigningService

router = APIRouter(
    prefix="/api/contracts",
    tags=["signatures"]
)

def to_finalization_response(result: Optional[FinalizationResult]) -> Optional[FinalizationResponse]:
    if result is None:
        return None
    return FinalizationResponse(
        documentId=result.document_id,
        outcome=result.outcome,
        recipients=result.recipients,
        countersigned=result.countersigned,
        finalSentAt=result.final_sent_at,
    )

def to_sign_response(result: SignResult) -> SignResponse:
    who = "Customer" if result.party == SignerParty.CUSTOMER else "Company"
    if result.complete:
        message = f"{who} signed successfully"
    else:
        message = f"{who} signatures saved, waiting for: {', '.join(result.missing_roles)}"
    return SignResponse(
        message=message,
        documentId=result.document_id,
        party=result.party,
        status=result.status,
        complete=result.complete,
        signedRoles=result.signed_roles,
        missingRoles=result.missing_roles,
        warnings=result.warnings,
        finalization=to_finalization_response(result.finalization),
    )

@router.post("/{document_id}/customer-sign", response_model=SignResponse)
def customer_sign(
    document_id: str,
    payload: SignRequest,
    db: Session = Depends(get_db),
    service: SigningService = Depends(get_signing_service),
):
    """
    Stores customer signatures; moves the contract to CUSTOMER_SIGNED once every customer role is signed.
    """
    result = service.attempt_sign(db, document_id, SignerParty.CUSTOMER, payload.as_mapping())
    return to_sign_response(result)

@router.post("/{document_id}/company-sign", response_model=SignResponse)
def company_sign(
    document_id: str,
    payload: SignRequest,
    db: Session = Depends(get_db),
    service: SigningService = Depends(get_signing_service),
):
    """
    Stores company signatures; completes and finalizes the contract once every company role is signed.
    """
    result = service.attempt_sign(db, document_id, SignerParty.COMPANY, payload.as_mapping())
    return to_sign_response(result)

@router.post("/{document_id}/finalize", response_model=FinalizationResponse)
def finalize_contract(
    document_id: str,
    db: Session = Depends(get_db),
    finalizer: FinalizationService = Depends(get_finalization_service),
):
    """
    Re-runs finalization for a completed contract. Safe to call repeatedly.
    """
    return to_finalization_response(finalizer.finalize(db, document_id))
