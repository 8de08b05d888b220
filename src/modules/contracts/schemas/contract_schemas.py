from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, EmailStr, Field

from modules.contracts.models.contract import ContractStatus
from modules.contracts.models.signature import SignerParty
from modules.contracts.services.finalization_service import FinalizationOutcome

class ContractCreate(BaseModel):
    config: Dict[str, Any]
    customer_email: Optional[EmailStr] = Field(None, alias="customerEmail")

    model_config = {"populate_by_name": True}

class ContractCreatedResponse(BaseModel):
    documentId: str
    message: str

class ContractResponse(BaseModel):
    id: int
    documentId: str
    config: Dict[str, Any]
    status: ContractStatus
    allowedParties: List[SignerParty]
    createdAt: datetime
    finalSentAt: Optional[datetime] = None

class SignatureInput(BaseModel):
    image: str
    name: Optional[str] = None
    title: Optional[str] = None

class SignRequest(BaseModel):
    # {role: image} or {role: {"image", "name", "title"}}
    signatures: Dict[str, Union[str, SignatureInput]]

    def as_mapping(self) -> Dict[str, Any]:
        return {
            role: value.model_dump() if isinstance(value, SignatureInput) else value
            for role, value in self.signatures.items()
        }

class SignatureResponse(BaseModel):
    role: str
    party: SignerParty
    signature_image: str
    signer_name: Optional[str] = None
    signer_title: Optional[str] = None
    signed_at: datetime

    model_config = {"from_attributes": True}

class SignatureListResponse(BaseModel):
    signatures: List[SignatureResponse]

class SendSignEmailRequest(BaseModel):
    email: EmailStr
    documentId: str

class FinalizationResponse(BaseModel):
    documentId: str
    outcome: FinalizationOutcome
    recipients: List[str]
    countersigned: bool
    finalSentAt: Optional[datetime] = None

class SignResponse(BaseModel):
    message: str
    documentId: str
    party: SignerParty
    status: ContractStatus
    complete: bool
    signedRoles: List[str]
    missingRoles: List[str]
    warnings: List[str] = []
    finalization: Optional[FinalizationResponse] = None
