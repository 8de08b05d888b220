from .contract_schemas import (
    ContractCreate, ContractCreatedResponse, ContractResponse, SignatureInput, SignRequest,
    SignatureResponse, SignatureListResponse, SendSignEmailRequest, FinalizationResponse,
    SignResponse
)

__all__ = [
    'ContractCreate', 'ContractCreatedResponse', 'ContractResponse', 'SignatureInput',
    'SignRequest', 'SignatureResponse', 'SignatureListResponse', 'SendSignEmailRequest',
    'FinalizationResponse', 'SignResponse'
]
