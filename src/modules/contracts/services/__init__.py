from .contract_state_service import ContractStateService
from .finalization_service import FinalizationOutcome, FinalizationResult, FinalizationService
from .retry import pending_finalizations, retry_pending_finalizations
from .signing_service import SignResult, SigningService

__all__ = [
    'ContractStateService', 'FinalizationOutcome', 'FinalizationResult', 'FinalizationService',
    'pending_finalizations', 'retry_pending_finalizations', 'SignResult', 'SigningService',
]
