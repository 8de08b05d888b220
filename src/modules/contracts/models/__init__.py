from .contract import Contract, ContractStatus
from .signature import Signature, SignerParty, ROLE_MAX_LENGTH

__all__ = ['Contract', 'ContractStatus', 'Signature', 'SignerParty', 'ROLE_MAX_LENGTH']
