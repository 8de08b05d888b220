import logging
from typing import Dict, List

from modules.contracts.models.contract import Contract, ContractStatus
from modules.contracts.models.signature import Signature, SignerParty
from modules.contracts.services.errors import InvalidState, StateReason

logger = logging.getLogger(__name__)

# Status a party may sign in, and the status reached once its roles are complete
TRANSITIONS = {
    SignerParty.CUSTOMER: (ContractStatus.PENDING, ContractStatus.CUSTOMER_SIGNED),
    SignerParty.COMPANY: (ContractStatus.CUSTOMER_SIGNED, ContractStatus.COMPLETED),
}


class ContractStateService:

    @staticmethod
    def can_sign(contract: Contract, party: SignerParty) -> bool:
        """
        A party may only sign while the contract is in its own phase
        """
        required_status, _ = TRANSITIONS[party]
        return contract.status == required_status

    @staticmethod
    def check_can_sign(contract: Contract, party: SignerParty) -> None:
        if ContractStateService.can_sign(contract, party):
            return

        if contract.status == ContractStatus.COMPLETED:
            if party == SignerParty.COMPANY:
                raise InvalidState(
                    StateReason.ALREADY_COMPLETED,
                    "Company has already signed; the contract is completed",
                )
            raise InvalidState(StateReason.ALREADY_COMPLETED, "Contract is already completed")

        if party == SignerParty.CUSTOMER:
            raise InvalidState(
                StateReason.CUSTOMER_ALREADY_SIGNED,
                "Customer has already signed this contract",
            )
        raise InvalidState(
            StateReason.CUSTOMER_NOT_DONE,
            "Contract is not ready for company sign: customer has not finished signing",
        )

    @staticmethod
    def next_status(party: SignerParty) -> ContractStatus:
        _, target = TRANSITIONS[party]
        return target

    @staticmethod
    def missing_roles(
        required: List[str],
        grouped: Dict[SignerParty, Dict[str, Signature]],
        party: SignerParty,
    ) -> List[str]:
        signed = grouped.get(party, {})
        return [
            role for role in required
            if role not in signed or not signed[role].signature_image
        ]

    @staticmethod
    def transition(contract: Contract, party: SignerParty) -> ContractStatus:
        """
        Moves the contract forward once the party's required roles are all signed
        """
        ContractStateService.check_can_sign(contract, party)

        previous_status = contract.status
        contract.status = ContractStateService.next_status(party)

        logger.info(
            "Contract %s changed from %s to %s",
            contract.document_id, previous_status.value, contract.status.value,
        )
        return contract.status

    @staticmethod
    def get_allowed_parties(contract: Contract) -> List[SignerParty]:
        """
        Returns the parties that may currently sign the contract
        """
        return [party for party in SignerParty if ContractStateService.can_sign(contract, party)]
