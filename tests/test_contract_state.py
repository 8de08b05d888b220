import pytest

from conftest import PNG_IMAGE, create_dummy_contract
from modules.contracts.models.contract import ContractStatus
from modules.contracts.models.signature import Signature, SignerParty
from modules.contracts.services.contract_state_service import ContractStateService
from modules.contracts.services.errors import ErrorKind, SigningError, StateReason


@pytest.mark.parametrize("status,party,allowed", [
    (ContractStatus.PENDING, SignerParty.CUSTOMER, True),
    (ContractStatus.PENDING, SignerParty.COMPANY, False),
    (ContractStatus.CUSTOMER_SIGNED, SignerParty.CUSTOMER, False),
    (ContractStatus.CUSTOMER_SIGNED, SignerParty.COMPANY, True),
    (ContractStatus.COMPLETED, SignerParty.CUSTOMER, False),
    (ContractStatus.COMPLETED, SignerParty.COMPANY, False),
])
def test_can_sign_table(session, status, party, allowed):
    contract = create_dummy_contract(session, status=status)
    assert ContractStateService.can_sign(contract, party) is allowed


@pytest.mark.parametrize("status,party,reason", [
    (ContractStatus.PENDING, SignerParty.COMPANY, StateReason.CUSTOMER_NOT_DONE),
    (ContractStatus.CUSTOMER_SIGNED, SignerParty.CUSTOMER, StateReason.CUSTOMER_ALREADY_SIGNED),
    (ContractStatus.COMPLETED, SignerParty.CUSTOMER, StateReason.ALREADY_COMPLETED),
    (ContractStatus.COMPLETED, SignerParty.COMPANY, StateReason.ALREADY_COMPLETED),
])
def test_check_can_sign_reports_specific_reason(session, status, party, reason):
    contract = create_dummy_contract(session, status=status)
    with pytest.raises(SigningError) as exc:
        ContractStateService.check_can_sign(contract, party)
    assert exc.value.kind == ErrorKind.INVALID_STATE
    assert exc.value.reason == reason


def test_transition_moves_forward_only(session):
    contract = create_dummy_contract(session)
    assert ContractStateService.transition(contract, SignerParty.CUSTOMER) == ContractStatus.CUSTOMER_SIGNED
    assert ContractStateService.transition(contract, SignerParty.COMPANY) == ContractStatus.COMPLETED

    with pytest.raises(SigningError):
        ContractStateService.transition(contract, SignerParty.CUSTOMER)
    assert contract.status == ContractStatus.COMPLETED


def test_missing_roles_only_counts_own_party_with_image():
    grouped = {
        SignerParty.CUSTOMER: {
            "customer_director": Signature(role="customer_director", signature_image=PNG_IMAGE),
            "customer_witness": Signature(role="customer_witness", signature_image=""),
        },
        SignerParty.COMPANY: {
            "customer_extra": Signature(role="customer_extra", signature_image=PNG_IMAGE),
        },
    }
    required = ["customer_director", "customer_witness", "customer_extra"]
    missing = ContractStateService.missing_roles(required, grouped, SignerParty.CUSTOMER)
    assert missing == ["customer_witness", "customer_extra"]


def test_get_allowed_parties(session):
    contract = create_dummy_contract(session, status=ContractStatus.CUSTOMER_SIGNED)
    assert ContractStateService.get_allowed_parties(contract) == [SignerParty.COMPANY]
    contract.status = ContractStatus.COMPLETED
    assert ContractStateService.get_allowed_parties(contract) == []
