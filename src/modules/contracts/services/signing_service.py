import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session

from modules.contracts.models.contract import Contract, ContractStatus
from modules.contracts.models.signature import Signature, SignerParty
from modules.contracts.services.contract_state_service import ContractStateService
from modules.contracts.services.errors import (
    ConfigError, InvalidImage, InvalidInput, InvalidRole, NotFound, RoleNotAllowed, SigningError,
)
from modules.contracts.services.finalization_service import FinalizationResult, FinalizationService
from modules.contracts.services.role_extractor import RoleClassifier, classify_role, required_roles
from modules.contracts.services.signature_store import SignatureRepository, is_valid_image, is_valid_role

logger = logging.getLogger(__name__)


@dataclass
class SubmittedSignature:
    role: str
    image: Any
    name: Optional[str] = None
    title: Optional[str] = None


@dataclass
class SignResult:
    document_id: str
    party: SignerParty
    status: ContractStatus
    complete: bool
    signed_roles: List[str] = field(default_factory=list)
    missing_roles: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    finalization: Optional[FinalizationResult] = None
    finalization_error: Optional[SigningError] = None


def normalize_submission(signatures: Mapping[str, Any]) -> List[SubmittedSignature]:
    """
    Accepts {role: image} or {role: {"image": ..., "name": ..., "title": ...}}.
    """
    items = []
    for role, value in signatures.items():
        if isinstance(value, Mapping):
            items.append(SubmittedSignature(role, value.get("image"), value.get("name"), value.get("title")))
        else:
            items.append(SubmittedSignature(role, value))
    return items


class SigningService:

    def __init__(
        self,
        notifier,
        finalizer: FinalizationService,
        state_service=ContractStateService,
        classifier: RoleClassifier = classify_role,
    ):
        self.notifier = notifier
        self.finalizer = finalizer
        self.state_service = state_service
        self.classifier = classifier

    # ---- contracts ----

    @staticmethod
    def generate_document_id() -> str:
        return f"DOC-{uuid.uuid4().hex[:12].upper()}"

    def validate_config(self, config: Any) -> None:
        """A new contract must name at least one role per party, all signable and classifiable."""
        try:
            roles = required_roles(config, self.classifier)
        except SigningError as e:
            raise InvalidInput(e.message) from e

        for role in roles.customer + roles.company + roles.unclassified:
            if not is_valid_role(role):
                raise InvalidInput(f"Role identifier is not signable: {role!r}", role=role)

        if roles.unclassified:
            raise InvalidInput(
                f"Roles {roles.unclassified} belong to neither customer nor company"
            )
        if not roles.customer:
            raise InvalidInput("Configuration declares no customer signature roles")
        if not roles.company:
            raise InvalidInput("Configuration declares no company signature roles")

    def create_contract(
        self,
        session: Session,
        config: Any,
        company_email: str,
        customer_email: Optional[str] = None,
    ) -> Contract:
        self.validate_config(config)

        contract = Contract(
            document_id=self.generate_document_id(),
            config=config,
            status=ContractStatus.PENDING,
            company_email=company_email,
            customer_email=customer_email,
        )
        session.add(contract)
        session.commit()
        session.refresh(contract)

        logger.info("Contract %s created (company email %s)", contract.document_id, company_email)
        return contract

    @staticmethod
    def get_contract(session: Session, document_id: str) -> Contract:
        contract = session.query(Contract).filter(Contract.document_id == document_id).first()
        if not contract:
            raise NotFound(document_id)
        return contract

    def list_signatures(self, session: Session, document_id: str) -> List[Signature]:
        contract = self.get_contract(session, document_id)
        return SignatureRepository(session).list_by_contract(contract.id)

    def send_sign_request(self, session: Session, document_id: str, email: str) -> Contract:
        contract = self.get_contract(session, document_id)
        if contract.customer_email is None:
            contract.customer_email = email
        # The email log write commits the customer address together with it
        try:
            self.notifier.send_sign_request(session, contract, email)
        except SigningError:
            session.rollback()
            raise
        return contract

    # ---- signing ----

    def _required_for(self, contract: Contract, party: SignerParty) -> List[str]:
        roles = required_roles(contract.config, self.classifier)
        if roles.unclassified:
            raise ConfigError(
                f"Contract {contract.document_id} requires roles {roles.unclassified} "
                "that belong to neither party"
            )
        required = roles.for_party(party)
        if not required:
            raise ConfigError(
                f"Contract {contract.document_id} declares no {party.value.lower()} signature roles"
            )
        return required

    @staticmethod
    def locked_contract_query(session: Session, document_id: str):
        """Row-locking lookup that serializes signing attempts on one contract."""
        return (
            session.query(Contract)
            .filter(Contract.document_id == document_id)
            .with_for_update()
            .populate_existing()
        )

    @staticmethod
    def _validate_items(items: List[SubmittedSignature], required: List[str]) -> None:
        if not items:
            raise InvalidInput("signatures required")

        for item in items:
            if not is_valid_role(item.role):
                raise InvalidRole(item.role)
            if not is_valid_image(item.image):
                raise InvalidImage(item.role)

        for item in items:
            if item.role not in required:
                raise RoleNotAllowed(item.role, required)

    def _sign_in_transaction(
        self, session: Session, document_id: str, party: SignerParty, items: List[SubmittedSignature]
    ) -> SignResult:
        # 1) Load and lock the contract row
        contract = self.locked_contract_query(session, document_id).first()
        if not contract:
            raise NotFound(document_id)

        # 2) Lifecycle guard
        self.state_service.check_can_sign(contract, party)

        # 3) Roles this party must sign
        required = self._required_for(contract, party)

        # 4-5) Validate everything before any write
        self._validate_items(items, required)

        # 6) Upsert
        store = SignatureRepository(session)
        for item in items:
            store.upsert(contract.id, item.role, party, item.image, item.name, item.title)

        # 7) Completeness, from the stored rows
        grouped = store.group_by_party_and_role(store.list_by_contract(contract.id))
        missing = self.state_service.missing_roles(required, grouped, party)

        result = SignResult(
            document_id=document_id,
            party=party,
            status=contract.status,
            complete=not missing,
            signed_roles=[item.role for item in items],
            missing_roles=missing,
        )

        # 8-9) Partial signing persists; a full set moves the contract forward
        if not missing:
            result.status = self.state_service.transition(contract, party)

        session.commit()
        return result

    def attempt_sign(
        self,
        session: Session,
        document_id: str,
        party: SignerParty,
        signatures: Mapping[str, Any],
    ) -> SignResult:
        items = normalize_submission(signatures)

        try:
            result = self._sign_in_transaction(session, document_id, party, items)
        except Exception:
            session.rollback()
            raise

        if not result.complete:
            logger.info(
                "%s signed %s on %s, still missing %s",
                party.value, result.signed_roles, document_id, result.missing_roles,
            )
            return result

        contract = self.get_contract(session, document_id)

        # 10) Hand the contract over to the company
        if result.status == ContractStatus.CUSTOMER_SIGNED:
            try:
                self.notifier.notify_customer_signed(session, contract)
            except SigningError as e:
                result.warnings.append(f"Company notification failed: {e.message}")

        # 11) Finalize
        elif result.status == ContractStatus.COMPLETED:
            try:
                result.finalization = self.finalizer.finalize(session, document_id)
            except SigningError as e:
                result.finalization_error = e
                result.warnings.append(f"Finalization failed: {e.message}")

        return result
