import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from modules.contracts.models.contract import Contract, ContractStatus
from modules.contracts.services.errors import InvalidState, NotFound, SigningError, StateReason

logger = logging.getLogger(__name__)


class FinalizationOutcome(Enum):
    SENT = "SENT"
    ALREADY_SENT = "ALREADY_SENT"
    NO_RECIPIENTS = "NO_RECIPIENTS"


@dataclass
class FinalizationResult:
    document_id: str
    outcome: FinalizationOutcome
    recipients: List[str] = field(default_factory=list)
    countersigned: bool = False
    final_sent_at: Optional[datetime] = None


class FinalizationService:
    """
    Renders the completed contract, countersigns it when a signer is
    configured, and emails it to both parties.

    Every step can be retried by calling finalize() again: nothing is
    recorded until the email has gone out, and final_sent_at is written
    with a conditional update so it flips from null exactly once.
    """

    def __init__(self, renderer, notifier, signer=None, view_url_template: str = "{document_id}"):
        self.renderer = renderer
        self.notifier = notifier
        self.signer = signer
        self.view_url_template = view_url_template

    def view_url(self, document_id: str) -> str:
        return self.view_url_template.format(document_id=document_id)

    @staticmethod
    def recipients(contract: Contract) -> List[str]:
        result = []
        for email in (contract.company_email, contract.customer_email):
            if email and email.strip() and email.strip() not in result:
                result.append(email.strip())
        return result

    @staticmethod
    def mark_final_sent(session: Session, contract_id: int) -> bool:
        """Sets final_sent_at only if it is still null. Returns False when another attempt won."""
        updated = (
            session.query(Contract)
            .filter(Contract.id == contract_id, Contract.final_sent_at.is_(None))
            .update({Contract.final_sent_at: datetime.utcnow()}, synchronize_session=False)
        )
        session.commit()
        return updated == 1

    def finalize(self, session: Session, document_id: str) -> FinalizationResult:
        contract = session.query(Contract).filter(Contract.document_id == document_id).first()
        if not contract:
            raise NotFound(document_id)

        if contract.status != ContractStatus.COMPLETED:
            raise InvalidState(
                StateReason.NOT_COMPLETED,
                f"Contract {document_id} is {contract.status.value}, not COMPLETED",
            )

        # 1) Recipients
        recipients = self.recipients(contract)
        if not recipients:
            logger.warning("Contract %s has no recipients for the final document", document_id)
            return FinalizationResult(document_id, FinalizationOutcome.NO_RECIPIENTS)

        # 2) Already dispatched
        if contract.final_sent_at is not None:
            return FinalizationResult(
                document_id, FinalizationOutcome.ALREADY_SENT, recipients,
                final_sent_at=contract.final_sent_at,
            )

        contract_id = contract.id
        # End the read transaction; nothing is held during the external calls
        session.commit()

        try:
            # 3) Render
            document = self.renderer.render(self.view_url(document_id))

            # 4) Countersign
            countersigned = False
            if self.signer is not None:
                document = self.signer.sign(document)
                countersigned = True

            # 5) Email both parties
            self.notifier.send_final_document(session, contract, recipients, document)
        except SigningError as e:
            logger.warning("Finalization of %s aborted (%s): %s", document_id, e.kind.value, e.message)
            raise

        # 6) Record dispatch exactly once
        if not self.mark_final_sent(session, contract_id):
            logger.info("Contract %s was already finalized by a concurrent attempt", document_id)
            outcome = FinalizationOutcome.ALREADY_SENT
        else:
            logger.info("Final document for %s sent to %s", document_id, ", ".join(recipients))
            outcome = FinalizationOutcome.SENT

        session.refresh(contract)
        return FinalizationResult(
            document_id, outcome, recipients,
            countersigned=countersigned,
            final_sent_at=contract.final_sent_at,
        )
