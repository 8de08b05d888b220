import logging
from typing import List

from sqlalchemy.orm import Session

from modules.contracts.models.contract import Contract, ContractStatus
from modules.contracts.services.errors import SigningError
from modules.contracts.services.finalization_service import FinalizationResult, FinalizationService

logger = logging.getLogger(__name__)


def pending_finalizations(session: Session) -> List[Contract]:
    return (
        session.query(Contract)
        .filter(
            Contract.status == ContractStatus.COMPLETED,
            Contract.final_sent_at.is_(None),
        )
        .order_by(Contract.created_at)
        .all()
    )


def retry_pending_finalizations(session: Session, finalizer: FinalizationService) -> List[FinalizationResult]:
    document_ids = [contract.document_id for contract in pending_finalizations(session)]
    session.commit()

    results = []
    for document_id in document_ids:
        try:
            results.append(finalizer.finalize(session, document_id))
        except SigningError as e:
            logger.warning("Retry of %s failed: %s", document_id, e.message)

    logger.info("Finalization retry: %d pending, %d finished", len(document_ids), len(results))
    return results
