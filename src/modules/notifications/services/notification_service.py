# modules/notifications/services/notification_service.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from modules.contracts.models.contract import Contract
from modules.contracts.services.errors import NotifyFailed
from modules.integrations.email_client import Attachment, EmailClient, EmailDeliveryError
from modules.notifications.models.email_log import EmailKind, EmailLog
from modules.notifications.repositories.email_log_repository import EmailLogRepository

logger = logging.getLogger(__name__)


class NotificationTemplate:
    kind: EmailKind

    def __init__(self, subject: str, text: str, html: str):
        self.subject = subject
        self.text = text
        self.html = html


class SignRequestNotification(NotificationTemplate):
    kind = EmailKind.SIGN_REQUEST

    def __init__(self, document_id: str, sign_link: str):
        super().__init__(
            subject="Please sign your document",
            text=f"Please sign document {document_id}: {sign_link}",
            html=(
                "<h3>Please sign your document</h3>"
                "<p>Click the link below to sign the document.</p>"
                f'<a href="{sign_link}">{sign_link}</a>'
            ),
        )


class CustomerSignedNotification(NotificationTemplate):
    kind = EmailKind.CUSTOMER_SIGNED

    def __init__(self, document_id: str, admin_link: str):
        super().__init__(
            subject="Customer has signed the document",
            text=f"The customer signed document {document_id}. Review and sign: {admin_link}",
            html=(
                "<h3>The customer has signed the document</h3>"
                f"<p>Document number: <b>{document_id}</b></p>"
                "<p>Click to review and sign the document.</p>"
                f'<a href="{admin_link}">{admin_link}</a>'
            ),
        )


class FinalDocumentNotification(NotificationTemplate):
    kind = EmailKind.FINAL_DOCUMENT

    def __init__(self, document_id: str):
        super().__init__(
            subject=f"Signed document {document_id}",
            text=f"All parties have signed document {document_id}. The final copy is attached.",
            html=(
                "<h3>The document is fully signed</h3>"
                f"<p>Document number: <b>{document_id}</b></p>"
                "<p>The final copy is attached to this email.</p>"
            ),
        )


class NotificationService:
    def __init__(self, email_client: EmailClient, sender: str, frontend_base_url: str):
        self.email_client = email_client
        self.sender = sender
        self.frontend_base_url = frontend_base_url.rstrip("/")

    def sign_link(self, document_id: str) -> str:
        return f"{self.frontend_base_url}/sign/{document_id}"

    def admin_link(self, document_id: str) -> str:
        return f"{self.frontend_base_url}/admin/sign/{document_id}"

    def send_sign_request(self, session: Session, contract: Contract, email: str) -> None:
        template = SignRequestNotification(contract.document_id, self.sign_link(contract.document_id))
        self._deliver(session, contract, [email], template)

    def notify_customer_signed(self, session: Session, contract: Contract) -> None:
        if not contract.company_email:
            raise NotifyFailed(f"Contract {contract.document_id} has no company email")
        template = CustomerSignedNotification(contract.document_id, self.admin_link(contract.document_id))
        self._deliver(session, contract, [contract.company_email], template)

    def send_final_document(
        self, session: Session, contract: Contract, recipients: List[str], document: bytes
    ) -> None:
        template = FinalDocumentNotification(contract.document_id)
        attachment = (f"{contract.document_id}.pdf", document)
        self._deliver(session, contract, recipients, template, [attachment])

    def get_email_logs(self, session: Session, contract: Contract) -> List[EmailLog]:
        return EmailLogRepository(session).find_by_contract_id(contract.id)

    def _deliver(
        self,
        session: Session,
        contract: Contract,
        recipients: List[str],
        template: NotificationTemplate,
        attachments: Optional[List[Attachment]] = None,
    ) -> None:
        try:
            self.email_client.send(
                self.sender, recipients, template.subject, template.text, template.html, attachments
            )
        except EmailDeliveryError as e:
            logger.warning(
                "%s email for %s failed: %s", template.kind.value, contract.document_id, e
            )
            raise NotifyFailed(f"Could not send {template.kind.value} email: {e}") from e

        EmailLogRepository(session).save_all([
            EmailLog(contract_id=contract.id, email=email, kind=template.kind, subject=template.subject)
            for email in recipients
        ])
