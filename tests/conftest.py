import io

import pytest
from reportlab.pdfgen import canvas
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base
from modules.contracts.models import Contract, ContractStatus
from modules.contracts.services.finalization_service import FinalizationService
from modules.contracts.services.signing_service import SigningService
from modules.integrations.email_client import EmailDeliveryError
from modules.notifications.models.email_log import EmailLog
from modules.notifications.services.notification_service import NotificationService

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PNG_IMAGE = "data:image/png;base64,iVBORw0KGgo="
JPEG_IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="

TWO_PARTY_CONFIG = {
    "title": "Service agreement",
    "signatures": [
        {"role": "customer_director", "label": "Director"},
        {"role": "company_witness", "label": "Witness"},
    ],
}

MULTI_ROLE_CONFIG = {
    "signatures": [
        {"role": "customer_director"},
        {"role": "customer_witness"},
        {"id": "company_director"},
        {"role": "company_witness"},
    ],
}


def make_pdf_bytes(text="Signed contract"):
    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    c.drawString(50, 750, text)
    c.save()
    buf.seek(0)
    return buf.read()


class FakeRenderer:
    def __init__(self, pdf=None, error=None):
        self.pdf = pdf or make_pdf_bytes()
        self.error = error
        self.calls = []
        self.on_render = None

    def render(self, view_url):
        self.calls.append(view_url)
        if self.on_render is not None:
            hook, self.on_render = self.on_render, None
            hook()
        if self.error is not None:
            raise self.error
        return self.pdf


class FakeSigner:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def sign(self, document):
        self.calls.append(document)
        if self.error is not None:
            raise self.error
        return document + b"\n%countersigned"


class FakeEmailClient:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, sender, recipients, subject, text_body, html_body=None, attachments=None):
        if self.fail:
            raise EmailDeliveryError("SMTP unavailable")
        self.sent.append({
            "sender": sender,
            "recipients": list(recipients),
            "subject": subject,
            "text": text_body,
            "attachments": list(attachments or []),
        })


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session():
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture
def email_client():
    return FakeEmailClient()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def notifier(email_client):
    return NotificationService(email_client, sender="esign@example.com", frontend_base_url="http://front.test")


@pytest.fixture
def finalizer(renderer, notifier):
    return FinalizationService(
        renderer=renderer,
        notifier=notifier,
        view_url_template="http://front.test/print/{document_id}",
    )


@pytest.fixture
def signing_service(notifier, finalizer):
    return SigningService(notifier, finalizer)


def create_dummy_contract(
    session,
    config=None,
    status=ContractStatus.PENDING,
    company_email="company@example.com",
    customer_email="customer@example.com",
    document_id="DOC-TEST0001",
):
    contract = Contract(
        document_id=document_id,
        config=TWO_PARTY_CONFIG if config is None else config,
        status=status,
        company_email=company_email,
        customer_email=customer_email,
    )
    session.add(contract)
    session.commit()
    return contract


def email_logs(session):
    return session.query(EmailLog).order_by(EmailLog.id).all()
