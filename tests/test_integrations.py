import base64
import email
import smtplib

import httpx
import pytest

from conftest import make_pdf_bytes
from modules.contracts.services.errors import ErrorKind, SigningError
from modules.integrations.email_client import EmailClient, EmailDeliveryError
from modules.integrations.pdf import is_valid_pdf
from modules.integrations.renderer import HttpPdfRenderer
from modules.integrations.signer import ExternalSigner

PDF = make_pdf_bytes("integration")


def transport_returning(response=None, error=None, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(request)
        if error is not None:
            raise error
        return response
    return httpx.MockTransport(handler)


def test_is_valid_pdf():
    assert is_valid_pdf(PDF)
    assert not is_valid_pdf(b"")
    assert not is_valid_pdf(b"<html>not a pdf</html>")
    assert not is_valid_pdf(b"%PDF-1.4 truncated")


# --- renderer ---

def test_renderer_posts_view_url():
    seen = []
    renderer = HttpPdfRenderer(
        "http://renderer.test/pdf",
        transport=transport_returning(httpx.Response(200, content=PDF), seen=seen),
    )
    assert renderer.render("http://front.test/print/DOC-1") == PDF
    assert seen[0].method == "POST"
    assert b"http://front.test/print/DOC-1" in seen[0].content


def test_renderer_accepts_any_success_status():
    renderer = HttpPdfRenderer(
        "http://renderer.test/pdf", transport=transport_returning(httpx.Response(201, content=PDF))
    )
    assert renderer.render("http://front.test/print/DOC-1") == PDF


@pytest.mark.parametrize("transport", [
    transport_returning(httpx.Response(500, content=b"boom")),
    transport_returning(httpx.Response(200, content=b"<html></html>")),
    transport_returning(error=httpx.ReadTimeout("slow")),
    transport_returning(error=httpx.ConnectError("refused")),
])
def test_renderer_failures_are_render_failed(transport):
    renderer = HttpPdfRenderer("http://renderer.test/pdf", timeout=1, transport=transport)
    with pytest.raises(SigningError) as exc:
        renderer.render("http://front.test/print/DOC-1")
    assert exc.value.kind == ErrorKind.RENDER_FAILED


# --- external signer ---

def test_signer_accepts_pdf_response():
    seen = []
    signer = ExternalSigner(
        "https://ca.test/sign",
        transport=transport_returning(
            httpx.Response(200, content=PDF, headers={"content-type": "application/pdf"}), seen=seen
        ),
    )
    assert signer.sign(b"%PDF-unsigned") == PDF
    assert seen[0].content == b"%PDF-unsigned"


def test_signer_accepts_base64_json_response():
    body = {"signedDocument": base64.b64encode(PDF).decode()}
    signer = ExternalSigner("https://ca.test/sign", transport=transport_returning(httpx.Response(200, json=body)))
    assert signer.sign(PDF) == PDF


@pytest.mark.parametrize("transport", [
    transport_returning(httpx.Response(200, json={"status": "ok"})),
    transport_returning(httpx.Response(200, json={"signed_pdf": "@@not base64@@"})),
    transport_returning(httpx.Response(200, json={"data": base64.b64encode(b"not a pdf").decode()})),
    transport_returning(httpx.Response(200, content=b"text", headers={"content-type": "text/plain"})),
    transport_returning(httpx.Response(403, content=b"forbidden")),
    transport_returning(error=httpx.ReadTimeout("slow")),
])
def test_signer_failures_are_sign_failed(transport):
    signer = ExternalSigner("https://ca.test/sign", timeout=1, transport=transport)
    with pytest.raises(SigningError) as exc:
        signer.sign(PDF)
    assert exc.value.kind == ErrorKind.SIGN_FAILED


@pytest.mark.parametrize("endpoint", [None, ""])
def test_signer_without_endpoint_is_sign_failed(endpoint):
    seen = []
    signer = ExternalSigner(endpoint, transport=transport_returning(httpx.Response(200, content=PDF), seen=seen))
    with pytest.raises(SigningError) as exc:
        signer.sign(PDF)
    assert exc.value.kind == ErrorKind.SIGN_FAILED
    assert seen == []


def test_signer_missing_client_certificate_is_sign_failed(tmp_path):
    signer = ExternalSigner("https://ca.test/sign", client_cert=str(tmp_path / "missing.pem"))
    with pytest.raises(SigningError) as exc:
        signer.sign(PDF)
    assert exc.value.kind == ErrorKind.SIGN_FAILED


# --- email client ---

class FakeSMTP:
    instances = []
    failures = 0

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.messages = []
        FakeSMTP.instances.append(self)

    def starttls(self):
        pass

    def login(self, username, password):
        pass

    def sendmail(self, sender, recipients, message):
        if FakeSMTP.failures:
            FakeSMTP.failures -= 1
            raise smtplib.SMTPServerDisconnected("dropped")
        self.messages.append((sender, recipients, message))

    def quit(self):
        pass


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.failures = 0
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_email_client_sends_attachment(fake_smtp):
    client = EmailClient("smtp.test", 587, "user", "pass", retry_delay=0)
    client.send("esign@example.com", ["a@example.com", "b@example.com"], "Signed", "body", "<p>body</p>",
                [("DOC-1.pdf", PDF)])

    sender, recipients, raw = fake_smtp.instances[0].messages[0]
    assert recipients == ["a@example.com", "b@example.com"]
    message = email.message_from_string(raw)
    assert message["Subject"] == "Signed"
    attachments = [part for part in message.walk() if part.get_filename()]
    assert attachments[0].get_filename() == "DOC-1.pdf"
    assert attachments[0].get_payload(decode=True) == PDF


def test_email_client_retries_then_succeeds(fake_smtp):
    fake_smtp.failures = 2
    client = EmailClient("smtp.test", 587, max_retries=3, retry_delay=0)
    client.send("esign@example.com", ["a@example.com"], "Hi", "body")
    assert len(fake_smtp.instances) == 3


def test_email_client_raises_after_last_retry(fake_smtp):
    fake_smtp.failures = 5
    client = EmailClient("smtp.test", 587, max_retries=2, retry_delay=0)
    with pytest.raises(EmailDeliveryError):
        client.send("esign@example.com", ["a@example.com"], "Hi", "body")


def test_email_client_requires_recipients(fake_smtp):
    with pytest.raises(EmailDeliveryError):
        EmailClient("smtp.test", 587).send("esign@example.com", [], "Hi", "body")
