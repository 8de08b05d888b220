import base64
import binascii
import logging
import ssl
from typing import Optional

import httpx

from modules.contracts.services.errors import SignFailed
from modules.integrations.pdf import is_valid_pdf

logger = logging.getLogger(__name__)

SIGNED_PAYLOAD_KEYS = ("signedDocument", "signed_pdf", "data")


class ExternalSigner:
    """Countersigns PDFs with the external signing authority over mutual TLS."""

    def __init__(
        self,
        endpoint: str,
        client_cert: Optional[str] = None,
        client_key: Optional[str] = None,
        ca_bundle: Optional[str] = None,
        timeout: float = 60.0,
        transport: httpx.BaseTransport = None,
    ):
        self.endpoint = endpoint
        self.client_cert = client_cert
        self.client_key = client_key
        self.ca_bundle = ca_bundle
        self.timeout = timeout
        self.transport = transport

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context(cafile=self.ca_bundle)
        if self.client_cert:
            context.load_cert_chain(self.client_cert, keyfile=self.client_key)
        return context

    def _client(self) -> httpx.Client:
        if self.transport is not None:
            return httpx.Client(timeout=self.timeout, transport=self.transport)
        return httpx.Client(verify=self._ssl_context(), timeout=self.timeout)

    def sign(self, document: bytes) -> bytes:
        if not self.endpoint:
            raise SignFailed("Signing authority URL is not configured")

        try:
            with self._client() as client:
                response = client.post(
                    self.endpoint,
                    content=document,
                    headers={"Content-Type": "application/pdf"},
                )
        except httpx.TimeoutException as e:
            raise SignFailed(f"Signing authority timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise SignFailed(f"Signing request failed: {e}") from e
        except OSError as e:
            raise SignFailed(f"Mutual TLS setup failed: {e}") from e

        if not response.is_success:
            raise SignFailed(f"Signing authority answered {response.status_code}")

        signed = self._extract_payload(response)
        if not is_valid_pdf(signed):
            raise SignFailed("Signing authority response holds no signed PDF")

        logger.info("Document countersigned (%d bytes)", len(signed))
        return signed

    @staticmethod
    def _extract_payload(response: httpx.Response) -> bytes:
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/pdf"):
            return response.content

        if content_type.startswith("application/json"):
            try:
                body = response.json()
            except ValueError as e:
                raise SignFailed("Signing authority returned malformed JSON") from e
            if isinstance(body, dict):
                for key in SIGNED_PAYLOAD_KEYS:
                    value = body.get(key)
                    if isinstance(value, str) and value:
                        try:
                            return base64.b64decode(value, validate=True)
                        except (binascii.Error, ValueError) as e:
                            raise SignFailed(f"'{key}' is not valid base64") from e

        raise SignFailed("Signing authority response lacks a signed payload")
