import logging

import httpx

from modules.contracts.services.errors import RenderFailed
from modules.integrations.pdf import is_valid_pdf

logger = logging.getLogger(__name__)


class HttpPdfRenderer:
    """
    Client for the headless-browser render service. The service loads the
    given page URL and answers with the printed PDF.
    """

    def __init__(self, endpoint: str, timeout: float = 60.0, transport: httpx.BaseTransport = None):
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport

    def render(self, view_url: str) -> bytes:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.endpoint, json={"url": view_url, "format": "A4"})
        except httpx.TimeoutException as e:
            raise RenderFailed(f"Render timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise RenderFailed(f"Render request failed: {e}") from e

        if not response.is_success:
            raise RenderFailed(f"Renderer answered {response.status_code}")

        if not is_valid_pdf(response.content):
            raise RenderFailed("Renderer response is not a PDF")

        logger.info("Rendered %s (%d bytes)", view_url, len(response.content))
        return response.content
