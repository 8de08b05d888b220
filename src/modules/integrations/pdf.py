import io

from PyPDF2 import PdfReader


def is_valid_pdf(data: bytes) -> bool:
    """True when the bytes parse as a PDF with at least one page."""
    if not data or not data.startswith(b"%PDF"):
        return False
    try:
        reader = PdfReader(io.BytesIO(data))
        return len(reader.pages) > 0
    except Exception:
        return False
