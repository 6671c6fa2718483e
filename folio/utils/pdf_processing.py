"""
PDF inspection helpers.

Used to report page counts for rendered documents without keeping the
binary on disk.
"""

import io
from pathlib import Path
from typing import Optional, Union

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError


def page_count(pdf: Union[bytes, Path]) -> Optional[int]:
    """Get page count from PDF bytes or a PDF path, or None if unreadable."""
    try:
        source = io.BytesIO(pdf) if isinstance(pdf, (bytes, bytearray)) else str(pdf)
        reader = PdfReader(source)
        return len(reader.pages)
    except (PdfReadError, OSError, ValueError):
        return None


def looks_like_pdf(content: bytes) -> bool:
    """Cheap signature check for a complete PDF binary."""
    return content.startswith(b"%PDF-") and b"%%EOF" in content[-1024:]
