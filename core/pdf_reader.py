"""
StudyPacket - PDF Text Extraction
Reads a PDF page-by-page with PyMuPDF. Pages that fail to extract are kept as
None so page numbering stays aligned with the document.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import fitz  # pymupdf

from core.errors import ExtractionFailed, InvalidInput

logger = logging.getLogger(__name__)


def validate_pdf_path(file_path: Union[str, Path]) -> Path:
    """Reject anything that is not an existing .pdf file."""
    path = Path(file_path)
    if path.suffix.lower() != ".pdf":
        raise InvalidInput("The selected file is not a PDF")
    if not path.is_file():
        raise InvalidInput(f"File not found: {path.name}")
    return path


def extract_pages(file_path: Union[str, Path]) -> List[Optional[str]]:
    """
    Extract the text of every page.
    Returns a list indexed by page (0-based); unreadable pages are None.
    """
    path = validate_pdf_path(file_path)
    try:
        doc = fitz.open(str(path))
    except Exception as e:
        logger.error(f"Failed to open {path.name}: {e}")
        raise InvalidInput("Failed to load the PDF document") from e

    pages: List[Optional[str]] = []
    try:
        for page_num in range(len(doc)):
            try:
                pages.append(doc[page_num].get_text("text"))
            except Exception as e:
                logger.warning(f"Skipping page {page_num + 1} of {path.name}: {e}")
                pages.append(None)
    finally:
        doc.close()

    readable = sum(1 for p in pages if p and p.strip())
    logger.info(f"Extracted text from {readable}/{len(pages)} pages of {path.name}")
    return pages


def join_pages(pages: List[Optional[str]]) -> str:
    """Concatenate readable page text; raises ExtractionFailed when there is none."""
    texts = [p.strip() for p in pages if p and p.strip()]
    if not texts:
        raise ExtractionFailed("No readable text could be extracted from this PDF.")
    return "\n\n".join(texts)
