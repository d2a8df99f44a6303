"""
StudyPacket - Text Segmenter
Deterministic splitting of raw page text into titled sections:
  1. Heading detection (layered regex + capitalization heuristics)
  2. Per-page segmentation into (title, content) blocks
  3. Whole-document segmentation with page references
"""

import logging
import re
from typing import List, Optional, Sequence

from core.models import Section, SectionType

logger = logging.getLogger(__name__)


# ---- Heading Detection ----

HEADING_PATTERNS = [
    re.compile(r"^\d+(\.\d+)*\.?\s+[A-Z]", re.ASCII),       # "1. Introduction", "2.1 Overview"
    re.compile(r"^[A-Z][A-Z\s]{3,}$", re.ASCII),            # "METHODOLOGY"
    re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*:?$", re.ASCII),  # "Related Work:"
    re.compile(r"^[IVX]+\.\s+[A-Z]", re.ASCII),             # "IV. Results"
    re.compile(r"^[A-Z]\.\s+[A-Z]", re.ASCII),              # "A. Overview"
]

MIN_HEADING_LENGTH = 2
MAX_HEADING_LENGTH = 200
SHORT_LINE_LENGTH = 80
MAX_SHORT_HEADING_WORDS = 8


def is_heading(line: str) -> bool:
    """Return True if a single trimmed line looks like a section heading."""
    line = line.strip()
    if not (MIN_HEADING_LENGTH < len(line) < MAX_HEADING_LENGTH):
        return False

    for pattern in HEADING_PATTERNS:
        if pattern.search(line):
            return True

    # Short lines without sentence punctuation that are mostly capitalized
    if len(line) < SHORT_LINE_LENGTH and "." not in line and "," not in line:
        words = line.split()
        if 1 <= len(words) <= MAX_SHORT_HEADING_WORDS:
            capitalized = [w for w in words if w[0].isupper()]
            if 2 * len(capitalized) >= len(words):
                return True

    return False


# ---- Page Segmentation ----

def page_reference(page_number: int) -> str:
    return f"p. {page_number}"


def segment_page(page_text: str, page_number: int) -> List[Section]:
    """
    Split one page of text into ordered sections.

    A heading line closes the pending (title, content) group and opens a new one.
    Content seen before the first heading is dropped once a heading appears;
    a page without any heading becomes a single "Page N Content" section.
    """
    sections: List[Section] = []
    ref = page_reference(page_number)
    current_title: Optional[str] = None
    current_content: List[str] = []

    def emit(title: str, section_type: SectionType) -> None:
        sections.append(Section(
            title=title,
            content="\n".join(current_content),
            page_reference=ref,
            section_type=section_type,
            order=len(sections),
        ))

    for raw_line in page_text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if is_heading(line):
            if current_title is not None and current_content:
                emit(current_title, SectionType.HEADING)
            current_title = line
            current_content = []
        else:
            current_content.append(line)

    if current_title is not None:
        if current_content:
            emit(current_title, SectionType.HEADING)
    elif current_content:
        emit(f"Page {page_number} Content", SectionType.CONTENT)

    return sections


# ---- Document Segmentation ----

def segment_document(pages: Sequence[Optional[str]]) -> List[Section]:
    """
    Segment every page and concatenate the results.

    `pages` is 0-indexed; page references are 1-indexed. A page that could not
    be extracted (None) contributes nothing. Section order restarts at 0 on
    every page.
    """
    sections: List[Section] = []
    for index, text in enumerate(pages):
        if text is None:
            logger.debug(f"Skipping unreadable page {index + 1}")
            continue
        sections.extend(segment_page(text, index + 1))

    logger.info(f"Segmented {len(pages)} pages into {len(sections)} sections.")
    return sections
