"""Shared pytest fixtures for StudyPacket tests."""

from pathlib import Path
from typing import Callable, List, Optional

import pytest

from ai.backends import AnalysisBackend
from core.analysis import Concept, DocumentAnalysis, HistoricalDate, Person, StudyTask, Topic
from core.database import DatabaseManager


class FakeBackend(AnalysisBackend):
    """Backend double that records calls and returns or raises a fixed outcome."""

    def __init__(self, name: str, result: Optional[DocumentAnalysis] = None,
                 error: Optional[Exception] = None, available: bool = True) -> None:
        self.name = name
        self.result = result
        self.error = error
        self.available = available
        self.calls: List[tuple] = []

    def is_available(self) -> bool:
        return self.available

    async def analyze(self, content: str, title: Optional[str] = None) -> DocumentAnalysis:
        self.calls.append((content, title))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def sample_analysis() -> DocumentAnalysis:
    return DocumentAnalysis(
        title="Cell Biology",
        summary="An introduction to cell structure.",
        main_topics=[
            Topic(name="Membranes", description="Lipid bilayers", page_reference="p. 1"),
            Topic(name="Organelles", description="Specialised compartments", page_reference="p. 2"),
        ],
        study_tasks=[
            StudyTask(title="Draw a cell membrane", description="Label each layer",
                      page_reference="p. 1"),
            StudyTask(title="List organelles", description=""),
            StudyTask(title="Compare plant and animal cells", description="Use a table",
                      page_reference="p. 3"),
        ],
        key_dates=[HistoricalDate(date="1665", event="Hooke observes cells",
                                  significance="Coins the word cell")],
        important_figures=[Person(name="Robert Hooke", role="Natural philosopher",
                                  significance="First to describe cells", timeframe="1635-1703")],
        concepts=[Concept(name="Osmosis", definition="Diffusion of water",
                          importance="Controls cell volume")],
    )


@pytest.fixture
def fake_backend_factory() -> Callable[..., FakeBackend]:
    return FakeBackend


@pytest.fixture
def db(tmp_path: Path):
    manager = DatabaseManager(str(tmp_path / "test.db"))
    yield manager
    manager.close()


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., Path]:
    """Write a real PDF with one page per text block."""
    fitz = pytest.importorskip("fitz")

    def _make(pages: List[str], name: str = "reader.pdf") -> Path:
        path = tmp_path / name
        doc = fitz.open()
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text, fontsize=11)
        doc.save(str(path))
        doc.close()
        return path

    return _make


@pytest.fixture
def placeholder_pdf(tmp_path: Path) -> Path:
    """An existing .pdf path for tests that inject their own page extractor."""
    path = tmp_path / "lecture_notes.pdf"
    path.write_bytes(b"%PDF-1.4\n")
    return path
