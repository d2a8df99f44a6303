"""
StudyPacket - Backend Router
Tries analysis backends in priority order; the first available backend that
succeeds wins. Per-backend failures are logged and skipped.
"""

import logging
from typing import List, Optional, Sequence

from ai.backends import AnalysisBackend, FallbackBackend, RemoteBackend
from ai.keywords import load_keyword_table
from config import AppSettings
from core.analysis import DocumentAnalysis, StudyTask
from core.errors import ServiceUnavailable

logger = logging.getLogger(__name__)


class BackendRouter:
    """Fallback chain over analysis backends. No retries, no merging of partial results."""

    def __init__(self, backends: Sequence[AnalysisBackend]) -> None:
        self.backends: List[AnalysisBackend] = list(backends)

    async def analyze_document(self, content: str, title: Optional[str] = None) -> DocumentAnalysis:
        for backend in self.backends:
            if not backend.is_available():
                logger.debug(f"Skipping unavailable backend: {backend.name}")
                continue
            try:
                analysis = await backend.analyze(content, title)
            except Exception as e:
                logger.warning(f"Backend {backend.name} failed: {e}")
                continue
            logger.info(f"Document analysis completed using {backend.name}")
            return analysis

        raise ServiceUnavailable()

    async def generate_study_tasks(self, analysis: DocumentAnalysis) -> List[StudyTask]:
        for backend in self.backends:
            if not backend.is_available():
                continue
            try:
                tasks = await backend.generate_study_tasks(analysis)
            except Exception as e:
                logger.warning(f"Backend {backend.name} failed for task generation: {e}")
                continue
            logger.info(f"Study tasks generated using {backend.name}")
            return tasks

        raise ServiceUnavailable()


def create_router(settings: AppSettings) -> BackendRouter:
    """Remote model first (when a key is configured), offline analyzer last."""
    table = load_keyword_table(settings.analysis.keyword_table_path)
    return BackendRouter([
        RemoteBackend(settings.llm),
        FallbackBackend(table, latency_seconds=settings.analysis.fallback_latency_seconds),
    ])
