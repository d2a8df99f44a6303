"""
StudyPacket - Document Importer
End-to-end import of one PDF into a Packet:
  validate -> extract pages -> analyze (router) -> build study plan -> persist
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from ai.router import BackendRouter
from core.database import DatabaseManager
from core.models import Packet
from core.pdf_reader import extract_pages, join_pages, validate_pdf_path
from core.segmenter import segment_document
from core.study_plan import SourceInfo, build_packet, build_structural_plan

logger = logging.getLogger(__name__)

PageExtractor = Callable[[Path], List[Optional[str]]]
ProgressCallback = Callable[[str], None]


class DocumentImporter:
    """
    Runs one import at a time per call; concurrent calls share no mutable state
    apart from the optional database.
    """

    def __init__(
        self,
        router: BackendRouter,
        db: Optional[DatabaseManager] = None,
        extractor: PageExtractor = extract_pages,
    ) -> None:
        self.router = router
        self.db = db
        self.extractor = extractor

    async def import_document(
        self,
        file_path: Union[str, Path],
        progress: Optional[ProgressCallback] = None,
    ) -> Packet:
        """Import a PDF through the analysis backends."""
        notify = progress or (lambda _msg: None)
        path = validate_pdf_path(file_path)

        notify("Extracting text from PDF...")
        pages = await asyncio.to_thread(self.extractor, path)
        content = join_pages(pages)

        notify("Analyzing document...")
        analysis = await self.router.analyze_document(content, title=path.stem)

        notify("Building study plan...")
        packet = build_packet(analysis, self._source_info(path))
        logger.info(
            f"Imported {path.name}: {len(packet.sections)} sections, "
            f"{len(packet.checklist_items)} checklist items"
        )
        self._save(packet)
        notify("Import complete.")
        return packet

    async def import_structure(self, file_path: Union[str, Path]) -> Packet:
        """Import a PDF using only heading detection, without any backend."""
        path = validate_pdf_path(file_path)
        pages = await asyncio.to_thread(self.extractor, path)
        join_pages(pages)  # ExtractionFailed when no page has text

        plan = build_structural_plan(segment_document(pages))
        packet = plan.to_packet(self._source_info(path))
        logger.info(f"Structurally imported {path.name}: {len(packet.sections)} sections")
        self._save(packet)
        return packet

    @staticmethod
    def _source_info(path: Path) -> SourceInfo:
        return SourceInfo(title=path.stem, source_reference=str(path), original_filename=path.name)

    def _save(self, packet: Packet) -> None:
        if self.db is not None:
            self.db.save_packet(packet)
