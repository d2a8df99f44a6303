"""
StudyPacket - Entry Point
Turns an academic PDF into a study packet: thematic sections plus an ordered
checklist of study tasks.

Sets up logging, loads settings, and imports one document from the command line.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config import AppSettings, LOG_FILE, resolve_api_key
from ai.importer import DocumentImporter
from ai.router import create_router
from core.database import DatabaseManager
from core.errors import StudyPacketError
from core.models import ItemStatus, Packet


def setup_logging(level: str = "INFO", log_file: Optional[Path] = LOG_FILE) -> None:
    """Configure application-wide logging."""
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=log_format, handlers=handlers)
    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def format_packet(packet: Packet) -> str:
    lines = [f"# {packet.title}", ""]
    for section in packet.sections:
        ref = f" ({section.page_reference})" if section.page_reference else ""
        lines.append(f"## {section.title}{ref}")
        lines.append(section.content)
        lines.append("")
    lines.append("## Checklist")
    for item in packet.checklist_items:
        ref = f" [{item.page_reference}]" if item.page_reference else ""
        box = "x" if item.is_completed else " "
        status = "" if item.status in (ItemStatus.PENDING, ItemStatus.COMPLETED) \
            else f" ({item.status.display_name})"
        lines.append(f"- [{box}] {item.title}{ref}{status}")
    return "\n".join(lines)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="studypacket", description=__doc__.strip().splitlines()[0])
    parser.add_argument("pdf", type=Path, help="PDF file to import")
    parser.add_argument("--structure", action="store_true",
                        help="segment by headings only, without analysis backends")
    parser.add_argument("--save", action="store_true", help="store the packet in the database")
    parser.add_argument("--settings", type=Path, default=None, help="path to settings.json")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    args = parse_args(argv)
    settings = AppSettings.load(args.settings)
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    logger.info("StudyPacket starting...")
    logger.info(f"Remote analysis: {'configured' if resolve_api_key(settings.llm) else 'not configured'}")

    db = DatabaseManager(settings.db_path) if args.save else None
    importer = DocumentImporter(create_router(settings), db=db)
    try:
        if args.structure:
            packet = asyncio.run(importer.import_structure(args.pdf))
        else:
            packet = asyncio.run(importer.import_document(args.pdf, progress=logger.info))
    except StudyPacketError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if db is not None:
            db.close()

    print(format_packet(packet))
    return 0


if __name__ == "__main__":
    sys.exit(main())
