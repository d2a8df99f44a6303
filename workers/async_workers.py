"""
StudyPacket - Async Workers
QThread-based worker that runs a document import off the UI thread.
The import coroutine runs on a private event loop so the UI can cancel the
in-flight request (including the remote model call) at any time.
"""

import asyncio
import logging
import threading
from pathlib import Path
from typing import Optional, Union

from PyQt6.QtCore import QThread, pyqtSignal, QObject

from ai.importer import DocumentImporter
from core.errors import StudyPacketError

logger = logging.getLogger(__name__)


class ImportWorker(QThread):
    """
    Worker thread for PDF import.
    Extracts text, analyzes it, builds the study plan, and saves the packet.
    """
    progress = pyqtSignal(str)             # Status message
    packet_ready = pyqtSignal(object)      # Packet
    error_occurred = pyqtSignal(str)       # User-facing message
    finished_signal = pyqtSignal()

    def __init__(self, importer: DocumentImporter, file_path: Union[str, Path],
                 structure_only: bool = False, parent: QObject = None) -> None:
        super().__init__(parent)
        self.importer = importer
        self.file_path = file_path
        self.structure_only = structure_only
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self._state_lock = threading.Lock()
        self._cancel_requested = False

    def cancel(self) -> None:
        """Cancel the running import. Safe to call from any thread."""
        with self._state_lock:
            self._cancel_requested = True
            if self._loop is not None and self._task is not None:
                self._loop.call_soon_threadsafe(self._task.cancel)

    def run(self) -> None:
        loop = asyncio.new_event_loop()
        try:
            if self.structure_only:
                coro = self.importer.import_structure(self.file_path)
            else:
                coro = self.importer.import_document(self.file_path, progress=self.progress.emit)

            with self._state_lock:
                task = loop.create_task(coro)
                self._loop, self._task = loop, task
                if self._cancel_requested:
                    task.cancel()

            packet = loop.run_until_complete(task)
            self.packet_ready.emit(packet)
        except asyncio.CancelledError:
            logger.info(f"Import of {self.file_path} cancelled.")
            self.error_occurred.emit("Import cancelled.")
        except StudyPacketError as e:
            logger.error(f"ImportWorker error: {e}")
            self.error_occurred.emit(str(e))
        except Exception as e:
            logger.exception(f"ImportWorker unexpected error: {e}")
            self.error_occurred.emit(f"Import failed: {e}")
        finally:
            with self._state_lock:
                self._loop, self._task = None, None
            loop.run_until_complete(loop.shutdown_default_executor())
            loop.close()
            self.finished_signal.emit()
