"""Tests for the Qt import worker, driven synchronously through run()."""

import threading
import time

import pytest

QtCore = pytest.importorskip("PyQt6.QtCore")

from ai.backends import FallbackBackend  # noqa: E402
from ai.importer import DocumentImporter  # noqa: E402
from ai.router import BackendRouter  # noqa: E402
from workers.async_workers import ImportWorker  # noqa: E402


@pytest.fixture(scope="module")
def qt_app():
    return QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])


def run_worker(worker):
    events = {"packet": [], "error": [], "progress": [], "finished": 0}
    worker.packet_ready.connect(events["packet"].append)
    worker.error_occurred.connect(events["error"].append)
    worker.progress.connect(events["progress"].append)

    def on_finished():
        events["finished"] += 1

    worker.finished_signal.connect(on_finished)
    worker.run()
    return events


def make_importer(backend):
    return DocumentImporter(BackendRouter([backend]), extractor=lambda path: ["some text."])


def test_worker_emits_packet(qt_app, placeholder_pdf, fake_backend_factory, sample_analysis) -> None:
    worker = ImportWorker(make_importer(fake_backend_factory("A", result=sample_analysis)),
                          placeholder_pdf)

    events = run_worker(worker)

    assert len(events["packet"]) == 1
    assert events["packet"][0].title == "lecture_notes"
    assert events["error"] == []
    assert events["progress"][-1] == "Import complete."
    assert events["finished"] == 1


def test_worker_reports_service_unavailable(qt_app, placeholder_pdf, fake_backend_factory) -> None:
    worker = ImportWorker(make_importer(fake_backend_factory("A", available=False)),
                          placeholder_pdf)

    events = run_worker(worker)

    assert events["packet"] == []
    assert events["error"] == ["AI service is not available"]
    assert events["finished"] == 1


def test_worker_cancelled_before_start(qt_app, placeholder_pdf, fake_backend_factory,
                                       sample_analysis) -> None:
    backend = fake_backend_factory("A", result=sample_analysis)
    worker = ImportWorker(make_importer(backend), placeholder_pdf)
    worker.cancel()

    events = run_worker(worker)

    assert events["error"] == ["Import cancelled."]
    assert events["packet"] == []
    assert backend.calls == []
    assert events["finished"] == 1


def test_structure_only_worker(qt_app, placeholder_pdf, fake_backend_factory) -> None:
    backend = fake_backend_factory("A")
    worker = ImportWorker(make_importer(backend), placeholder_pdf, structure_only=True)

    events = run_worker(worker)

    assert [s.title for s in events["packet"][0].sections] == ["Page 1 Content"]
    assert backend.calls == []


def test_worker_cancelled_while_analyzing(qt_app, placeholder_pdf) -> None:
    importer = DocumentImporter(BackendRouter([FallbackBackend(latency_seconds=30)]),
                                extractor=lambda path: ["some text."])
    worker = ImportWorker(importer, placeholder_pdf)
    direct = QtCore.Qt.ConnectionType.DirectConnection
    analyzing = threading.Event()
    errors, packets = [], []

    def on_progress(message):
        if message == "Analyzing document...":
            analyzing.set()

    worker.progress.connect(on_progress, direct)
    worker.error_occurred.connect(errors.append, direct)
    worker.packet_ready.connect(packets.append, direct)

    thread = threading.Thread(target=worker.run)
    started = time.monotonic()
    thread.start()
    assert analyzing.wait(timeout=5)

    worker.cancel()
    thread.join(timeout=5)

    assert not thread.is_alive()
    assert time.monotonic() - started < 5
    assert errors == ["Import cancelled."]
    assert packets == []
