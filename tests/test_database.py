"""Tests for packet persistence."""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

from core.models import Capture, CaptureType, ChecklistItem, ItemStatus, Packet, Section, SectionType


def make_packet(title: str = "Reader", **kwargs) -> Packet:
    packet = Packet(
        title=title,
        source_reference="/tmp/reader.pdf",
        original_filename="reader.pdf",
        sections=[
            Section(title="Overview", content="summary", order=0),
            Section(title="Topic", content="body", page_reference="p. 2",
                    section_type=SectionType.HEADING, order=1),
        ],
        checklist_items=[ChecklistItem(title="First", order=0, notes="n"),
                         ChecklistItem(title="Second", page_reference="p. 3", order=1)],
        **kwargs,
    )
    return packet


def test_packet_round_trip(db) -> None:
    packet = make_packet()
    first = packet.checklist_items[0]
    packet.set_item_status(first.id, ItemStatus.COMPLETED)
    packet.set_item_reflection(first.id, "went well")
    capture = packet.add_capture(Capture(type=CaptureType.VOICE, content="idea", duration=12.5))
    packet.link_capture(capture.id, first.id)

    db.save_packet(packet)
    loaded = db.get_packet(packet.id)

    assert loaded.title == "Reader"
    assert loaded.original_filename == "reader.pdf"
    assert loaded.created_at == packet.created_at
    assert [(s.title, s.section_type, s.page_reference) for s in loaded.sections] == [
        ("Overview", SectionType.CONTENT, None),
        ("Topic", SectionType.HEADING, "p. 2"),
    ]
    item = loaded.checklist_items[0]
    assert item.status == ItemStatus.COMPLETED
    assert item.completed_at == first.completed_at
    assert item.reflection == "went well"
    assert item.notes == "n"
    assert loaded.captures[0].duration == 12.5
    assert loaded.capture_links == {first.id: {capture.id}}
    assert loaded.progress == 0.5


def test_missing_packet_is_none(db) -> None:
    assert db.get_packet("nope") is None


def test_save_replaces_children(db) -> None:
    packet = make_packet()
    db.save_packet(packet)

    packet.remove_checklist_item(packet.checklist_items[1].id)
    packet.add_checklist_item("Manual task")
    packet.title = "Renamed"
    db.save_packet(packet)

    loaded = db.get_packet(packet.id)
    assert loaded.title == "Renamed"
    assert [i.title for i in loaded.checklist_items] == ["First", "Manual task"]


def test_active_and_archived_lists(db) -> None:
    now = datetime.now()
    older = make_packet("Older", modified_at=now - timedelta(hours=1))
    newer = make_packet("Newer", modified_at=now)
    archived = make_packet("Gone")
    for packet in (older, newer, archived):
        db.save_packet(packet)

    db.set_packet_archived(archived.id)

    assert [p.title for p in db.get_active_packets()] == ["Newer", "Older"]
    assert [p.title for p in db.get_archived_packets()] == ["Gone"]

    db.set_packet_archived(archived.id, archived=False)
    assert db.get_archived_packets() == []


def test_delete_cascades(db) -> None:
    packet = make_packet()
    capture = packet.add_capture(Capture(type=CaptureType.TEXT, content="x"))
    packet.link_capture(capture.id, packet.checklist_items[0].id)
    db.save_packet(packet)

    db.delete_packet(packet.id)

    assert db.get_packet(packet.id) is None
    assert db.get_recent_captures() == []
    assert db.conn.execute("SELECT COUNT(*) FROM capture_links").fetchone()[0] == 0


def test_capture_queries(db) -> None:
    packet = make_packet()
    today = packet.add_capture(Capture(type=CaptureType.TEXT, content="today"))
    old = packet.add_capture(Capture(type=CaptureType.IMAGE, content="old",
                                     timestamp=datetime.now() - timedelta(days=2)))
    db.save_packet(packet)

    assert [c.id for c in db.get_recent_captures()] == [today.id, old.id]
    assert [c.id for c in db.get_recent_captures(limit=1)] == [today.id]
    assert [c.id for c in db.get_captures_for_today()] == [today.id]


def test_concurrent_saves_and_reads_share_one_manager(db) -> None:
    stop = threading.Event()
    read_errors = []

    def reader():
        while not stop.is_set():
            try:
                db.get_active_packets()
                db.get_recent_captures()
            except Exception as e:
                read_errors.append(e)
                return

    def writer(n):
        packet = make_packet(f"Packet {n}")
        packet.add_capture(Capture(type=CaptureType.TEXT, content=str(n)))
        db.save_packet(packet)
        return packet.id

    reader_thread = threading.Thread(target=reader)
    reader_thread.start()
    try:
        with ThreadPoolExecutor(max_workers=4) as pool:
            ids = list(pool.map(writer, range(60)))
    finally:
        stop.set()
        reader_thread.join()

    assert read_errors == []
    assert len(db.get_active_packets()) == 60
    assert all(len(db.get_packet(i).checklist_items) == 2 for i in ids)
