"""
StudyPacket - Database Manager
Handles all SQLite operations: packets, sections, checklist items, captures,
and capture-to-item links.
"""

import sqlite3
import logging
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

from core.models import (
    Capture, CaptureType, ChecklistItem, ItemStatus, Packet, Section, SectionType,
)

logger = logging.getLogger(__name__)


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="microseconds") if value is not None else None


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class DatabaseManager:
    """
    SQLite database manager for StudyPacket.
    One connection is shared by the UI thread and import workers; every public
    method holds `_lock` and uses its own cursor.
    """

    def __init__(self, db_path: str = "packets.db") -> None:
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA foreign_keys=ON")
        self._lock = threading.RLock()
        self._create_tables()

    def _create_tables(self) -> None:
        """Create all required tables if they don't exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS packets (
                id                TEXT PRIMARY KEY,
                title             TEXT NOT NULL,
                source_reference  TEXT,
                original_filename TEXT,
                created_at        TEXT,
                modified_at       TEXT,
                is_archived       INTEGER DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS sections (
                id             TEXT PRIMARY KEY,
                packet_id      TEXT NOT NULL,
                position       INTEGER DEFAULT 0,
                title          TEXT NOT NULL,
                content        TEXT DEFAULT '',
                page_reference TEXT,
                section_type   TEXT DEFAULT 'content',
                sort_order     INTEGER DEFAULT 0,
                FOREIGN KEY (packet_id) REFERENCES packets(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS checklist_items (
                id             TEXT PRIMARY KEY,
                packet_id      TEXT NOT NULL,
                position       INTEGER DEFAULT 0,
                title          TEXT NOT NULL,
                status         TEXT DEFAULT 'pending',
                page_reference TEXT,
                notes          TEXT,
                reflection     TEXT,
                sort_order     INTEGER DEFAULT 0,
                created_at     TEXT,
                modified_at    TEXT,
                completed_at   TEXT,
                FOREIGN KEY (packet_id) REFERENCES packets(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS captures (
                id         TEXT PRIMARY KEY,
                packet_id  TEXT NOT NULL,
                type       TEXT NOT NULL,
                title      TEXT DEFAULT '',
                content    TEXT DEFAULT '',
                transcript TEXT,
                summary    TEXT,
                timestamp  TEXT,
                duration   REAL,
                confidence REAL,
                FOREIGN KEY (packet_id) REFERENCES packets(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS capture_links (
                item_id    TEXT NOT NULL,
                capture_id TEXT NOT NULL,
                PRIMARY KEY (item_id, capture_id),
                FOREIGN KEY (item_id) REFERENCES checklist_items(id) ON DELETE CASCADE,
                FOREIGN KEY (capture_id) REFERENCES captures(id) ON DELETE CASCADE
            );
        """)
        self.conn.commit()
        logger.info("Database tables initialized.")

    # ---- Packet Operations ----

    def save_packet(self, packet: Packet) -> None:
        """Insert or replace a packet together with all of its children."""
        with self._lock:
            cur = self.conn.cursor()
            try:
                cur.execute(
                    """INSERT INTO packets
                       (id, title, source_reference, original_filename,
                        created_at, modified_at, is_archived)
                       VALUES (?, ?, ?, ?, ?, ?, ?)
                       ON CONFLICT(id) DO UPDATE SET
                         title = excluded.title,
                         source_reference = excluded.source_reference,
                         original_filename = excluded.original_filename,
                         modified_at = excluded.modified_at,
                         is_archived = excluded.is_archived""",
                    (packet.id, packet.title, packet.source_reference, packet.original_filename,
                     _ts(packet.created_at), _ts(packet.modified_at), int(packet.is_archived)),
                )
                for table in ("sections", "checklist_items", "captures"):
                    cur.execute(f"DELETE FROM {table} WHERE packet_id = ?", (packet.id,))

                cur.executemany(
                    """INSERT INTO sections
                       (id, packet_id, position, title, content, page_reference,
                        section_type, sort_order)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                    [(s.id, packet.id, pos, s.title, s.content, s.page_reference,
                      s.section_type.value, s.order)
                     for pos, s in enumerate(packet.sections)],
                )
                cur.executemany(
                    """INSERT INTO checklist_items
                       (id, packet_id, position, title, status, page_reference, notes,
                        reflection, sort_order, created_at, modified_at, completed_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    [(i.id, packet.id, pos, i.title, i.status.value, i.page_reference, i.notes,
                      i.reflection, i.order, _ts(i.created_at), _ts(i.modified_at),
                      _ts(i.completed_at))
                     for pos, i in enumerate(packet.checklist_items)],
                )
                cur.executemany(
                    """INSERT INTO captures
                       (id, packet_id, type, title, content, transcript, summary,
                        timestamp, duration, confidence)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    [(c.id, packet.id, c.type.value, c.title, c.content, c.transcript, c.summary,
                      _ts(c.timestamp), c.duration, c.confidence)
                     for c in packet.captures],
                )
                cur.executemany(
                    "INSERT INTO capture_links (item_id, capture_id) VALUES (?, ?)",
                    [(item_id, capture_id)
                     for item_id, capture_ids in packet.capture_links.items()
                     for capture_id in sorted(capture_ids)],
                )
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise
            finally:
                cur.close()
        logger.debug(f"Saved packet {packet.id} ({packet.title})")

    def get_packet(self, packet_id: str) -> Optional[Packet]:
        """Load a packet and all of its children, or None."""
        with self._lock:
            row = self.conn.execute("SELECT * FROM packets WHERE id = ?", (packet_id,)).fetchone()
            if row is None:
                return None
            return self._load_children(self._row_to_packet(row))

    def get_active_packets(self) -> List[Packet]:
        """Return non-archived packets, most recently modified first."""
        return self._packets_where(archived=False)

    def get_archived_packets(self) -> List[Packet]:
        return self._packets_where(archived=True)

    def set_packet_archived(self, packet_id: str, archived: bool = True) -> None:
        """Soft-delete (or restore) a packet."""
        with self._lock:
            self.conn.execute(
                "UPDATE packets SET is_archived = ?, modified_at = ? WHERE id = ?",
                (int(archived), _ts(datetime.now()), packet_id),
            )
            self.conn.commit()

    def delete_packet(self, packet_id: str) -> None:
        """Delete a packet and its associated data (cascade)."""
        with self._lock:
            self.conn.execute("DELETE FROM packets WHERE id = ?", (packet_id,))
            self.conn.commit()

    def _packets_where(self, archived: bool) -> List[Packet]:
        with self._lock:
            rows = self.conn.execute(
                "SELECT * FROM packets WHERE is_archived = ? ORDER BY modified_at DESC",
                (int(archived),),
            ).fetchall()
            return [self._load_children(self._row_to_packet(r)) for r in rows]

    def _row_to_packet(self, row: tuple) -> Packet:
        return Packet(
            id=row[0], title=row[1], source_reference=row[2], original_filename=row[3],
            created_at=_dt(row[4]), modified_at=_dt(row[5]), is_archived=bool(row[6]),
        )

    def _load_children(self, packet: Packet) -> Packet:
        """Caller holds `_lock`."""
        rows = self.conn.execute(
            """SELECT id, title, content, page_reference, section_type, sort_order
               FROM sections WHERE packet_id = ? ORDER BY position""",
            (packet.id,),
        ).fetchall()
        packet.sections = [
            Section(id=r[0], title=r[1], content=r[2], page_reference=r[3],
                    section_type=SectionType(r[4]), order=r[5])
            for r in rows
        ]

        rows = self.conn.execute(
            """SELECT id, title, status, page_reference, notes, reflection, sort_order,
                      created_at, modified_at, completed_at
               FROM checklist_items WHERE packet_id = ? ORDER BY position""",
            (packet.id,),
        ).fetchall()
        packet.checklist_items = [
            ChecklistItem(
                id=r[0], title=r[1], status=ItemStatus(r[2]), page_reference=r[3],
                notes=r[4], reflection=r[5], order=r[6], created_at=_dt(r[7]),
                modified_at=_dt(r[8]), completed_at=_dt(r[9]),
            )
            for r in rows
        ]

        rows = self.conn.execute(
            "SELECT * FROM captures WHERE packet_id = ? ORDER BY timestamp", (packet.id,)
        ).fetchall()
        packet.captures = [self._row_to_capture(r) for r in rows]

        rows = self.conn.execute(
            """SELECT l.item_id, l.capture_id FROM capture_links l
               JOIN checklist_items i ON i.id = l.item_id
               WHERE i.packet_id = ?""",
            (packet.id,),
        ).fetchall()
        links: Dict[str, Set[str]] = {}
        for item_id, capture_id in rows:
            links.setdefault(item_id, set()).add(capture_id)
        packet.capture_links = links
        return packet

    # ---- Capture Queries ----

    def get_recent_captures(self, limit: int = 50) -> List[Capture]:
        """Most recent captures across all packets."""
        with self._lock:
            rows = self.conn.execute(
                "SELECT * FROM captures ORDER BY timestamp DESC LIMIT ?", (limit,)
            ).fetchall()
        return [self._row_to_capture(r) for r in rows]

    def get_captures_for_today(self) -> List[Capture]:
        start = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)
        with self._lock:
            rows = self.conn.execute(
                """SELECT * FROM captures WHERE timestamp >= ? AND timestamp < ?
                   ORDER BY timestamp DESC""",
                (_ts(start), _ts(end)),
            ).fetchall()
        return [self._row_to_capture(r) for r in rows]

    def _row_to_capture(self, row: tuple) -> Capture:
        return Capture(
            id=row[0], type=CaptureType(row[2]), title=row[3], content=row[4] or "",
            transcript=row[5], summary=row[6], timestamp=_dt(row[7]),
            duration=row[8], confidence=row[9],
        )

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self.conn.close()
