"""
StudyPacket - Data Models
Dataclass definitions for Packets, Sections, Checklist Items, and Captures.
"""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set


def new_id() -> str:
    return str(uuid.uuid4())


class SectionType(str, Enum):
    HEADING = "heading"
    CONTENT = "content"
    FIGURE = "figure"
    CODE = "code"
    QUOTE = "quote"
    LIST = "list"
    TASK = "task"


class ItemStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    SKIPPED = "skipped"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class CaptureType(str, Enum):
    VOICE = "voice"
    SCREEN_CLIP = "screen_clip"
    BRAINSTORM = "brainstorm"
    TEXT = "text"
    IMAGE = "image"

    @property
    def default_title(self) -> str:
        return {
            CaptureType.VOICE: "Voice Note",
            CaptureType.SCREEN_CLIP: "Screen Clip",
            CaptureType.BRAINSTORM: "Brainstorm Session",
            CaptureType.TEXT: "Text Note",
            CaptureType.IMAGE: "Image",
        }[self]


@dataclass(frozen=True)
class Section:
    """A titled block of document text. Immutable once created."""
    title: str
    content: str
    page_reference: Optional[str] = None     # "p. N"
    section_type: SectionType = SectionType.CONTENT
    order: int = 0
    id: str = field(default_factory=new_id)


@dataclass
class ChecklistItem:
    """One actionable study task inside a packet."""
    title: str
    page_reference: Optional[str] = None
    order: int = 0
    status: ItemStatus = ItemStatus.PENDING
    notes: Optional[str] = None
    reflection: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)
    modified_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def update_status(self, status: ItemStatus) -> None:
        """Change status; completed_at is set on entering COMPLETED and cleared on leaving it."""
        now = datetime.now()
        self.status = status
        self.modified_at = now
        if status == ItemStatus.COMPLETED:
            if self.completed_at is None:
                self.completed_at = now
        else:
            self.completed_at = None

    def add_notes(self, notes: str) -> None:
        self.notes = notes
        self.modified_at = datetime.now()

    def add_reflection(self, reflection: str) -> None:
        self.reflection = reflection
        self.modified_at = datetime.now()

    @property
    def is_completed(self) -> bool:
        return self.status == ItemStatus.COMPLETED


@dataclass
class Capture:
    """Free-form evidence (voice note, screen clip, text) recorded while studying."""
    type: CaptureType
    title: str = ""
    content: str = ""
    transcript: Optional[str] = None
    summary: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    duration: Optional[float] = None         # seconds
    confidence: Optional[float] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.type = CaptureType(self.type)
        if not self.title:
            self.title = self.type.default_title

    def add_transcript(self, transcript: str, confidence: Optional[float] = None) -> None:
        self.transcript = transcript
        self.confidence = confidence
        if not self.content:
            self.content = transcript

    def add_summary(self, summary: str) -> None:
        self.summary = summary

    @property
    def display_duration(self) -> str:
        if self.duration is None:
            return ""
        total = int(self.duration)
        return f"{total // 60}:{total % 60:02d}"


@dataclass
class Packet:
    """
    The study unit produced from one imported document.
    Captures link to checklist items by id; `capture_links` maps item id -> capture ids.
    """
    title: str
    source_reference: Optional[str] = None
    original_filename: Optional[str] = None
    sections: List[Section] = field(default_factory=list)
    checklist_items: List[ChecklistItem] = field(default_factory=list)
    captures: List[Capture] = field(default_factory=list)
    capture_links: Dict[str, Set[str]] = field(default_factory=dict)
    is_archived: bool = False
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)
    modified_at: datetime = field(default_factory=datetime.now)
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False, compare=False
    )

    def touch(self) -> None:
        self.modified_at = datetime.now()

    # ---- Progress ----

    @property
    def completed_count(self) -> int:
        return sum(1 for item in self.checklist_items if item.is_completed)

    @property
    def progress(self) -> float:
        if not self.checklist_items:
            return 0.0
        return self.completed_count / len(self.checklist_items)

    @property
    def is_completed(self) -> bool:
        return bool(self.checklist_items) and all(i.is_completed for i in self.checklist_items)

    # ---- Checklist Operations ----

    def get_item(self, item_id: str) -> ChecklistItem:
        for item in self.checklist_items:
            if item.id == item_id:
                return item
        raise KeyError(f"No checklist item {item_id} in packet {self.id}")

    def add_checklist_item(self, title: str, page_reference: Optional[str] = None) -> ChecklistItem:
        """Append a manual item after every existing one."""
        with self._lock:
            order = max((i.order for i in self.checklist_items), default=-1) + 1
            item = ChecklistItem(title=title, page_reference=page_reference, order=order)
            self.checklist_items.append(item)
            self.touch()
            return item

    def remove_checklist_item(self, item_id: str) -> None:
        with self._lock:
            item = self.get_item(item_id)
            self.checklist_items.remove(item)
            self.capture_links.pop(item_id, None)
            self.touch()

    def set_item_status(self, item_id: str, status: ItemStatus) -> ChecklistItem:
        with self._lock:
            item = self.get_item(item_id)
            item.update_status(ItemStatus(status))
            self.touch()
            return item

    def set_item_notes(self, item_id: str, notes: str) -> ChecklistItem:
        with self._lock:
            item = self.get_item(item_id)
            item.add_notes(notes)
            self.touch()
            return item

    def set_item_reflection(self, item_id: str, reflection: str) -> ChecklistItem:
        with self._lock:
            item = self.get_item(item_id)
            item.add_reflection(reflection)
            self.touch()
            return item

    # ---- Capture Operations ----

    def get_capture(self, capture_id: str) -> Capture:
        for capture in self.captures:
            if capture.id == capture_id:
                return capture
        raise KeyError(f"No capture {capture_id} in packet {self.id}")

    def add_capture(self, capture: Capture) -> Capture:
        with self._lock:
            self.captures.append(capture)
            self.touch()
            return capture

    def remove_capture(self, capture_id: str) -> None:
        with self._lock:
            self.captures.remove(self.get_capture(capture_id))
            for linked in self.capture_links.values():
                linked.discard(capture_id)
            self.touch()

    def set_capture_transcript(self, capture_id: str, transcript: str,
                               confidence: Optional[float] = None) -> Capture:
        with self._lock:
            capture = self.get_capture(capture_id)
            capture.add_transcript(transcript, confidence)
            self.touch()
            return capture

    def set_capture_summary(self, capture_id: str, summary: str) -> Capture:
        with self._lock:
            capture = self.get_capture(capture_id)
            capture.add_summary(summary)
            self.touch()
            return capture

    def link_capture(self, capture_id: str, item_id: str) -> None:
        """Link a capture to an item. Linking twice is a no-op."""
        with self._lock:
            self.get_capture(capture_id)
            self.get_item(item_id)
            self.capture_links.setdefault(item_id, set()).add(capture_id)
            self.touch()

    def unlink_capture(self, capture_id: str, item_id: str) -> None:
        with self._lock:
            linked = self.capture_links.get(item_id)
            if linked is not None:
                linked.discard(capture_id)
                if not linked:
                    del self.capture_links[item_id]
            self.touch()

    def captures_for_item(self, item_id: str) -> List[Capture]:
        linked = self.capture_links.get(item_id, set())
        return [c for c in self.captures if c.id in linked]

    def items_for_capture(self, capture_id: str) -> List[ChecklistItem]:
        return [
            item for item in self.checklist_items
            if capture_id in self.capture_links.get(item.id, set())
        ]

    # ---- Archiving ----

    def archive(self) -> None:
        with self._lock:
            self.is_archived = True
            self.touch()

    def unarchive(self) -> None:
        with self._lock:
            self.is_archived = False
            self.touch()
