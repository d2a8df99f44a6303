"""
StudyPacket - Analysis Records
The structured result an analysis backend hands to the study-plan builder,
plus conversion from/to the JSON wire format used by the remote backend.

Wire field names are camelCase ("mainTopics", "pageReference", ...); page
references use the literal form "p. N".
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from core.errors import ParsingError


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskType(str, Enum):
    MEMORIZE = "memorize"
    UNDERSTAND = "understand"
    ANALYZE = "analyze"
    COMPARE = "compare"
    SYNTHESIZE = "synthesize"
    REVIEW = "review"


E = TypeVar("E", bound=Enum)


def _enum_or_default(enum_cls: Type[E], value: Any, default: E) -> E:
    """Unknown enum values fall back to a default instead of failing the parse."""
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return default


def _require_str(data: Dict[str, Any], key: str, record: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ParsingError(f"{record}.{key} must be a string")
    return value


def _optional_str(data: Dict[str, Any], key: str, record: str) -> Optional[str]:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ParsingError(f"{record}.{key} must be a string or null")


def _str_list(data: Dict[str, Any], key: str, record: str) -> List[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ParsingError(f"{record}.{key} must be a list of strings")
    return value


def _record_list(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ParsingError(f"{key} must be a list of objects")
    return value


@dataclass
class Topic:
    name: str
    description: str
    priority: Priority = Priority.MEDIUM
    page_reference: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Topic":
        return cls(
            name=_require_str(data, "name", "topic"),
            description=_require_str(data, "description", "topic"),
            priority=_enum_or_default(Priority, data.get("priority"), Priority.MEDIUM),
            page_reference=_optional_str(data, "pageReference", "topic"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "priority": self.priority.value,
            "pageReference": self.page_reference,
        }


@dataclass
class StudyTask:
    title: str
    description: str
    task_type: TaskType = TaskType.UNDERSTAND
    estimated_minutes: int = 30
    priority: Priority = Priority.MEDIUM
    page_reference: Optional[str] = None
    related_topics: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudyTask":
        minutes = data.get("estimatedMinutes")
        if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
            raise ParsingError("studyTask.estimatedMinutes must be a number")
        if not math.isfinite(minutes):
            raise ParsingError("studyTask.estimatedMinutes must be finite")
        return cls(
            title=_require_str(data, "title", "studyTask"),
            description=_require_str(data, "description", "studyTask"),
            task_type=_enum_or_default(TaskType, data.get("taskType"), TaskType.UNDERSTAND),
            estimated_minutes=int(minutes),
            priority=_enum_or_default(Priority, data.get("priority"), Priority.MEDIUM),
            page_reference=_optional_str(data, "pageReference", "studyTask"),
            related_topics=_str_list(data, "relatedTopics", "studyTask"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "taskType": self.task_type.value,
            "estimatedMinutes": self.estimated_minutes,
            "priority": self.priority.value,
            "pageReference": self.page_reference,
            "relatedTopics": list(self.related_topics),
        }


@dataclass
class HistoricalDate:
    date: str
    event: str
    significance: str
    page_reference: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoricalDate":
        return cls(
            date=_require_str(data, "date", "keyDate"),
            event=_require_str(data, "event", "keyDate"),
            significance=_require_str(data, "significance", "keyDate"),
            page_reference=_optional_str(data, "pageReference", "keyDate"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "event": self.event,
            "significance": self.significance,
            "pageReference": self.page_reference,
        }


@dataclass
class Person:
    name: str
    role: str
    significance: str
    timeframe: Optional[str] = None
    page_reference: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Person":
        return cls(
            name=_require_str(data, "name", "importantFigure"),
            role=_require_str(data, "role", "importantFigure"),
            significance=_require_str(data, "significance", "importantFigure"),
            timeframe=_optional_str(data, "timeframe", "importantFigure"),
            page_reference=_optional_str(data, "pageReference", "importantFigure"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role,
            "significance": self.significance,
            "timeframe": self.timeframe,
            "pageReference": self.page_reference,
        }


@dataclass
class Concept:
    name: str
    definition: str
    importance: str
    related_concepts: List[str] = field(default_factory=list)
    page_reference: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Concept":
        return cls(
            name=_require_str(data, "name", "concept"),
            definition=_require_str(data, "definition", "concept"),
            importance=_require_str(data, "importance", "concept"),
            related_concepts=_str_list(data, "relatedConcepts", "concept"),
            page_reference=_optional_str(data, "pageReference", "concept"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "definition": self.definition,
            "importance": self.importance,
            "relatedConcepts": list(self.related_concepts),
            "pageReference": self.page_reference,
        }


@dataclass
class DocumentAnalysis:
    """Backend output, consumed once by the study-plan builder."""
    title: str = "Untitled Document"
    summary: str = ""
    main_topics: List[Topic] = field(default_factory=list)
    study_tasks: List[StudyTask] = field(default_factory=list)
    key_dates: List[HistoricalDate] = field(default_factory=list)
    important_figures: List[Person] = field(default_factory=list)
    concepts: List[Concept] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_title: Optional[str] = None) -> "DocumentAnalysis":
        """
        Build an analysis from the decoded wire JSON.

        Raises ParsingError on a wrong shape. Missing arrays count as empty;
        an empty title falls back to `default_title`.
        """
        if not isinstance(data, dict):
            raise ParsingError("Analysis must be a JSON object")

        title = _require_str(data, "title", "analysis").strip()
        return cls(
            title=title or default_title or "Document Analysis",
            summary=_require_str(data, "summary", "analysis"),
            main_topics=[Topic.from_dict(d) for d in _record_list(data, "mainTopics")],
            study_tasks=[StudyTask.from_dict(d) for d in _record_list(data, "studyTasks")],
            key_dates=[HistoricalDate.from_dict(d) for d in _record_list(data, "keyDates")],
            important_figures=[Person.from_dict(d) for d in _record_list(data, "importantFigures")],
            concepts=[Concept.from_dict(d) for d in _record_list(data, "concepts")],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "mainTopics": [t.to_dict() for t in self.main_topics],
            "studyTasks": [t.to_dict() for t in self.study_tasks],
            "keyDates": [d.to_dict() for d in self.key_dates],
            "importantFigures": [p.to_dict() for p in self.important_figures],
            "concepts": [c.to_dict() for c in self.concepts],
        }
