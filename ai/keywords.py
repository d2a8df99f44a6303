"""
StudyPacket - Keyword Table
Configuration for the offline fallback analyzer: which keywords trigger which
topic/date/figure/concept records, summary overrides, and study-task templates.

Records are written in the same camelCase wire format the remote backend
returns, so a table can be kept in a JSON file and swapped per subject.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class KeywordRule:
    """Emits `record` once when any of `keywords` occurs in the text (case-insensitive)."""
    keywords: List[str]
    record: Dict[str, Any]

    def matches(self, lowered_text: str) -> bool:
        return any(k.lower() in lowered_text for k in self.keywords)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeywordRule":
        keywords = data.get("keywords") or [data["keyword"]]
        return cls(keywords=list(keywords), record=dict(data["record"]))


@dataclass
class KeywordTable:
    summaries: List[KeywordRule] = field(default_factory=list)    # record: {"summary": ...}
    topics: List[KeywordRule] = field(default_factory=list)
    key_dates: List[KeywordRule] = field(default_factory=list)
    important_figures: List[KeywordRule] = field(default_factory=list)
    concepts: List[KeywordRule] = field(default_factory=list)
    task_templates: Dict[str, Dict[str, Any]] = field(default_factory=dict)  # topic name -> task
    synthesis_task: Dict[str, Any] = field(default_factory=lambda: {
        "title": "Synthesize key themes",
        "description": "Identify common themes and connections across the main topics",
        "taskType": "synthesize",
        "estimatedMinutes": 40,
        "priority": "high",
    })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeywordTable":
        def rules(key: str) -> List[KeywordRule]:
            return [KeywordRule.from_dict(r) for r in data.get(key, [])]

        table = cls(
            summaries=rules("summaries"),
            topics=rules("topics"),
            key_dates=rules("keyDates"),
            important_figures=rules("importantFigures"),
            concepts=rules("concepts"),
            task_templates=dict(data.get("taskTemplates", {})),
        )
        if "synthesisTask" in data:
            table.synthesis_task = dict(data["synthesisTask"])
        return table

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "KeywordTable":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


# Demo table for a Mesoamerican history reader.
DEFAULT_TABLE_DATA: Dict[str, Any] = {
    "summaries": [
        {"keyword": "mesoamerica", "record": {"summary": (
            "This document covers Mesoamerican civilizations and their historical "
            "development before European contact in 1521.")}},
    ],
    "topics": [
        {"keyword": "mesoamerica", "record": {
            "name": "Mesoamerican Civilizations",
            "description": "Pre-Columbian civilizations of Central America",
            "priority": "high", "pageReference": "p. 1"}},
        {"keyword": "aztec", "record": {
            "name": "Aztec Empire",
            "description": "The dominant civilization at the time of Spanish contact",
            "priority": "high", "pageReference": "p. 2"}},
        {"keyword": "maya", "record": {
            "name": "Maya Civilization",
            "description": "Advanced civilization with writing, astronomy, and mathematics",
            "priority": "high", "pageReference": "p. 3"}},
        {"keyword": "olmec", "record": {
            "name": "Olmec Culture",
            "description": "The 'mother culture' of Mesoamerica",
            "priority": "medium", "pageReference": "p. 4"}},
    ],
    "keyDates": [
        {"keyword": "1521", "record": {
            "date": "1521", "event": "Spanish conquest of the Aztec Empire",
            "significance": "End of independent Mesoamerican civilization",
            "pageReference": "p. 1"}},
        {"keyword": "1200", "record": {
            "date": "c. 1200 BCE", "event": "Rise of Olmec civilization",
            "significance": "Beginning of complex Mesoamerican societies",
            "pageReference": "p. 2"}},
    ],
    "importantFigures": [
        {"keyword": "moctezuma", "record": {
            "name": "Moctezuma II", "role": "Aztec Emperor",
            "significance": "Ruler during Spanish conquest",
            "timeframe": "1502-1520", "pageReference": "p. 3"}},
        {"keywords": ["cortés", "cortes"], "record": {
            "name": "Hernán Cortés", "role": "Spanish Conquistador",
            "significance": "Led conquest of Aztec Empire",
            "timeframe": "1519-1521", "pageReference": "p. 4"}},
    ],
    "concepts": [
        {"keyword": "tribute", "record": {
            "name": "Tribute System",
            "definition": "Economic system where conquered peoples provided goods and labor",
            "importance": "Central to Aztec imperial control",
            "relatedConcepts": ["Empire", "Economy"], "pageReference": "p. 5"}},
        {"keyword": "calendar", "record": {
            "name": "Mesoamerican Calendar",
            "definition": "Complex system combining solar and ritual calendars",
            "importance": "Reflects advanced astronomical knowledge",
            "relatedConcepts": ["Astronomy", "Religion"], "pageReference": "p. 6"}},
    ],
    "taskTemplates": {
        "Mesoamerican Civilizations": {
            "title": "Map the major Mesoamerican civilizations",
            "description": ("Create a geographical and chronological map showing the locations "
                            "and time periods of major Mesoamerican civilizations"),
            "taskType": "understand", "estimatedMinutes": 45, "priority": "high",
            "relatedTopics": ["Geography", "Chronology"]},
        "Aztec Empire": {
            "title": "Analyze Aztec imperial organization",
            "description": ("Study the political, military, and economic structures that "
                            "allowed the Aztec Empire to control central Mexico"),
            "taskType": "analyze", "estimatedMinutes": 60, "priority": "high",
            "relatedTopics": ["Politics", "Military", "Economics"]},
        "Maya Civilization": {
            "title": "Compare Maya and Aztec achievements",
            "description": ("Examine the different accomplishments of Maya and Aztec "
                            "civilizations in writing, mathematics, and astronomy"),
            "taskType": "compare", "estimatedMinutes": 50, "priority": "medium",
            "relatedTopics": ["Writing", "Mathematics", "Astronomy"]},
    },
    "synthesisTask": {
        "title": "Synthesize Mesoamerican cultural patterns",
        "description": ("Identify common themes and unique characteristics across "
                        "different Mesoamerican civilizations"),
        "taskType": "synthesize", "estimatedMinutes": 40, "priority": "high",
    },
}


def default_keyword_table() -> KeywordTable:
    return KeywordTable.from_dict(DEFAULT_TABLE_DATA)


def load_keyword_table(path: Optional[str] = None) -> KeywordTable:
    """Load a table from JSON, or the built-in table when no path is configured."""
    if not path:
        return default_keyword_table()
    logger.info(f"Loading keyword table from {path}")
    return KeywordTable.from_file(path)
