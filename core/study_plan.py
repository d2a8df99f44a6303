"""
StudyPacket - Study Plan Builder
Turns a DocumentAnalysis into packet sections and an ordered checklist.
Also builds the structural checklist used when a document is imported
without an analysis backend.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from core.analysis import DocumentAnalysis
from core.models import ChecklistItem, Packet, Section, SectionType

MAX_STRUCTURAL_ITEMS = 10
REVIEW_ITEM_TITLE = "Review and summarize key findings"


@dataclass
class SourceInfo:
    """Where a packet came from."""
    title: str
    source_reference: Optional[str] = None
    original_filename: Optional[str] = None


@dataclass
class StudyPlan:
    sections: List[Section] = field(default_factory=list)
    checklist_items: List[ChecklistItem] = field(default_factory=list)

    def to_packet(self, source: SourceInfo) -> Packet:
        return Packet(
            title=source.title,
            source_reference=source.source_reference,
            original_filename=source.original_filename,
            sections=list(self.sections),
            checklist_items=list(self.checklist_items),
        )


def _format_concepts(analysis: DocumentAnalysis) -> str:
    return "\n\n".join(
        f"**{c.name}**: {c.definition}\n\n*Importance*: {c.importance}"
        for c in analysis.concepts
    )


def _format_timeline(analysis: DocumentAnalysis) -> str:
    return "\n\n".join(
        f"**{d.date}**: {d.event}\n{d.significance}" for d in analysis.key_dates
    )


def _format_figures(analysis: DocumentAnalysis) -> str:
    return "\n\n".join(
        f"**{p.name}** ({p.timeframe or 'Unknown period'})\n"
        f"*Role*: {p.role}\n*Significance*: {p.significance}"
        for p in analysis.important_figures
    )


def build_sections(analysis: DocumentAnalysis) -> List[Section]:
    """Overview, one section per topic, then concepts, timeline and figures when present."""
    blocks = [("Document Overview", analysis.summary, None, SectionType.CONTENT)]
    blocks += [
        (t.name, t.description, t.page_reference, SectionType.HEADING)
        for t in analysis.main_topics
    ]
    if analysis.concepts:
        blocks.append(("Key Concepts", _format_concepts(analysis), None, SectionType.CONTENT))
    if analysis.key_dates:
        blocks.append(("Timeline", _format_timeline(analysis), None, SectionType.CONTENT))
    if analysis.important_figures:
        blocks.append(("Important Figures", _format_figures(analysis), None, SectionType.CONTENT))

    return [
        Section(title=title, content=content, page_reference=ref, section_type=kind, order=order)
        for order, (title, content, ref, kind) in enumerate(blocks)
    ]


def build_checklist(analysis: DocumentAnalysis) -> List[ChecklistItem]:
    """One item per study task; one "Study <topic>" item per topic when there are no tasks."""
    if analysis.study_tasks:
        return [
            ChecklistItem(
                title=task.title,
                page_reference=task.page_reference,
                order=order,
                notes=task.description or None,
            )
            for order, task in enumerate(analysis.study_tasks)
        ]
    return [
        ChecklistItem(
            title=f"Study {topic.name}",
            page_reference=topic.page_reference,
            order=order,
            notes=topic.description or None,
        )
        for order, topic in enumerate(analysis.main_topics)
    ]


def build_study_plan(analysis: DocumentAnalysis) -> StudyPlan:
    return StudyPlan(sections=build_sections(analysis), checklist_items=build_checklist(analysis))


def build_packet(analysis: DocumentAnalysis, source: SourceInfo) -> Packet:
    return build_study_plan(analysis).to_packet(source)


# ---- Structural (no backend) ----

def build_structural_checklist(sections: List[Section]) -> List[ChecklistItem]:
    """
    One item per heading section; without headings, one per content section
    (capped). A closing review item is always appended.
    """
    picked = [s for s in sections if s.section_type == SectionType.HEADING]
    if not picked:
        content = [s for s in sections if s.section_type == SectionType.CONTENT]
        picked = content[:MAX_STRUCTURAL_ITEMS]

    items = [
        ChecklistItem(title=s.title, page_reference=s.page_reference, order=order)
        for order, s in enumerate(picked)
    ]
    items.append(ChecklistItem(title=REVIEW_ITEM_TITLE, order=len(items)))
    return items


def build_structural_plan(sections: List[Section]) -> StudyPlan:
    return StudyPlan(sections=list(sections), checklist_items=build_structural_checklist(sections))
