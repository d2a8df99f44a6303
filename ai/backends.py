"""
StudyPacket - Analysis Backends
Pluggable strategies that turn document text into a DocumentAnalysis:
  - RemoteBackend: chat-completion call to an OpenAI-compatible model
  - FallbackBackend: deterministic keyword analyzer, always available
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Mapping, Optional

from ai.keywords import KeywordRule, KeywordTable, default_keyword_table
from ai.llm_client import LLMClient, OpenAICompatibleClient
from ai.prompts import build_analysis_messages
from config import LLMConfig, resolve_api_key
from core.analysis import (
    Concept, DocumentAnalysis, HistoricalDate, Person, StudyTask, TaskType, Priority, Topic,
)
from core.errors import BackendError, ParsingError

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Document Analysis"


class AnalysisBackend(ABC):
    """A strategy that can analyze document text."""

    name: str = "backend"

    @abstractmethod
    def is_available(self) -> bool:
        ...

    @abstractmethod
    async def analyze(self, content: str, title: Optional[str] = None) -> DocumentAnalysis:
        ...

    async def generate_study_tasks(self, analysis: DocumentAnalysis) -> List[StudyTask]:
        """Tasks are produced together with the analysis; return them as-is."""
        return list(analysis.study_tasks)


# ---- Remote Backend ----

def extract_json_object(text: str) -> str:
    """Return the text between the first '{' and the last '}' (inclusive)."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ParsingError("No valid JSON found in response")
    return text[start:end + 1]


def parse_analysis_response(text: str, default_title: Optional[str] = None) -> DocumentAnalysis:
    """Decode a model reply that may wrap the JSON object in prose or code fences."""
    try:
        data = json.loads(extract_json_object(text))
    except json.JSONDecodeError as e:
        raise ParsingError(f"Failed to decode JSON response: {e}") from e
    return DocumentAnalysis.from_dict(data, default_title=default_title)


ClientFactory = Callable[[LLMConfig, str], LLMClient]


class RemoteBackend(AnalysisBackend):
    """
    LLM-backed analysis. Available only when an API key is configured
    (environment first, then saved settings). A call that exceeds
    `config.timeout_seconds` fails with BackendError.
    """

    def __init__(
        self,
        config: LLMConfig,
        client_factory: Optional[ClientFactory] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.config = config
        self.client_factory = client_factory or OpenAICompatibleClient
        self.environ = environ
        self.name = f"Remote {config.provider} ({config.model_name})"

    def is_available(self) -> bool:
        return bool(resolve_api_key(self.config, self.environ))

    async def analyze(self, content: str, title: Optional[str] = None) -> DocumentAnalysis:
        api_key = resolve_api_key(self.config, self.environ)
        if not api_key:
            raise BackendError("API key is not configured")

        client = self.client_factory(self.config, api_key)
        messages = build_analysis_messages(content, title)
        try:
            reply = await asyncio.wait_for(
                client.chat(messages), timeout=self.config.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise BackendError(
                f"Analysis timed out after {self.config.timeout_seconds:g}s"
            ) from e

        return parse_analysis_response(reply, default_title=title)


# ---- Fallback Backend ----

def extract_title(content: str) -> str:
    """First of the first 10 non-blank lines with a plausible title length."""
    lines = [line.strip() for line in content.splitlines() if line.strip()]
    for line in lines[:10]:
        if 5 < len(line) < 100:
            return line
    return DEFAULT_TITLE


class FallbackBackend(AnalysisBackend):
    """Deterministic keyword-table analyzer used when no model is reachable."""

    name = "Offline Analyzer"

    def __init__(self, table: Optional[KeywordTable] = None, latency_seconds: float = 0.0) -> None:
        self.table = table or default_keyword_table()
        self.latency_seconds = latency_seconds

    def is_available(self) -> bool:
        return True

    async def analyze(self, content: str, title: Optional[str] = None) -> DocumentAnalysis:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)
        return self.analyze_text(content, title)

    def analyze_text(self, content: str, title: Optional[str] = None) -> DocumentAnalysis:
        lowered = content.lower()
        topics = [Topic.from_dict(r) for r in self._matches(self.table.topics, lowered)]
        return DocumentAnalysis(
            title=title or extract_title(content),
            summary=self.summarize(content, lowered),
            main_topics=topics,
            study_tasks=self.tasks_for_topics(topics),
            key_dates=[HistoricalDate.from_dict(r) for r in self._matches(self.table.key_dates, lowered)],
            important_figures=[
                Person.from_dict(r) for r in self._matches(self.table.important_figures, lowered)
            ],
            concepts=[Concept.from_dict(r) for r in self._matches(self.table.concepts, lowered)],
        )

    def summarize(self, content: str, lowered: str) -> str:
        for record in self._matches(self.table.summaries, lowered):
            return record["summary"]
        word_count = len(content.split())
        return f"Document contains {word_count} words covering various topics for academic study."

    def tasks_for_topics(self, topics: List[Topic]) -> List[StudyTask]:
        tasks: List[StudyTask] = []
        for topic in topics:
            template = self.table.task_templates.get(topic.name)
            if template is not None:
                task = StudyTask.from_dict({**template, "pageReference": topic.page_reference})
            else:
                task = StudyTask(
                    title=f"Review {topic.name}",
                    description=f"Study the key aspects and significance of {topic.name}",
                    task_type=TaskType.REVIEW,
                    estimated_minutes=30,
                    priority=Priority.MEDIUM,
                    page_reference=topic.page_reference,
                    related_topics=[topic.name],
                )
            tasks.append(task)

        if len(tasks) >= 3:
            tasks.append(StudyTask.from_dict({
                **self.table.synthesis_task,
                "pageReference": None,
                "relatedTopics": [t.name for t in topics],
            }))
        return tasks

    @staticmethod
    def _matches(rules: List[KeywordRule], lowered: str) -> List[dict]:
        return [rule.record for rule in rules if rule.matches(lowered)]
