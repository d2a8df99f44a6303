"""
StudyPacket - Prompt Templates
Prompts for the remote document analysis request.
"""

from typing import Dict, List, Optional

SYSTEM_INSTRUCTION = (
    "You are an expert academic document analyzer. Analyze the provided document "
    "and generate structured study materials. Focus on creating actionable study "
    "tasks, not just summaries."
)

RESPONSE_SCHEMA = """{
  "title": "Document title",
  "summary": "2-3 sentence summary of the main content",
  "mainTopics": [
    {
      "name": "Topic name",
      "description": "Brief description",
      "priority": "high|medium|low",
      "pageReference": "p. X"
    }
  ],
  "studyTasks": [
    {
      "title": "Actionable study task",
      "description": "What the student should do",
      "taskType": "memorize|understand|analyze|compare|synthesize|review",
      "estimatedMinutes": 30,
      "priority": "high|medium|low",
      "pageReference": "p. X",
      "relatedTopics": ["topic1", "topic2"]
    }
  ],
  "keyDates": [
    {
      "date": "Date or period",
      "event": "What happened",
      "significance": "Why it matters",
      "pageReference": "p. X"
    }
  ],
  "importantFigures": [
    {
      "name": "Person name",
      "role": "Their role/position",
      "significance": "Why they're important",
      "timeframe": "When they lived/were active",
      "pageReference": "p. X"
    }
  ],
  "concepts": [
    {
      "name": "Concept name",
      "definition": "Clear definition",
      "importance": "Why it's significant",
      "relatedConcepts": ["concept1", "concept2"],
      "pageReference": "p. X"
    }
  ]
}"""


def build_analysis_prompt(content: str, title: Optional[str] = None) -> str:
    return (
        "Please analyze this academic document and provide a comprehensive study "
        "analysis. Return your response in the following JSON format:\n\n"
        f"{RESPONSE_SCHEMA}\n\n"
        "Focus on creating actionable study tasks that help students learn and "
        "understand the material, not just read it. Each task should be specific "
        "and measurable. Use null for unknown page references.\n\n"
        f"Document title: {title or 'Unknown'}\n\n"
        f"Document content:\n{content}"
    )


def build_analysis_messages(content: str, title: Optional[str] = None) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": build_analysis_prompt(content, title)},
    ]
