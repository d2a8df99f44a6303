"""
StudyPacket - Global Configuration Module
Manages API keys, model selection, paths, and analysis settings.
"""

import json
import os
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Mapping, Optional


# --- Path Constants ---
APP_ROOT = Path(__file__).parent.resolve()
DB_PATH = APP_ROOT / "packets.db"
CONFIG_FILE = APP_ROOT / "settings.json"
LOG_FILE = APP_ROOT / "studypacket.log"

API_KEY_ENV_VAR = "OPENAI_API_KEY"


@dataclass
class LLMConfig:
    """Configuration for the remote analysis model."""
    provider: str = "openai"
    api_key: str = ""                   # persisted fallback; the environment wins
    base_url: str = "https://api.openai.com/v1"
    model_name: str = "gpt-4o"
    max_tokens: int = 4000
    temperature: float = 0.3
    timeout_seconds: float = 60.0


@dataclass
class AnalysisConfig:
    """Configuration for the offline fallback analyzer."""
    fallback_latency_seconds: float = 1.0
    keyword_table_path: str = ""        # empty -> built-in table


@dataclass
class AppSettings:
    """Top-level application settings, serializable to JSON."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    db_path: str = str(DB_PATH)
    log_level: str = "INFO"

    def save(self, path: Optional[Path] = None) -> None:
        """Persist settings to a JSON file."""
        target = path or CONFIG_FILE
        with open(target, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=2, ensure_ascii=False)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppSettings":
        """Load settings from a JSON file, falling back to defaults."""
        target = path or CONFIG_FILE
        if not target.exists():
            settings = cls()
            settings.save(target)
            return settings
        try:
            with open(target, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls(
                llm=LLMConfig(**data.get("llm", {})),
                analysis=AnalysisConfig(**data.get("analysis", {})),
                db_path=data.get("db_path", str(DB_PATH)),
                log_level=data.get("log_level", "INFO"),
            )
        except (json.JSONDecodeError, TypeError, AttributeError):
            return cls()


def resolve_api_key(config: LLMConfig, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the API key: environment variable first, then the saved setting."""
    env = os.environ if environ is None else environ
    for candidate in (env.get(API_KEY_ENV_VAR, ""), config.api_key):
        if candidate and candidate.strip():
            return candidate.strip()
    return ""
