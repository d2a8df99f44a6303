"""
StudyPacket - Abstract LLM Client
Provides a unified async interface for chat-completion API calls against
OpenAI-compatible endpoints.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from config import LLMConfig
from core.errors import BackendError, ParsingError

logger = logging.getLogger(__name__)


class LLMClient(ABC):
    """Abstract base class for LLM interactions."""

    @abstractmethod
    async def chat(self, messages: List[Dict[str, str]], **kwargs: Any) -> str:
        """Chat completion. Returns the assistant's response text."""
        ...


class OpenAICompatibleClient(LLMClient):
    """
    Client for OpenAI-compatible API endpoints.
    Raises BackendError for transport/HTTP failures and ParsingError when the
    response body does not have the choices/message/content shape.
    """

    def __init__(
        self,
        config: LLMConfig,
        api_key: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self.timeout = httpx.Timeout(config.timeout_seconds, connect=10.0)
        self.transport = transport
        logger.info(f"LLM client initialized: {config.provider} / {config.model_name}")

    async def chat(self, messages: List[Dict[str, str]], **kwargs: Any) -> str:
        """Send a chat completion request and return the full response text."""
        payload = {
            "model": self.config.model_name,
            "messages": messages,
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
            "temperature": kwargs.get("temperature", self.config.temperature),
            "stream": False,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self.headers,
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            logger.error("LLM API request timed out.")
            raise BackendError("API request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"LLM API error: {e.response.status_code} - {e.response.text}")
            raise BackendError(
                f"API request failed ({e.response.status_code}): {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"LLM API transport error: {e}")
            raise BackendError(f"Network error: {e}") from e
        except ValueError as e:
            raise ParsingError("API response is not valid JSON") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParsingError("Invalid API response structure") from e
        if not isinstance(content, str):
            raise ParsingError("Invalid API response structure")
        return content
