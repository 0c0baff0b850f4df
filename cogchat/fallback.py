"""
Generative fallback - opaque text-completion service consulted when the
core has no answer.

Contract: ``generate(prompt, history) -> str | None``. ``None`` means the
service failed or is not configured; the reason is kept in ``last_error``.
The core never retries.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import requests

from .conversation_history import BOT_PREFIX, USER_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful conversational assistant. Answer briefly and naturally."
)


class GenerativeFallback(ABC):
    """Base class for text-completion fallbacks."""

    last_error: str = ""

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    def generate(self, prompt: str, history: Sequence[str] = ()) -> Optional[str]:
        """Completion for ``prompt``, or ``None`` on failure."""


class ChatCompletionFallback(GenerativeFallback):
    """
    Client for an OpenAI-compatible chat-completions endpoint.

    History lines ("User: ..." / "Bot: ...") become user/assistant messages
    ahead of the prompt.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_seconds: float = 30.0,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("OPENAI_API_KEY", "")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.system_prompt = system_prompt
        self.session = session or requests.Session()
        self.last_error = ""

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_messages(self, prompt: str, history: Sequence[str] = ()) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": self.system_prompt}]
        for line in history:
            if line.startswith(USER_PREFIX):
                messages.append({"role": "user", "content": line[len(USER_PREFIX):]})
            elif line.startswith(BOT_PREFIX):
                messages.append({"role": "assistant", "content": line[len(BOT_PREFIX):]})
            else:
                messages.append({"role": "user", "content": line})
        messages.append({"role": "user", "content": prompt})
        return messages

    def build_payload(self, prompt: str, history: Sequence[str] = ()) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": self.build_messages(prompt, history),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def generate(self, prompt: str, history: Sequence[str] = ()) -> Optional[str]:
        if not self.is_configured():
            self.last_error = "API key not configured"
            return None

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = self.session.post(
                self.endpoint,
                json=self.build_payload(prompt, history),
                headers=headers,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            text = self.extract_text(response.json())
        except requests.RequestException as e:
            self.last_error = f"HTTP request failed: {e}"
            logger.warning(f"Generative fallback unavailable: {e}")
            return None
        except ValueError as e:
            self.last_error = f"Malformed response: {e}"
            logger.warning(f"Generative fallback returned malformed payload: {e}")
            return None

        self.last_error = ""
        return text

    @staticmethod
    def extract_text(payload: Any) -> str:
        """Pull ``choices[0].message.content`` out of a completion payload."""
        if not isinstance(payload, dict):
            raise ValueError("completion payload is not an object")
        if "error" in payload:
            error = payload["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise ValueError(f"service error: {message}")
        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise ValueError("no choices[0].message.content in response") from None
        if not isinstance(content, str) or not content.strip():
            raise ValueError("empty completion")
        return content.strip()

    def describe(self) -> Dict[str, Any]:
        """Configuration summary with the key masked."""
        return {
            "configured": self.is_configured(),
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "endpoint": self.endpoint,
            "api_key": f"{self.api_key[:4]}..." if self.api_key else "",
            "last_error": self.last_error,
        }


__all__ = ["GenerativeFallback", "ChatCompletionFallback"]
