"""
Client for an OpenAI-compatible chat completion API.

This client wraps HTTP requests to the ``/chat/completions`` endpoint
exposed by DeepSeek and similar services. On error conditions (HTTP
errors, timeouts, unexpected payloads), a :class:`LLMError` is raised.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests


logger = logging.getLogger(__name__)
# Attach a null handler to avoid errors when the root logger is missing a
# stream. Messages will still propagate to the root logger if configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class LLMError(Exception):
    """Raised when communication with the chat API fails."""

    pass


def strip_thinking_tags(text: str) -> str:
    """Remove thinking process tags from model responses.

    Reasoning models may prefix their answer with their thinking process
    in XML-like tags such as <think>, <thinking>, <thought>, or
    <reasoning>. This function strips these tags and their contents,
    leaving only the actual output.

    Examples
    --------
    >>> strip_thinking_tags("<think>reasoning...</think>Answer")
    'Answer'
    >>> strip_thinking_tags("<thinking>thoughts</thinking>\\n\\nReal answer")
    'Real answer'
    """
    thinking_patterns = [
        r'<think>.*?</think>',
        r'<thinking>.*?</thinking>',
        r'<thought>.*?</thought>',
        r'<reasoning>.*?</reasoning>',
    ]

    result = text
    for pattern in thinking_patterns:
        result = re.sub(pattern, '', result, flags=re.DOTALL | re.IGNORECASE)

    return result.strip()


def _error_detail(response: Any) -> str:
    """Best-effort extraction of ``error.message`` from an error response."""
    try:
        data = response.json()
    except (ValueError, AttributeError):
        return response.text
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return str(data["error"].get("message") or response.text)
    return response.text


@dataclass
class ChatClient:
    """Client for a chat completion server.

    Parameters
    ----------
    api_key : str
        Bearer token sent in the ``Authorization`` header.
    api_base_url : str
        Base URL of the API, e.g. ``"https://api.deepseek.com"``.
    model : str
        Name of the model to use, e.g. ``"deepseek-chat"``.
    request_timeout : float, optional
        Timeout in seconds for HTTP requests. Defaults to 60 seconds.
    max_tokens : int, optional
        Maximum number of tokens to generate. Defaults to 1000.
    temperature : float, optional
        Sampling temperature. Defaults to 0.7.
    """

    api_key: str
    api_base_url: str
    model: str
    request_timeout: float = 60.0
    max_tokens: Optional[int] = 1000
    temperature: float = 0.7

    def _endpoint(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/chat/completions"

    def complete(self, messages: List[Dict[str, str]]) -> str:
        """Send ``messages`` and return the assistant's answer.

        Parameters
        ----------
        messages : List[Dict[str, str]]
            Chat messages, each with ``role`` and ``content``.

        Returns
        -------
        str
            The generated text with thinking blocks removed.

        Raises
        ------
        LLMError
            If the request fails or the server returns an error.
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        url = self._endpoint()
        logger.debug("Sending request to chat API at %s for model %s", url, self.model)
        try:
            response = requests.post(
                url,
                json=payload,
                headers=headers,
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to connect to chat API: %s", exc)
            raise LLMError(str(exc)) from exc
        if response.status_code != 200:
            detail = _error_detail(response)
            logger.error("Chat API returned non-200 status %s: %s", response.status_code, detail)
            raise LLMError(f"Chat API returned status {response.status_code}: {detail}")
        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            logger.error("Failed to parse chat API response: %s", exc)
            raise LLMError("Failed to parse chat API response") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMError("Unexpected response structure from chat API") from exc
        if not isinstance(content, str) or not content.strip():
            raise LLMError("Chat API returned an empty answer")
        return strip_thinking_tags(content)
