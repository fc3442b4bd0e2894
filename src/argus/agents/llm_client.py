"""LLM client used by the analyzers."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

from argus.config import ModelSettings

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


@dataclass
class LLMConfig:
    """Configuration for the LLM client."""

    api_key: str
    model: str = "claude-sonnet-4-20250514"
    base_url: str = "https://api.anthropic.com/v1"
    timeout: int = 120
    max_tokens: int = 4000
    temperature: float = 0.1

    @classmethod
    def from_settings(cls, settings: ModelSettings) -> "LLMConfig":
        return cls(
            api_key=settings.api_key,
            model=settings.model,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )


class LLMClient:
    """Client for the Anthropic Messages API."""

    def __init__(self, config: LLMConfig) -> None:
        """Initialize the client.

        Args:
            config: Configuration for the client
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "x-api-key": config.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            },
            timeout=config.timeout,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "LLMClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one prompt and return the text of the reply.

        Raises:
            httpx.HTTPError: On transport failures or non-2xx responses
        """
        body = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        response = await self._client.post("/messages", json=body)
        response.raise_for_status()
        data = response.json()

        return "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Any:
        """Send one prompt and parse the reply as JSON."""
        content = await self.complete(system_prompt, user_prompt)
        return parse_json_response(content)


def parse_json_response(content: str) -> Any:
    """Parse JSON from a model reply.

    Handles markdown code blocks, prose around the payload and replies that
    were truncated mid-structure.

    Raises:
        ValueError: If no JSON can be recovered
    """
    content = content.strip()
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", content)
    if match:
        candidate = match.group(1).strip()
    else:
        start = min((i for i in (content.find("{"), content.find("[")) if i >= 0), default=-1)
        if start < 0:
            raise ValueError("No JSON found in response")
        candidate = content[start:]
        end = max(candidate.rfind("}"), candidate.rfind("]"))
        if end >= 0:
            try:
                return json.loads(candidate[: end + 1])
            except json.JSONDecodeError:
                pass

    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        logger.warning("Response appears truncated, attempting recovery")

    repaired = _close_truncated_json(candidate)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as e:
        raise ValueError(f"Could not parse JSON response: {e}") from e


def _close_truncated_json(text: str) -> str:
    """Append the closers a truncated JSON document is missing."""
    stack = []
    in_string = False
    escaped = False

    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in "{[":
            stack.append("}" if char == "{" else "]")
        elif char in "}]" and stack:
            stack.pop()

    if in_string:
        text += '"'
    text = re.sub(r",\s*$", "", text)
    return text + "".join(reversed(stack))
