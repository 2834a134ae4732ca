"""LLM service for the Anthropic Messages API."""

import base64
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import anthropic

from pantry_planner.config import get_settings

logger = logging.getLogger(__name__)

CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class AIServiceNotConfiguredError(RuntimeError):
    """Raised when no Anthropic API key is configured."""


class AIResponseError(RuntimeError):
    """Raised when the model returns no text or text that is not valid JSON."""


@dataclass
class ImageInput:
    """Raw image bytes to send alongside a prompt."""

    data: bytes
    media_type: str  # "image/jpeg", "image/png", "image/gif" or "image/webp"

    def to_content_block(self) -> dict[str, Any]:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": self.media_type,
                "data": base64.standard_b64encode(self.data).decode("utf-8"),
            },
        }


def parse_json_response(text: str) -> Any:
    """Parse model output as JSON, unwrapping a markdown code block if present."""
    json_text = text.strip()
    match = CODE_BLOCK_RE.search(json_text)
    if match:
        json_text = match.group(1).strip()
    return json.loads(json_text)


class LLMService:
    """Service for interacting with Claude."""

    def __init__(self, client: anthropic.AsyncAnthropic | None = None) -> None:
        self.settings = get_settings()
        self.model = self.settings.anthropic_model
        self._client = client

    @property
    def is_configured(self) -> bool:
        """Check if the Anthropic API is configured."""
        return self._client is not None or self.settings.ai_configured

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self.settings.ai_configured:
                raise AIServiceNotConfiguredError("ANTHROPIC_API_KEY is not configured")
            self._client = anthropic.AsyncAnthropic(api_key=self.settings.anthropic_api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 4096,
        images: list[ImageInput] | None = None,
    ) -> str:
        """Generate a text response from the model."""
        content: list[dict[str, Any]] = [image.to_content_block() for image in images or []]
        content.append({"type": "text", "text": prompt})

        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": content}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        logger.info(
            f"Calling {self.model} (prompt {len(prompt)} chars, {len(images or [])} images)"
        )
        try:
            message = await self.client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise AIResponseError(f"AI request failed: {e}") from e

        text = next((block.text for block in message.content if block.type == "text"), None)
        if not text:
            raise AIResponseError("No text content in AI response")
        return text

    async def generate_json(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 4096,
        images: list[ImageInput] | None = None,
    ) -> Any:
        """Generate a structured JSON response from the model."""
        result = await self.generate(
            prompt=prompt,
            system_prompt=system_prompt,
            max_tokens=max_tokens,
            images=images,
        )
        try:
            return parse_json_response(result)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse AI response as JSON: {e}")
            logger.warning(f"Raw response: {result[:500]}")
            raise AIResponseError("Failed to parse AI response") from e
