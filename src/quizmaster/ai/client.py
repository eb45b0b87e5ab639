"""
Module: ai.client

Purpose:
    The text generator behind the tutor. The chat layer only needs an async
    callable taking a system prompt and a conversation and returning text;
    GeminiGenerator is the concrete one, built on google-genai.

Key Classes:
    - ChatTurn: One message in a conversation
    - TextGenerator: Protocol for generators
    - GeminiGenerator: google-genai implementation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional, Protocol, Sequence

from google import genai
from google.genai import types as gx

from quizmaster.engine.errors import AIUnavailableError

from .config import AIConfig

logger = logging.getLogger(__name__)

Role = Literal["user", "model"]


@dataclass(frozen=True)
class ChatTurn:
    role: Role
    text: str


class TextGenerator(Protocol):
    async def __call__(self, system_prompt: str, turns: Sequence[ChatTurn]) -> str:
        ...


def _to_contents(turns: Sequence[ChatTurn]) -> list[dict]:
    return [
        {"role": "model" if turn.role == "model" else "user", "parts": [{"text": turn.text}]}
        for turn in turns
    ]


class GeminiGenerator:
    """
    Generates tutor replies with Gemini.

    Example:
        >>> generate = GeminiGenerator(AIConfig(provider="gemini", api_key="..."))
        >>> text = await generate(system_prompt, [ChatTurn("user", "Explain")])
    """

    def __init__(
        self,
        config: AIConfig,
        temperature: float = 0.2,
        client: Optional[genai.Client] = None,
    ) -> None:
        if config.provider != "gemini":
            raise ValueError(f"Unsupported AI provider: {config.provider!r}")
        self.config = config
        self.temperature = temperature
        self._client = client or genai.Client(api_key=config.api_key)

    async def __call__(self, system_prompt: str, turns: Sequence[ChatTurn]) -> str:
        try:
            resp = await self._client.aio.models.generate_content(
                model=self.config.model,
                contents=_to_contents(turns),
                config=gx.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            logger.warning(f"Gemini request failed: {e}")
            raise AIUnavailableError(f"AI request failed: {e}") from e

        text = (resp.text or "").strip()
        if not text:
            raise AIUnavailableError("AI returned an empty response")
        return text
