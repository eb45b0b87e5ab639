"""
Module: ai.chat

Purpose:
    Per-question tutor conversations for completed exams.

    Transcripts are cached by (result id, question position). explain() is
    single-flight per key: concurrent callers for the same question share
    one in-flight request. send() holds a per-key lock so user and model
    turns of one conversation never interleave.

    Generator failures never escape this module. They are appended to the
    transcript as an error message, and an error-only transcript is not
    treated as a cached explanation.

Key Classes:
    - ChatMessage: One transcript entry
    - TutorChat: Transcript cache and request coordination

Dependencies:
    - asyncio (std)
    - .client.TextGenerator
    - .prompts

Used By:
    - quizmaster.cli (explain command)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Dict, Literal, Optional, Sequence

from quizmaster.core.models.results import ExamResult
from quizmaster.engine.errors import AIUnavailableError

from .client import ChatTurn, TextGenerator
from .config import DEFAULT_LANGUAGE, DEFAULT_TIMEOUT_SECONDS
from .prompts import INITIAL_REQUEST, build_system_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatMessage:
    """
    One entry of a tutor transcript.

    Attributes:
        role: "user" or "model"
        text: Message body (error description when is_error)
        is_initial: The first explanation of the question
        is_error: A failed request rather than a model reply
    """

    role: Literal["user", "model"]
    text: str
    is_initial: bool = False
    is_error: bool = False


def chat_key(result_id: int, question_index: int) -> str:
    return f"{result_id}-{question_index}"


class TutorChat:
    """
    Coordinates tutor requests and caches their transcripts.

    Example:
        >>> chat = TutorChat(GeminiGenerator(config))
        >>> messages = await chat.explain(result, 0)
        >>> messages = await chat.send(result, 0, "Why not option খ?")
    """

    def __init__(
        self,
        generator: TextGenerator,
        language: str = DEFAULT_LANGUAGE,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.generator = generator
        self.language = language
        self.timeout_seconds = timeout_seconds
        self._transcripts: Dict[str, list[ChatMessage]] = {}
        self._pending: Dict[str, asyncio.Task] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    # ─────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────

    def transcript(self, result_id: int, question_index: int) -> list[ChatMessage]:
        """Cached transcript for a question (empty if never explained)."""
        return list(self._transcripts.get(chat_key(result_id, question_index), ()))

    def clear(self) -> None:
        self._transcripts.clear()

    async def explain(
        self,
        result: ExamResult,
        question_index: int,
        force_reset: bool = False,
    ) -> list[ChatMessage]:
        """
        Initial explanation of one question of a result.

        Args:
            result: Completed exam
            question_index: Position of the question within the result
            force_reset: Discard any cached transcript and ask again

        Returns:
            Copy of the transcript for this question

        Raises:
            IndexError: If question_index is outside the result
        """
        self._check_index(result, question_index)
        key = chat_key(result.id, question_index)

        pending = self._pending.get(key)
        if pending is not None:
            logger.debug(f"Joining in-flight explanation for {key}")
            return list(await asyncio.shield(pending))

        cached = self._transcripts.get(key)
        if cached and not force_reset and not _error_only(cached):
            return list(cached)

        task = asyncio.ensure_future(self._explain(result, question_index, key))
        self._pending[key] = task
        return list(await asyncio.shield(task))

    async def send(self, result: ExamResult, question_index: int, text: str) -> list[ChatMessage]:
        """
        Follow-up question in an existing conversation.

        Blank text is ignored. Returns a copy of the updated transcript.
        """
        self._check_index(result, question_index)
        key = chat_key(result.id, question_index)
        if not text.strip():
            return self.transcript(result.id, question_index)

        pending = self._pending.get(key)
        if pending is not None:
            await asyncio.shield(pending)

        async with self._lock(key):
            messages = self._transcripts.setdefault(key, [])
            messages.append(ChatMessage(role="user", text=text))
            reply = await self._generate(result, question_index, _turns(messages))
            messages.append(reply)
            return list(messages)

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────

    def _lock(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @staticmethod
    def _check_index(result: ExamResult, question_index: int) -> None:
        if not 0 <= question_index < len(result.questions):
            raise IndexError(
                f"Question {question_index} out of range for exam {result.id} "
                f"({len(result.questions)} questions)"
            )

    async def _explain(self, result: ExamResult, question_index: int, key: str) -> list[ChatMessage]:
        try:
            async with self._lock(key):
                reply = await self._generate(result, question_index, [])
                reply = replace(reply, is_initial=True)
                self._transcripts[key] = [reply]
                return list(self._transcripts[key])
        finally:
            self._pending.pop(key, None)

    async def _generate(
        self,
        result: ExamResult,
        question_index: int,
        history: Sequence[ChatTurn],
    ) -> ChatMessage:
        question = result.questions[question_index]
        choice: Optional[str] = result.user_choices[question_index]
        prompt = build_system_prompt(question, choice, self.language)
        turns = [ChatTurn("user", INITIAL_REQUEST), *history]
        try:
            text = await asyncio.wait_for(self.generator(prompt, turns), self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Tutor request timed out after {self.timeout_seconds}s")
            return ChatMessage(role="model", text="The tutor took too long to answer. Please try again.", is_error=True)
        except AIUnavailableError as e:
            logger.warning(f"Tutor request failed: {e}")
            return ChatMessage(role="model", text=f"Error: {e}", is_error=True)
        except Exception as e:
            logger.warning(f"Tutor generator raised {type(e).__name__}: {e}")
            return ChatMessage(role="model", text=f"Error: {e}", is_error=True)
        if not text or not text.strip():
            logger.warning("Tutor returned an empty response")
            return ChatMessage(role="model", text="Error: the tutor returned an empty response.", is_error=True)
        return ChatMessage(role="model", text=text)


def _error_only(messages: Sequence[ChatMessage]) -> bool:
    return all(m.is_error for m in messages)


def _turns(messages: Sequence[ChatMessage]) -> list[ChatTurn]:
    """Conversation as sent to the model; failed requests are left out."""
    return [ChatTurn(m.role, m.text) for m in messages if not m.is_error]
