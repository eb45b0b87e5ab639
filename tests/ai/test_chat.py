"""
Unit Tests for the Tutor Chat

Coroutines are driven with asyncio.run() against a fake generator, so no
network access is needed.
"""

import asyncio

import pytest

from quizmaster.ai.chat import ChatMessage, TutorChat, chat_key
from quizmaster.ai.prompts import INITIAL_REQUEST, build_system_prompt
from quizmaster.engine.errors import AIUnavailableError


class FakeGenerator:
    """Records every call and answers with numbered replies."""

    def __init__(self, delay: float = 0, error: Exception | None = None, reply: str | None = None):
        self.delay = delay
        self.error = error
        self.reply = reply
        self.calls = []

    async def __call__(self, system_prompt, turns):
        self.calls.append((system_prompt, list(turns)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.reply is not None:
            return self.reply
        return f"reply {len(self.calls)}"


class TestExplain:
    """Tests for TutorChat.explain."""

    def test_explain_when_first_call_then_initial_message(self, make_result):
        generator = FakeGenerator()
        chat = TutorChat(generator)
        result = make_result(1)

        messages = asyncio.run(chat.explain(result, 1))

        assert messages == [ChatMessage(role="model", text="reply 1", is_initial=True)]
        prompt, turns = generator.calls[0]
        assert prompt == build_system_prompt(result.questions[1], "খ", "English")
        assert [t.text for t in turns] == [INITIAL_REQUEST]

    def test_explain_when_cached_then_no_new_request(self, make_result):
        generator = FakeGenerator()
        chat = TutorChat(generator)
        result = make_result(1)

        async def run():
            await chat.explain(result, 0)
            return await chat.explain(result, 0)

        messages = asyncio.run(run())

        assert len(generator.calls) == 1
        assert messages[0].text == "reply 1"

    def test_explain_when_concurrent_same_key_then_single_request(self, make_result):
        """Concurrent callers share one in-flight request."""
        generator = FakeGenerator(delay=0.01)
        chat = TutorChat(generator)
        result = make_result(1)

        async def run():
            return await asyncio.gather(*(chat.explain(result, 0) for _ in range(5)))

        transcripts = asyncio.run(run())

        assert len(generator.calls) == 1
        assert all(t == transcripts[0] for t in transcripts)

    def test_explain_when_different_questions_then_separate_transcripts(self, make_result):
        generator = FakeGenerator()
        chat = TutorChat(generator)
        result = make_result(1)

        async def run():
            await chat.explain(result, 0)
            await chat.explain(result, 2)

        asyncio.run(run())

        assert len(generator.calls) == 2
        assert chat.transcript(1, 0)[0].text == "reply 1"
        assert chat.transcript(1, 2)[0].text == "reply 2"
        assert chat.transcript(1, 1) == []

    def test_explain_when_generator_fails_then_error_inline(self, make_result):
        chat = TutorChat(FakeGenerator(error=AIUnavailableError("quota exceeded")))

        messages = asyncio.run(chat.explain(make_result(1), 0))

        assert len(messages) == 1
        assert messages[0].is_error
        assert "quota exceeded" in messages[0].text

    def test_explain_when_generator_raises_unexpected_then_error_inline(self, make_result):
        """Any generator exception is turned into a transcript entry."""
        chat = TutorChat(FakeGenerator(error=RuntimeError("connection reset")))

        messages = asyncio.run(chat.explain(make_result(1), 0))

        assert messages[0].is_error
        assert "connection reset" in messages[0].text
        assert chat._pending == {}

    def test_send_when_generator_raises_unexpected_then_error_inline(self, make_result):
        generator = FakeGenerator()
        chat = TutorChat(generator)
        result = make_result(1)

        async def run():
            await chat.explain(result, 0)
            generator.error = ConnectionError("socket closed")
            return await chat.send(result, 0, "more?")

        messages = asyncio.run(run())

        assert [m.is_error for m in messages] == [False, False, True]

    def test_explain_when_previous_failure_then_retried(self, make_result):
        """An error-only transcript is not reused as a cached explanation."""
        generator = FakeGenerator(error=AIUnavailableError("down"))
        chat = TutorChat(generator)
        result = make_result(1)

        async def run():
            await chat.explain(result, 0)
            generator.error = None
            return await chat.explain(result, 0)

        messages = asyncio.run(run())

        assert len(generator.calls) == 2
        assert not messages[0].is_error

    def test_explain_when_timeout_then_error_inline(self, make_result):
        chat = TutorChat(FakeGenerator(delay=1), timeout_seconds=0.01)

        messages = asyncio.run(chat.explain(make_result(1), 0))

        assert messages[0].is_error
        assert "too long" in messages[0].text

    def test_explain_when_empty_reply_then_error_inline(self, make_result):
        chat = TutorChat(FakeGenerator(reply="   "))

        messages = asyncio.run(chat.explain(make_result(1), 0))

        assert messages[0].is_error

    def test_explain_when_force_reset_then_new_request(self, make_result):
        generator = FakeGenerator()
        chat = TutorChat(generator)
        result = make_result(1)

        async def run():
            await chat.explain(result, 0)
            await chat.send(result, 0, "and then?")
            return await chat.explain(result, 0, force_reset=True)

        messages = asyncio.run(run())

        assert [m.text for m in messages] == ["reply 3"]

    def test_explain_when_index_out_of_range_then_raises(self, make_result):
        chat = TutorChat(FakeGenerator())

        with pytest.raises(IndexError):
            asyncio.run(chat.explain(make_result(1), 3))


class TestSend:
    """Tests for TutorChat.send."""

    def test_send_when_after_explain_then_full_history_sent(self, make_result):
        generator = FakeGenerator()
        chat = TutorChat(generator)
        result = make_result(1)

        async def run():
            await chat.explain(result, 0)
            return await chat.send(result, 0, "Why not খ?")

        messages = asyncio.run(run())

        assert [(m.role, m.text) for m in messages] == [
            ("model", "reply 1"),
            ("user", "Why not খ?"),
            ("model", "reply 2"),
        ]
        _, turns = generator.calls[1]
        assert [(t.role, t.text) for t in turns] == [
            ("user", INITIAL_REQUEST),
            ("model", "reply 1"),
            ("user", "Why not খ?"),
        ]

    def test_send_when_concurrent_then_turns_not_interleaved(self, make_result):
        chat = TutorChat(FakeGenerator(delay=0.01))
        result = make_result(1)

        async def run():
            await chat.explain(result, 0)
            await asyncio.gather(chat.send(result, 0, "first"), chat.send(result, 0, "second"))

        asyncio.run(run())

        roles = [m.role for m in chat.transcript(1, 0)]
        assert roles == ["model", "user", "model", "user", "model"]

    def test_send_when_failure_then_error_kept_out_of_later_turns(self, make_result):
        generator = FakeGenerator()
        chat = TutorChat(generator)
        result = make_result(1)

        async def run():
            await chat.explain(result, 0)
            generator.error = AIUnavailableError("flaky")
            await chat.send(result, 0, "one")
            generator.error = None
            return await chat.send(result, 0, "two")

        messages = asyncio.run(run())

        assert [m.is_error for m in messages] == [False, False, True, False, False]
        _, turns = generator.calls[-1]
        assert all("flaky" not in t.text for t in turns)

    def test_send_when_blank_text_then_ignored(self, make_result):
        generator = FakeGenerator()
        chat = TutorChat(generator)

        messages = asyncio.run(chat.send(make_result(1), 0, "   "))

        assert messages == []
        assert generator.calls == []

    def test_chat_key_when_called_then_id_dash_index(self):
        assert chat_key(1767225600000, 4) == "1767225600000-4"


class TestPrompt:
    """Tests for build_system_prompt."""

    def test_prompt_when_skipped_then_says_skipped(self, make_question):
        prompt = build_system_prompt(make_question(0), None, "Bengali")

        assert "Question 0?" in prompt
        assert 'User Answer: "None" (Skipped)' in prompt
        assert "LANGUAGE: Bengali." in prompt
        assert "Q0 option 1" in prompt
