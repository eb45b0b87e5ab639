"""
Unit Tests for Batch Selection

Tests for select_batch across the three selection modes.
"""

import logging
import random

import pytest

from quizmaster.core.models import ProgressionState, QuizMode
from quizmaster.engine.errors import EmptyBankError, ExhaustionReset
from quizmaster.engine.selection.selector import select_batch


class TestSerialSelection:
    """Tests for SERIAL mode."""

    def test_select_when_fresh_then_first_k_in_order(self, bank):
        selection = select_batch(bank, QuizMode.SERIAL, 4, ProgressionState())

        assert [q.original_index for q in selection.questions] == [0, 1, 2, 3]
        assert selection.progression.next_serial_index == 4
        assert not selection.was_reset

    def test_select_when_near_end_then_batch_truncated(self, bank):
        """A batch never runs past the end of the bank."""
        selection = select_batch(bank, QuizMode.SERIAL, 4, ProgressionState(next_serial_index=8))

        assert [q.original_index for q in selection.questions] == [8, 9]
        assert selection.progression.next_serial_index == 10

    def test_select_when_exhausted_then_wraps_with_notice(self, bank, caplog):
        with caplog.at_level(logging.INFO, logger="quizmaster.engine.selection.selector"):
            selection = select_batch(bank, QuizMode.SERIAL, 3, ProgressionState(next_serial_index=10))

        assert [q.original_index for q in selection.questions] == [0, 1, 2]
        assert selection.progression.next_serial_index == 3
        assert selection.reset == ExhaustionReset(QuizMode.SERIAL)
        assert "exhausted" in caplog.text

    def test_select_when_limit_exceeds_bank_then_whole_bank(self, bank):
        selection = select_batch(bank, QuizMode.SERIAL, 50, ProgressionState())

        assert len(selection.questions) == len(bank)

    @pytest.mark.parametrize("limit", ["", "abc", 0, -3, None])
    def test_select_when_junk_limit_then_one_question(self, bank, limit):
        selection = select_batch(bank, QuizMode.SERIAL, limit, ProgressionState())

        assert len(selection.questions) == 1

    def test_select_when_serial_then_random_set_untouched(self, bank):
        state = ProgressionState(next_serial_index=0, used_random_indices=frozenset({5}))

        selection = select_batch(bank, QuizMode.SERIAL, 2, state)

        assert selection.progression.used_random_indices == frozenset({5})


class TestRandomLimitedSelection:
    """Tests for RANDOM_LIMITED mode."""

    def test_select_when_repeated_then_no_repeats_until_covered(self, bank):
        """Every question is served once before any repeats."""
        rng = random.Random(7)
        state = ProgressionState()
        seen = []
        for _ in range(3):
            selection = select_batch(bank, QuizMode.RANDOM_LIMITED, 3, state, rng=rng)
            seen.extend(q.original_index for q in selection.questions)
            state = selection.progression
            assert not selection.was_reset

        assert len(seen) == len(set(seen)) == 9

        last = select_batch(bank, QuizMode.RANDOM_LIMITED, 3, state, rng=rng)

        assert len(last.questions) == 1
        assert last.questions[0].original_index not in seen
        assert last.progression.used_random_indices == frozenset(range(10))

    def test_select_when_all_used_then_resets_pool(self, bank):
        state = ProgressionState(used_random_indices=frozenset(range(10)))

        selection = select_batch(bank, QuizMode.RANDOM_LIMITED, 4, state, rng=random.Random(1))

        assert selection.reset == ExhaustionReset(QuizMode.RANDOM_LIMITED)
        assert len(selection.questions) == 4
        assert selection.progression.used_random_indices == {q.original_index for q in selection.questions}

    def test_select_when_same_seed_then_same_batch(self, bank):
        first = select_batch(bank, QuizMode.RANDOM_LIMITED, 5, ProgressionState(), rng=random.Random(3))
        second = select_batch(bank, QuizMode.RANDOM_LIMITED, 5, ProgressionState(), rng=random.Random(3))

        assert first.questions == second.questions


class TestRandomUnlimitedSelection:
    """Tests for RANDOM_UNLIMITED mode."""

    def test_select_when_unlimited_then_progression_unchanged(self, bank):
        state = ProgressionState(next_serial_index=4, used_random_indices=frozenset({1}))

        selection = select_batch(bank, QuizMode.RANDOM_UNLIMITED, 5, state, rng=random.Random(2))

        assert selection.progression is state
        assert len({q.original_index for q in selection.questions}) == 5
        assert not selection.was_reset


class TestEmptyBank:
    """Tests for selection failures."""

    @pytest.mark.parametrize("mode", list(QuizMode))
    def test_select_when_empty_bank_then_raises(self, mode):
        with pytest.raises(EmptyBankError):
            select_batch((), mode, 5, ProgressionState())
