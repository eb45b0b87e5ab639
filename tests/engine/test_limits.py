"""
Unit Tests for Smart Limit Derivation
"""

import pytest

from quizmaster.core.models import ProgressionState, QuizConfig, QuizMode
from quizmaster.engine.limits import apply_smart_limits, available_count, derive_smart_limits


class TestDeriveSmartLimits:
    """Tests for derive_smart_limits / available_count."""

    def test_derive_when_large_bank_then_capped_at_25(self):
        assert derive_smart_limits(100, QuizMode.SERIAL, ProgressionState()) == (25, 15)

    def test_derive_when_serial_near_end_then_remaining(self):
        """(100 - 90) questions remain -> 10 questions, 6 minutes."""
        state = ProgressionState(next_serial_index=90)

        assert derive_smart_limits(100, QuizMode.SERIAL, state) == (10, 6)

    def test_derive_when_random_limited_then_counts_unused(self):
        state = ProgressionState(used_random_indices=frozenset(range(36)))

        assert derive_smart_limits(40, QuizMode.RANDOM_LIMITED, state) == (4, 2)

    def test_derive_when_remainder_zero_then_full_bank(self):
        """A pending wrap-around counts the whole bank as available."""
        state = ProgressionState(next_serial_index=12)

        assert available_count(12, QuizMode.SERIAL, state) == 12
        assert derive_smart_limits(12, QuizMode.SERIAL, state) == (12, 7)

    def test_derive_when_unlimited_then_ignores_progression(self):
        state = ProgressionState(next_serial_index=9, used_random_indices=frozenset(range(9)))

        assert derive_smart_limits(10, QuizMode.RANDOM_UNLIMITED, state) == (10, 6)

    def test_derive_when_single_question_then_one_minute(self):
        assert derive_smart_limits(1, QuizMode.SERIAL, ProgressionState()) == (1, 1)

    def test_derive_when_empty_bank_then_raises(self):
        with pytest.raises(ValueError):
            derive_smart_limits(0, QuizMode.SERIAL, ProgressionState())


class TestApplySmartLimits:
    """Tests for apply_smart_limits."""

    def test_apply_when_empty_bank_then_defaults_and_progress_reset(self):
        config = QuizConfig(time_minutes=3, question_limit=5, mode=QuizMode.RANDOM_LIMITED)
        state = ProgressionState(next_serial_index=4, used_random_indices=frozenset({1}))

        new_config, new_state = apply_smart_limits(config, 0, state)

        assert (new_config.question_limit, new_config.time_minutes) == (25, 15)
        assert new_config.mode is QuizMode.RANDOM_LIMITED
        assert new_state == ProgressionState()

    def test_apply_when_bank_then_other_settings_kept(self):
        config = QuizConfig(shuffle_options=False, mode=QuizMode.SERIAL)
        state = ProgressionState(next_serial_index=2)

        new_config, new_state = apply_smart_limits(config, 10, state)

        assert (new_config.question_limit, new_config.time_minutes) == (8, 5)
        assert new_config.shuffle_options is False
        assert new_state is state
