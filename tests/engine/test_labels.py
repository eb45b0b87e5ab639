"""
Unit Tests for Exam Labels

Labels are a pure function of the sorted history, so every test states the
history and checks the labels derived from it.
"""

import itertools

from quizmaster.engine.labels import (
    UNLINKED_RETAKE_LABEL,
    assign_labels,
    chronological,
    exam_title,
    pending_label,
)


class TestAssignLabels:
    """Tests for assign_labels."""

    def test_assign_when_root_and_retakes_then_dotted(self, make_result):
        history = [
            make_result(100),
            make_result(200, parent_exam_id=100),
            make_result(300, parent_exam_id=100),
        ]

        assert assign_labels(history) == {100: "1", 200: "1.1", 300: "1.2"}

    def test_assign_when_second_root_between_retakes_then_retakes_keep_numbers(self, make_result):
        """A root taken between two retakes is 2; the retakes stay 1.1 and 1.2."""
        records = [
            make_result(100),
            make_result(200, parent_exam_id=100),
            make_result(250),
            make_result(300, parent_exam_id=100),
        ]
        expected = {100: "1", 200: "1.1", 250: "2", 300: "1.2"}

        for order in itertools.permutations(records):
            assert assign_labels(order) == expected

    def test_assign_when_parent_missing_then_unlinked(self, make_result):
        history = [make_result(100), make_result(200, parent_exam_id=999)]

        labels = assign_labels(history)

        assert labels == {100: "1", 200: UNLINKED_RETAKE_LABEL}

    def test_assign_when_parent_is_retake_then_unlinked_and_no_number_used(self, make_result):
        history = [
            make_result(100),
            make_result(200, parent_exam_id=100),
            make_result(300, parent_exam_id=200),
            make_result(400),
        ]

        assert assign_labels(history) == {100: "1", 200: "1.1", 300: UNLINKED_RETAKE_LABEL, 400: "2"}

    def test_assign_when_retake_older_than_parent_then_unlinked(self, make_result):
        """The parent must be encountered first in timestamp order."""
        history = [make_result(100, timestamp=50, parent_exam_id=200), make_result(200, timestamp=60)]

        assert assign_labels(history) == {100: UNLINKED_RETAKE_LABEL, 200: "1"}

    def test_assign_when_equal_timestamps_then_id_breaks_tie(self, make_result):
        history = [make_result(7, timestamp=10), make_result(3, timestamp=10)]

        assert assign_labels(history) == {3: "1", 7: "2"}

    def test_assign_when_empty_then_empty(self):
        assert assign_labels([]) == {}


class TestPendingLabel:
    """Tests for pending_label and exam_title."""

    def test_pending_when_empty_history_then_one(self):
        assert pending_label([]) == "1"

    def test_pending_when_new_root_then_next_integer(self, make_result):
        history = [make_result(1), make_result(2, parent_exam_id=1), make_result(3)]

        assert pending_label(history) == "3"

    def test_pending_when_retake_of_known_root_then_next_minor(self, make_result):
        history = [make_result(1), make_result(2, parent_exam_id=1)]

        assert pending_label(history, parent_exam_id=1) == "1.2"

    def test_pending_when_unknown_parent_then_unlinked(self, make_result):
        assert pending_label([make_result(1)], parent_exam_id=42) == UNLINKED_RETAKE_LABEL

    def test_exam_title_when_label_then_prefixed(self):
        assert exam_title("2.1") == "Exam 2.1"
        assert exam_title(UNLINKED_RETAKE_LABEL) == "Retake"

    def test_chronological_when_unsorted_then_sorted(self, make_result):
        history = [make_result(3), make_result(1), make_result(2)]

        assert [r.id for r in chronological(history)] == [1, 2, 3]
