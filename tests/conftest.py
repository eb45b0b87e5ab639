import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import quizmaster
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from quizmaster.core.models import ExamResult, ExamStats, QuestionRecord, OPTION_KEYS


def build_question(index: int, correct_key: str = "ক") -> QuestionRecord:
    return QuestionRecord(
        text=f"Question {index}?",
        options={key: f"Q{index} option {n}" for n, key in enumerate(OPTION_KEYS, start=1)},
        correct_key=correct_key,
        original_index=index,
    )


def build_bank_text(count: int, title: str | None = None) -> str:
    blocks = [
        f"Question {i}? | Q{i} option 1 | Q{i} option 2 | Q{i} option 3 | Q{i} option 4 | ক ###"
        for i in range(count)
    ]
    header = f"***{title}***\n" if title else ""
    return header + "\n".join(blocks)


def build_result(
    result_id: int,
    timestamp: int | None = None,
    parent_exam_id: int | None = None,
    choices: tuple = ("ক", "খ", None),
    negative_mark: float = 0.25,
    exam_name: str | None = None,
) -> ExamResult:
    questions = tuple(build_question(i) for i in range(len(choices)))
    correct = sum(1 for c in choices if c == "ক")
    skipped = sum(1 for c in choices if c is None)
    return ExamResult(
        id=result_id,
        timestamp=result_id if timestamp is None else timestamp,
        questions=questions,
        user_choices=choices,
        stats=ExamStats(correct, len(choices) - correct - skipped, skipped, len(choices)),
        negative_mark=negative_mark,
        parent_exam_id=parent_exam_id,
        exam_name=exam_name,
    )


# Common test fixtures
@pytest.fixture
def make_question():
    """Factory for a question whose options read 'Q<i> option <n>'."""
    return build_question


@pytest.fixture
def make_result():
    """Factory for a 3-question result (1 correct, 1 wrong, 1 skipped by default)."""
    return build_result


@pytest.fixture
def bank():
    """Ten parsed-looking questions, all answered by ক."""
    return tuple(build_question(i) for i in range(10))


@pytest.fixture
def raw_bank() -> str:
    """Raw text for a titled 30-question bank."""
    return build_bank_text(30, title="Physics Mock")


@pytest.fixture
def bank_file(tmp_path: Path, raw_bank: str) -> Path:
    path = tmp_path / "questions.txt"
    path.write_text(raw_bank, encoding="utf-8")
    return path


@pytest.fixture
def make_bank_text():
    """Factory for raw bank text with count questions answered by ক."""
    return build_bank_text
