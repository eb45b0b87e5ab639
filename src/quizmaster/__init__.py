"""Top-level package for QuizMaster.

Provides subpackages:
- quizmaster.core – immutable models, backup schema validation, serialization
- quizmaster.bank – question-bank text parser
- quizmaster.engine – batch selection, scoring, labels, history merge, sessions
- quizmaster.ai – AI tutor explanations and chat
- quizmaster.cli – command-line front end
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text(encoding="utf-8")
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        from importlib.metadata import version as pkg_version
        return pkg_version("quizmaster")
    except Exception:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
