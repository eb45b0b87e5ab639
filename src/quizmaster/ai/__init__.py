"""
AI Package

Tutor explanations for completed exam questions: provider settings, the
Gemini-backed text generator and the cached per-question chat.
"""

from .config import AIConfig, AISettingsStore, get_app_data_dir
from .client import ChatTurn, GeminiGenerator, TextGenerator
from .chat import ChatMessage, TutorChat, chat_key
from .prompts import INITIAL_REQUEST, build_system_prompt

__all__ = [
    "AIConfig",
    "AISettingsStore",
    "get_app_data_dir",
    "ChatTurn",
    "GeminiGenerator",
    "TextGenerator",
    "ChatMessage",
    "TutorChat",
    "chat_key",
    "INITIAL_REQUEST",
    "build_system_prompt",
]
