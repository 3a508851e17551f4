"""
Answer backends.
- OpenAIAnswerProvider: chat completions
- GeminiAnswerProvider: generate_content
"""
from .base import AnswerProvider, NO_ANSWER_AVAILABLE
from .openai_client import OpenAIAnswerProvider
from .gemini_client import GeminiAnswerProvider
from .factory import create_answer_provider

__all__ = [
    "AnswerProvider",
    "NO_ANSWER_AVAILABLE",
    "OpenAIAnswerProvider",
    "GeminiAnswerProvider",
    "create_answer_provider",
]
