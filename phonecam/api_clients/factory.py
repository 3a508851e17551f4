"""
Answer provider selection.
"""
from ..core.config import AnswerBackend, ProviderConfig
from .base import AnswerProvider
from .gemini_client import GeminiAnswerProvider
from .openai_client import OpenAIAnswerProvider


def create_answer_provider(config: ProviderConfig) -> AnswerProvider:
    """Pick the answer backend once, at configuration time."""
    if config.answer_backend == AnswerBackend.GEMINI:
        return GeminiAnswerProvider(config.credential, model=config.gemini_model)
    return OpenAIAnswerProvider(config.credential, model=config.openai_model)
