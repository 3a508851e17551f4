"""
Answer provider interface.

A provider turns one Question into one Answer with a single backend
request. Credential checks happen before any network attempt.
"""
import time
import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..core.errors import ConfigurationError
from ..core.models import Answer, Question

logger = logging.getLogger(__name__)

NO_ANSWER_AVAILABLE = "No answer available"

CONCISE_INSTRUCTION = "Please provide a clear, concise answer to this question (under 200 words when possible)"


class AnswerProvider(ABC):
    """Base class for question answering backends."""

    name = "base"

    def __init__(self, credential: str):
        self.credential = (credential or "").strip()

    @property
    def is_configured(self) -> bool:
        return bool(self.credential)

    async def answer(self, question: Question) -> Answer:
        """
        Answer a question with one backend request.

        Args:
            question: The accepted question

        Returns:
            Answer whose text is the first candidate, or the placeholder

        Raises:
            ConfigurationError: no credential set (no request is made)
            UpstreamError: backend returned a non-success status
        """
        if not self.is_configured:
            raise ConfigurationError(f"{self.name}: API key not configured")

        start = time.perf_counter()
        text = await self._complete(self.build_prompt(question.text))
        latency_ms = (time.perf_counter() - start) * 1000

        answer_text = (text or "").strip() or NO_ANSWER_AVAILABLE
        logger.debug(f"{self.name} answered in {latency_ms:.0f}ms")
        return Answer(
            question=question,
            answer_text=answer_text,
            provider=self.name,
            latency_ms=latency_ms,
        )

    def build_prompt(self, question_text: str) -> str:
        return question_text

    @abstractmethod
    async def _complete(self, prompt: str) -> Optional[str]:
        """Issue one request and return the first candidate's text (None if absent)."""
