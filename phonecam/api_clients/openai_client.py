"""
OpenAI answer backend (chat completions).
"""
import logging
from typing import Optional

from openai import APIError, APIStatusError, AsyncOpenAI

from ..core.errors import UpstreamError
from .base import AnswerProvider

logger = logging.getLogger(__name__)


class OpenAIAnswerProvider(AnswerProvider):
    """
    Answers questions via OpenAI chat completions.

    The SDK client is created on first use so a missing key never reaches
    the SDK.
    """

    name = "openai"

    DEFAULT_MODEL = "gpt-4o-mini"
    SYSTEM_PROMPT = (
        "You are a helpful assistant that provides clear, concise answers to questions. "
        "Keep responses under 200 words when possible."
    )
    MAX_TOKENS = 300
    TEMPERATURE = 0.7

    def __init__(self, credential: str, model: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        super().__init__(credential)
        self.model = model or self.DEFAULT_MODEL
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.credential)
        return self._client

    async def _complete(self, prompt: str) -> Optional[str]:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
            )
        except APIStatusError as e:
            logger.error(f"OpenAI API error: {e.status_code}")
            raise UpstreamError(f"OpenAI API error: {e.status_code}", provider=self.name, status_code=e.status_code)
        except APIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise UpstreamError(f"OpenAI request failed: {e}", provider=self.name)

        choices = response.choices or []
        if not choices or choices[0].message is None:
            return None
        return choices[0].message.content
