"""
Gemini answer backend.

Uses the google-genai SDK (unified SDK) async surface.
"""
import logging
from typing import Optional

from google import genai
from google.genai import errors, types

from ..core.errors import UpstreamError
from .base import AnswerProvider, CONCISE_INSTRUCTION

logger = logging.getLogger(__name__)


class GeminiAnswerProvider(AnswerProvider):
    """
    Answers questions via Gemini generate_content.

    Model: gemini-2.0-flash
    """

    name = "gemini"

    DEFAULT_MODEL = "gemini-2.0-flash"

    def __init__(self, credential: str, model: Optional[str] = None, client: Optional[genai.Client] = None):
        super().__init__(credential)
        self.model = model or self.DEFAULT_MODEL
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.credential)
        return self._client

    def build_prompt(self, question_text: str) -> str:
        return f"{CONCISE_INSTRUCTION}: {question_text}"

    async def _complete(self, prompt: str) -> Optional[str]:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=0.7,
                    top_k=40,
                    top_p=0.95,
                    max_output_tokens=300,
                ),
            )
        except errors.APIError as e:
            logger.error(f"Gemini API error: {e.code}")
            raise UpstreamError(f"Gemini API error: {e.code}", provider=self.name, status_code=e.code)
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise UpstreamError(f"Gemini request failed: {e}", provider=self.name)

        candidates = response.candidates or []
        if not candidates or candidates[0].content is None:
            return None
        parts = candidates[0].content.parts or []
        return "".join(part.text for part in parts if part.text) or None
