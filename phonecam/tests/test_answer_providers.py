"""
Answer Provider Tests.
Tests credential checks, candidate mapping and upstream errors for both backends.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from google.genai import errors as genai_errors

from phonecam.api_clients import (
    GeminiAnswerProvider,
    NO_ANSWER_AVAILABLE,
    OpenAIAnswerProvider,
    create_answer_provider,
)
from phonecam.core.config import AnswerBackend, ProviderConfig
from phonecam.core.errors import ConfigurationError, UpstreamError
from phonecam.core.models import Question

pytestmark = pytest.mark.asyncio


def openai_client(content="Paris is the capital of France.", choices=None):
    """Mock AsyncOpenAI whose completion returns one choice."""
    if choices is None:
        choices = [SimpleNamespace(message=SimpleNamespace(content=content))]
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=choices))
    return client


def gemini_client(text="Paris.", candidates=None):
    """Mock genai.Client whose generate_content returns one candidate."""
    if candidates is None:
        part = SimpleNamespace(text=text)
        candidates = [SimpleNamespace(content=SimpleNamespace(parts=[part]))]
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=SimpleNamespace(candidates=candidates))
    return client


@pytest.fixture
def question():
    return Question(text="What is the capital of France?")


class TestMissingCredential:
    """No network attempt without a credential."""

    @pytest.mark.parametrize("credential", ["", "   "])
    async def test_openai_raises_before_request(self, question, credential):
        client = openai_client()
        provider = OpenAIAnswerProvider(credential, client=client)

        with pytest.raises(ConfigurationError):
            await provider.answer(question)

        assert client.chat.completions.create.await_count == 0

    async def test_gemini_raises_before_request(self, question):
        client = gemini_client()
        provider = GeminiAnswerProvider("", client=client)

        with pytest.raises(ConfigurationError):
            await provider.answer(question)

        assert client.aio.models.generate_content.await_count == 0

    async def test_no_sdk_client_created_without_key(self, question):
        provider = OpenAIAnswerProvider("")
        with pytest.raises(ConfigurationError):
            await provider.answer(question)
        assert provider._client is None


class TestOpenAI:
    """Test OpenAI request and response mapping."""

    async def test_first_choice_becomes_answer(self, question):
        client = openai_client(content="  Paris.  ")
        provider = OpenAIAnswerProvider("sk-test", client=client)

        answer = await provider.answer(question)

        assert answer.answer_text == "Paris."
        assert answer.question == question
        assert answer.provider == "openai"
        client.chat.completions.create.assert_awaited_once()

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["messages"][-1] == {"role": "user", "content": question.text}
        assert kwargs["max_tokens"] == 300

    async def test_no_choices_gives_placeholder(self, question):
        provider = OpenAIAnswerProvider("sk-test", client=openai_client(choices=[]))
        answer = await provider.answer(question)
        assert answer.answer_text == NO_ANSWER_AVAILABLE

    async def test_empty_content_gives_placeholder(self, question):
        provider = OpenAIAnswerProvider("sk-test", client=openai_client(content=None))
        answer = await provider.answer(question)
        assert answer.answer_text == NO_ANSWER_AVAILABLE

    async def test_http_error_carries_status(self, question):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        error = openai.APIStatusError(
            "Unauthorized",
            response=httpx.Response(401, request=request),
            body=None,
        )
        client = openai_client()
        client.chat.completions.create = AsyncMock(side_effect=error)
        provider = OpenAIAnswerProvider("sk-bad", client=client)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.answer(question)

        assert exc_info.value.status_code == 401
        assert exc_info.value.provider == "openai"
        assert client.chat.completions.create.await_count == 1

    async def test_connection_error_has_no_status(self, question):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client = openai_client()
        client.chat.completions.create = AsyncMock(side_effect=openai.APIConnectionError(request=request))
        provider = OpenAIAnswerProvider("sk-test", client=client)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.answer(question)
        assert exc_info.value.status_code is None


class TestGemini:
    """Test Gemini request and response mapping."""

    async def test_first_candidate_becomes_answer(self, question):
        client = gemini_client(text="Paris is the capital.\n")
        provider = GeminiAnswerProvider("g-test", client=client)

        answer = await provider.answer(question)

        assert answer.answer_text == "Paris is the capital."
        assert answer.provider == "gemini"
        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert question.text in kwargs["contents"]
        assert kwargs["model"] == GeminiAnswerProvider.DEFAULT_MODEL

    async def test_no_candidates_gives_placeholder(self, question):
        provider = GeminiAnswerProvider("g-test", client=gemini_client(candidates=[]))
        answer = await provider.answer(question)
        assert answer.answer_text == NO_ANSWER_AVAILABLE

    async def test_candidate_without_content_gives_placeholder(self, question):
        client = gemini_client(candidates=[SimpleNamespace(content=None)])
        answer = await GeminiAnswerProvider("g-test", client=client).answer(question)
        assert answer.answer_text == NO_ANSWER_AVAILABLE

    async def test_api_error_carries_status(self, question):
        error = genai_errors.ClientError(
            429,
            {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}},
        )
        client = gemini_client()
        client.aio.models.generate_content = AsyncMock(side_effect=error)

        with pytest.raises(UpstreamError) as exc_info:
            await GeminiAnswerProvider("g-test", client=client).answer(question)

        assert exc_info.value.status_code == 429
        assert exc_info.value.provider == "gemini"


class TestSelection:
    """Backend chosen once from ProviderConfig."""

    async def test_openai_default(self):
        provider = create_answer_provider(ProviderConfig(credential="k"))
        assert isinstance(provider, OpenAIAnswerProvider)

    async def test_gemini_selected(self):
        config = ProviderConfig(answer_backend=AnswerBackend.GEMINI, credential="k", gemini_model="gemini-x")
        provider = create_answer_provider(config)
        assert isinstance(provider, GeminiAnswerProvider)
        assert provider.model == "gemini-x"
