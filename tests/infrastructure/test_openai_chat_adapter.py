import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from support_rag.domain.errors import LLMError, LLMRateLimited, LLMServerError, LLMTimeout
from support_rag.domain.models import ChatMessage
from support_rag.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter

URL = "http://llm.local/v1/chat/completions"
MESSAGES = [ChatMessage(role="system", content="be nice"), ChatMessage(role="user", content="hi")]


class _FakeCompletions:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.kwargs: dict = {}

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def _adapter(completions: _FakeCompletions) -> OpenAIChatAdapter:
    adapter = OpenAIChatAdapter(base_url="http://llm.local/v1", api_key="k")
    adapter._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))  # type: ignore[assignment]
    return adapter


def _response(content=None, tool_calls=None, finish_reason="stop"):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=finish_reason)])


def _status_error(cls, status: int):
    request = httpx.Request("POST", URL)
    return cls("boom", response=httpx.Response(status, request=request), body=None)


def test_plain_completion_and_payload():
    completions = _FakeCompletions(_response(content="Hello!"))

    result = asyncio.run(
        _adapter(completions).complete(MESSAGES, "gpt-test", max_tokens=100, temperature=0.7)
    )

    assert result.content == "Hello!"
    assert result.tool_calls == ()
    assert result.finish_reason == "stop"
    assert completions.kwargs["model"] == "gpt-test"
    assert completions.kwargs["messages"] == [
        {"role": "system", "content": "be nice"},
        {"role": "user", "content": "hi"},
    ]
    assert completions.kwargs["max_tokens"] == 100
    assert "tools" not in completions.kwargs and "tool_choice" not in completions.kwargs


def test_tool_calls_are_parsed():
    call = SimpleNamespace(
        id="call_9",
        function=SimpleNamespace(name="create_ticket", arguments='{"ticket_category": "Billing"}'),
    )
    completions = _FakeCompletions(_response(tool_calls=[call], finish_reason="tool_calls"))
    tools = [{"type": "function", "function": {"name": "create_ticket"}}]

    result = asyncio.run(_adapter(completions).complete(MESSAGES, "m", tools=tools, tool_choice="auto"))

    assert result.content is None
    assert result.finish_reason == "tool_calls"
    assert [(c.id, c.name) for c in result.tool_calls] == [("call_9", "create_ticket")]
    assert completions.kwargs["tools"] == tools
    assert completions.kwargs["tool_choice"] == "auto"


def test_empty_choices_is_an_error():
    completions = _FakeCompletions(SimpleNamespace(choices=[]))
    with pytest.raises(LLMError, match="No response"):
        asyncio.run(_adapter(completions).complete(MESSAGES, "m"))


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (_status_error(openai.RateLimitError, 429), LLMRateLimited),
        (_status_error(openai.InternalServerError, 503), LLMServerError),
        (openai.APITimeoutError(request=httpx.Request("POST", URL)), LLMTimeout),
        (openai.APIConnectionError(request=httpx.Request("POST", URL)), LLMError),
    ],
)
def test_errors_are_mapped(error, expected):
    with pytest.raises(expected) as exc:
        asyncio.run(_adapter(_FakeCompletions(error=error)).complete(MESSAGES, "m"))
    assert exc.value.__cause__ is error


def test_client_error_is_not_retryable_kind():
    error = _status_error(openai.BadRequestError, 400)
    with pytest.raises(LLMError) as exc:
        asyncio.run(_adapter(_FakeCompletions(error=error)).complete(MESSAGES, "m"))
    assert not isinstance(exc.value, (LLMRateLimited, LLMServerError))
    assert "400" in str(exc.value)


def test_server_error_keeps_status():
    error = _status_error(openai.InternalServerError, 502)
    with pytest.raises(LLMServerError) as exc:
        asyncio.run(_adapter(_FakeCompletions(error=error)).complete(MESSAGES, "m"))
    assert exc.value.status == 502


def test_client_is_built_without_sdk_retries():
    adapter = OpenAIChatAdapter(base_url="http://llm.local/v1", api_key="k", timeout=5.0)
    client = adapter._get_client()
    assert client.max_retries == 0
    assert adapter._get_client() is client
