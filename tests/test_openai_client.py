import httpx
import pytest


class _FakeCompletions:
    def __init__(self, failures) -> None:
        self.failures = list(failures)
        self.calls = 0

    def create(self, **kwargs):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return {"ok": True, **kwargs}


def _wrapper(failures):
    from types import SimpleNamespace
    from supplement_engine.azure.openai_client import OpenAIClient

    completions = _FakeCompletions(failures)
    client = OpenAIClient()
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return client, completions


def test_transient_errors_are_retried(monkeypatch: pytest.MonkeyPatch) -> None:
    from openai import APIConnectionError
    from supplement_engine.azure import openai_client

    sleeps = []
    monkeypatch.setattr(openai_client.time, "sleep", sleeps.append)
    request = httpx.Request("POST", "https://example.openai.azure.com/openai/deployments/gpt-4o/chat/completions")
    client, completions = _wrapper([APIConnectionError(request=request), APIConnectionError(request=request)])

    result = client.chat_completions_create(model="gpt-4o")

    assert result["ok"] is True
    assert completions.calls == 3
    assert len(sleeps) == 2


def test_non_transient_errors_are_raised(monkeypatch: pytest.MonkeyPatch) -> None:
    from openai import BadRequestError
    from supplement_engine.azure import openai_client

    monkeypatch.setattr(openai_client.time, "sleep", lambda seconds: None)
    request = httpx.Request("POST", "https://example.openai.azure.com/")
    error = BadRequestError("bad prompt", response=httpx.Response(400, request=request), body=None)
    client, completions = _wrapper([error])

    with pytest.raises(BadRequestError):
        client.chat_completions_create(model="gpt-4o")
    assert completions.calls == 1


def test_retry_delay_honours_retry_after() -> None:
    from openai import RateLimitError
    from supplement_engine.azure.openai_client import _retry_delay

    request = httpx.Request("POST", "https://example.openai.azure.com/")
    response = httpx.Response(429, request=request, headers={"retry-after": "2"})
    error = RateLimitError("slow down", response=response, body=None)

    delay = _retry_delay(error, attempt=1)

    assert 2.0 <= delay <= 2.5


@pytest.mark.asyncio
async def test_health_check_without_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    from supplement_engine.azure.openai_client import OpenAIClient
    from supplement_engine.config import settings

    monkeypatch.setattr(settings, "azure_openai_endpoint", None)

    assert await OpenAIClient().health_check() is False
