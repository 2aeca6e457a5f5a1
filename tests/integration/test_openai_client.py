import asyncio
from types import SimpleNamespace

import pytest

from core.exceptions import LLMError
from core.retry import RetryPolicy
from integrations.openai_client import OpenAIClient


class FakeCompletions:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        message = SimpleNamespace(content=outcome)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)


def make_client(outcomes):
    completions = FakeCompletions(outcomes)
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    client = OpenAIClient(api_key="sk-test", model="gpt-4o-mini", temperature=0.3,
                          retry_policy=RetryPolicy(initial_delay_ms=0), client=fake)
    return client, completions


def test_completion_text_is_returned():
    """Test model and temperature are passed and the text comes back."""
    client, completions = make_client(["A report"])
    messages = [{"role": "user", "content": "Summarize"}]

    assert asyncio.run(client.generate_chat_completion(messages)) == "A report"
    assert completions.requests[0]["model"] == "gpt-4o-mini"
    assert completions.requests[0]["temperature"] == 0.3
    assert completions.requests[0]["messages"] == messages


def test_empty_completion_raises_without_retry():
    client, completions = make_client(["", "never used"])

    with pytest.raises(LLMError):
        asyncio.run(client.generate_chat_completion([{"role": "user", "content": "x"}]))

    assert len(completions.requests) == 1


def test_transient_failure_is_retried():
    """Test that a connection reset is retried under the shared policy."""
    client, completions = make_client([RuntimeError("Connection reset by peer"), "Recovered"])

    assert asyncio.run(client.generate_chat_completion([{"role": "user", "content": "x"}])) == "Recovered"
    assert len(completions.requests) == 2


def test_api_key_required():
    with pytest.raises(ValueError):
        OpenAIClient(api_key="")
