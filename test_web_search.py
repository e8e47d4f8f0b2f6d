"""
Tests for the OpenAI-backed search capability, with a fake client.
"""

import asyncio
from types import SimpleNamespace

import pytest

from bidfinder.core.settings import Settings
from bidfinder.search.web_search import OpenAIWebSearch


class FakeResponses:
    def __init__(self, response):
        self.response = response
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return self.response


def fake_client(response):
    return SimpleNamespace(responses=FakeResponses(response))


def test_requires_api_key_without_client():
    with pytest.raises(ValueError):
        OpenAIWebSearch(settings=Settings(openai_api_key=""))


def test_invoke_sends_model_prompt_and_tool():
    client = fake_client(SimpleNamespace(output=[]))
    search = OpenAIWebSearch(settings=Settings(search_model="gpt-4o-mini"), client=client)

    result = asyncio.run(search.invoke("find bridge RFPs"))

    assert result.is_empty
    assert client.responses.calls == [{
        "model": "gpt-4o-mini",
        "input": "find bridge RFPs",
        "tools": [{"type": "web_search_preview"}],
    }]


def test_tools_can_be_disabled():
    client = fake_client(SimpleNamespace(output=[]))
    search = OpenAIWebSearch(settings=Settings(), client=client)
    asyncio.run(search.invoke("hello", tools_enabled=False))
    assert "tools" not in client.responses.calls[0]
