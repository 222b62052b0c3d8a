"""Tests for OpenAI (ChatGPT) client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ai_visibility.collectors.llm_grok import GrokClient
from ai_visibility.collectors.llm_openai import OpenAiClient


@pytest.fixture
def client():
    return OpenAiClient(api_key="sk-test-fake-key", model="gpt-4.1-mini")


def _mock_http(response_data=None, status_code=200, raise_exc=None):
    mock_resp = MagicMock()
    mock_resp.status_code = status_code
    mock_resp.json.return_value = response_data or {}
    if raise_exc:
        mock_resp.raise_for_status.side_effect = raise_exc

    mock_client = AsyncMock()
    mock_client.post.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


class TestBuildPayload:
    def test_standard_model(self, client):
        payload = client.build_payload("best tool")
        assert payload["model"] == "gpt-4.1-mini"
        assert payload["temperature"] == 0.0
        assert payload["max_tokens"] == 2048
        assert payload["messages"][1] == {"role": "user", "content": "best tool"}

    def test_reasoning_model(self):
        payload = OpenAiClient(api_key="k", model="gpt-5-mini").build_payload("q")
        assert "temperature" not in payload
        assert "max_tokens" not in payload
        assert payload["max_completion_tokens"] == 2048


class TestQueryLlm:
    @pytest.mark.asyncio
    async def test_query_llm_success(self, client):
        mock_client = _mock_http(
            {
                "choices": [{"message": {"content": "Acme is a great SEO tool."}, "finish_reason": "stop"}],
                "model": "gpt-4.1-mini",
                "usage": {"prompt_tokens": 50, "completion_tokens": 100},
            }
        )

        with patch("ai_visibility.collectors.llm_openai.httpx.AsyncClient", return_value=mock_client):
            result = await client.query_llm("What is the best SEO tool?")

        assert result.text == "Acme is a great SEO tool."
        assert result.model == "gpt-4.1-mini"
        assert result.tokens == 150
        assert result.cited_urls == []

        call = mock_client.post.call_args
        assert call.args[0] == "https://api.openai.com/v1/chat/completions"
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-test-fake-key"

    @pytest.mark.asyncio
    async def test_query_llm_http_error(self, client):
        error = httpx.HTTPStatusError("rate limited", request=MagicMock(), response=MagicMock())
        mock_client = _mock_http(status_code=429, raise_exc=error)

        with patch("ai_visibility.collectors.llm_openai.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(httpx.HTTPStatusError):
                await client.query_llm("test")

    @pytest.mark.asyncio
    async def test_null_content_becomes_empty_text(self, client):
        mock_client = _mock_http({"choices": [{"message": {"content": None}}]})

        with patch("ai_visibility.collectors.llm_openai.httpx.AsyncClient", return_value=mock_client):
            result = await client.query_llm("test")

        assert result.text == ""
        assert result.tokens == 0


class TestCheck:
    @pytest.mark.asyncio
    async def test_check_analyzes_answer(self, client):
        mock_client = _mock_http(
            {"choices": [{"message": {"content": "1. Rival\n2. Acme, see https://acme.com/"}}], "usage": {}}
        )

        with patch("ai_visibility.collectors.llm_openai.httpx.AsyncClient", return_value=mock_client):
            result = await client.check("best tool", "acme.com", ["rival.com"])

        assert result.provider == "chatgpt"
        assert result.query == "best tool"
        assert result.brand_mentioned is True
        assert result.url_cited is True
        assert result.citation_position == 2
        assert result.competitor_mentions[0].mentioned is True
        assert result.error is None


class TestGrok:
    @pytest.mark.asyncio
    async def test_uses_xai_endpoint(self):
        grok = GrokClient(api_key="xai-test")
        mock_client = _mock_http({"choices": [{"message": {"content": "ok"}}]})

        with patch("ai_visibility.collectors.llm_openai.httpx.AsyncClient", return_value=mock_client):
            result = await grok.query_llm("test")

        assert result.text == "ok"
        assert mock_client.post.call_args.args[0] == "https://api.x.ai/v1/chat/completions"
        assert grok.provider == "grok"
