"""Tests for Perplexity client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ai_visibility.collectors.llm_perplexity import PerplexityClient


@pytest.fixture
def client():
    return PerplexityClient(api_key="pplx-test-key")


def _mock_http(response_data):
    mock_resp = MagicMock()
    mock_resp.status_code = 200
    mock_resp.json.return_value = response_data

    mock_client = AsyncMock()
    mock_client.post.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


class TestPerplexityClient:
    def test_defaults(self, client):
        assert client.provider == "perplexity"
        assert client.model == "sonar"
        assert client.timeout == 90

    @pytest.mark.asyncio
    async def test_native_citations(self, client):
        mock_client = _mock_http(
            {
                "choices": [{"message": {"content": "Acme leads the market [1]."}}],
                "citations": ["https://acme.com/about", "https://rival.com"],
                "model": "sonar",
            }
        )

        with patch("ai_visibility.collectors.llm_openai.httpx.AsyncClient", return_value=mock_client):
            result = await client.query_llm("best tool")

        assert result.cited_urls == ["https://acme.com/about", "https://rival.com"]
        assert mock_client.post.call_args.args[0] == "https://api.perplexity.ai/chat/completions"

    @pytest.mark.asyncio
    async def test_check_merges_native_citation(self, client):
        mock_client = _mock_http(
            {
                "choices": [{"message": {"content": "Acme leads the market [1]."}}],
                "citations": ["https://acme.com/about"],
            }
        )

        with patch("ai_visibility.collectors.llm_openai.httpx.AsyncClient", return_value=mock_client):
            result = await client.check("best tool", "acme.com", [])

        assert result.brand_mentioned is True
        assert result.url_cited is True
        assert result.cited_url == "https://acme.com/about"

    @pytest.mark.asyncio
    async def test_missing_citations(self, client):
        mock_client = _mock_http({"choices": [{"message": {"content": "No idea."}}]})

        with patch("ai_visibility.collectors.llm_openai.httpx.AsyncClient", return_value=mock_client):
            result = await client.query_llm("best tool")

        assert result.cited_urls == []
