"""Tests for Gemini clients."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ai_visibility.collectors.llm_gemini import GeminiAiModeClient, GeminiClient


def _mock_http(response_data):
    mock_resp = MagicMock()
    mock_resp.status_code = 200
    mock_resp.json.return_value = response_data

    mock_client = AsyncMock()
    mock_client.post.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


class TestGeminiClient:
    @pytest.mark.asyncio
    async def test_openai_compatible_endpoint(self):
        client = GeminiClient(api_key="g-test")
        mock_client = _mock_http({"choices": [{"message": {"content": "Acme"}}]})

        with patch("ai_visibility.collectors.llm_openai.httpx.AsyncClient", return_value=mock_client):
            result = await client.query_llm("best tool")

        assert result.text == "Acme"
        assert "generativelanguage.googleapis.com" in mock_client.post.call_args.args[0]
        assert client.provider == "gemini"


class TestGeminiAiModeClient:
    @pytest.fixture
    def client(self):
        return GeminiAiModeClient(api_key="g-test", model="gemini-2.5-flash")

    @pytest.mark.asyncio
    async def test_grounded_answer(self, client):
        mock_client = _mock_http(
            {
                "candidates": [
                    {
                        "content": {"parts": [{"text": "Acme is "}, {"text": "popular."}]},
                        "groundingMetadata": {
                            "groundingChunks": [
                                {"web": {"uri": "https://acme.com/", "title": "Acme"}},
                                {"retrievedContext": {}},
                            ]
                        },
                    }
                ],
                "usageMetadata": {"totalTokenCount": 42},
                "modelVersion": "gemini-2.5-flash-001",
            }
        )

        with patch("ai_visibility.collectors.llm_gemini.httpx.AsyncClient", return_value=mock_client):
            result = await client.query_llm("best tool")

        assert result.text == "Acme is popular."
        assert result.cited_urls == ["https://acme.com/"]
        assert result.tokens == 42
        assert result.model == "gemini-2.5-flash-001"

        call = mock_client.post.call_args
        assert call.args[0].endswith("/models/gemini-2.5-flash:generateContent")
        assert call.kwargs["json"]["tools"] == [{"google_search": {}}]
        assert call.kwargs["headers"]["x-goog-api-key"] == "g-test"

    @pytest.mark.asyncio
    async def test_empty_candidates(self, client):
        mock_client = _mock_http({"candidates": []})

        with patch("ai_visibility.collectors.llm_gemini.httpx.AsyncClient", return_value=mock_client):
            result = await client.query_llm("best tool")

        assert result.text == ""
        assert result.cited_urls == []

    @pytest.mark.asyncio
    async def test_check_reports_ai_mode_provider(self, client):
        mock_client = _mock_http(
            {
                "candidates": [
                    {
                        "content": {"parts": [{"text": "Try Acme."}]},
                        "groundingMetadata": {"groundingChunks": [{"web": {"uri": "https://acme.com/"}}]},
                    }
                ]
            }
        )

        with patch("ai_visibility.collectors.llm_gemini.httpx.AsyncClient", return_value=mock_client):
            result = await client.check("best tool", "acme.com", [])

        assert result.provider == "gemini_ai_mode"
        assert result.brand_mentioned is True
        assert result.url_cited is True
