"""Tests for Anthropic (Claude) client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ai_visibility.collectors.llm_anthropic import AnthropicClient


@pytest.mark.asyncio
async def test_query_llm_joins_text_blocks():
    client = AnthropicClient(api_key="sk-ant-test")

    mock_resp = MagicMock()
    mock_resp.status_code = 200
    mock_resp.json.return_value = {
        "content": [
            {"type": "text", "text": "Acme is good."},
            {"type": "tool_use", "id": "x"},
            {"type": "text", "text": "Rival too."},
        ],
        "model": "claude-sonnet-4-5",
        "usage": {"input_tokens": 10, "output_tokens": 20},
    }
    mock_client = AsyncMock()
    mock_client.post.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)

    with patch("ai_visibility.collectors.llm_anthropic.httpx.AsyncClient", return_value=mock_client):
        result = await client.query_llm("best tool")

    assert result.text == "Acme is good.\nRival too."
    assert result.tokens == 30

    call = mock_client.post.call_args
    assert call.kwargs["headers"]["x-api-key"] == "sk-ant-test"
    assert call.kwargs["headers"]["anthropic-version"] == "2023-06-01"
    assert call.kwargs["json"]["system"]
    assert client.provider == "claude"
