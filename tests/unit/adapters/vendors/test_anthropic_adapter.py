"""Tests for the SDK-backed Anthropic adapter."""

from __future__ import annotations

from collections.abc import AsyncIterator
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from tenantry.adapters.vendors.anthropic import AnthropicAdapter
from tenantry.core.catalog.types import ModelCategory
from tenantry.core.exceptions import InvalidCredential, VendorUnreachable

MODELS_URL = "https://api.anthropic.com/v1/models"


def listing(*items: object, error: Exception | None = None) -> AsyncIterator[object]:
    """Async iterator standing in for the SDK's auto-paginating listing."""

    async def iterate() -> AsyncIterator[object]:
        for item in items:
            yield item
        if error is not None:
            raise error

    return iterate()


def make_client(pages: AsyncIterator[object]) -> MagicMock:
    """Return a mock AsyncAnthropic client."""
    client = MagicMock()
    client.models.list.return_value = pages
    client.close = AsyncMock()
    return client


class TestAnthropicAdapter:
    """Tests for AnthropicAdapter."""

    @pytest.fixture
    def adapter(self) -> AnthropicAdapter:
        """Return an Anthropic adapter."""
        return AnthropicAdapter(timeout_seconds=5.0)

    async def test_lists_models(self, adapter: AnthropicAdapter) -> None:
        """Every Claude model is listed as an llm with its display name."""
        client = make_client(
            listing(
                SimpleNamespace(id="claude-sonnet-4-20250514", display_name="Claude Sonnet 4"),
                SimpleNamespace(id="claude-next", display_name=""),
            )
        )

        with patch("anthropic.AsyncAnthropic", return_value=client) as mock_class:
            models = await adapter.fetch_models({"api_key": "sk-ant-1"})

        mock_class.assert_called_once_with(
            api_key="sk-ant-1",
            base_url="https://api.anthropic.com",
            timeout=5.0,
            max_retries=0,
        )
        assert [(m.id, m.display_name) for m in models[:2]] == [
            ("claude-sonnet-4-20250514", "Claude Sonnet 4"),
            ("claude-next", "claude-next"),
        ]
        assert all(m.category == ModelCategory.LLM for m in models)
        client.close.assert_awaited_once()

    async def test_missing_key(self, adapter: AnthropicAdapter) -> None:
        """No key means InvalidCredential without building a client."""
        with patch("anthropic.AsyncAnthropic") as mock_class:
            with pytest.raises(InvalidCredential):
                await adapter.fetch_models({})

        mock_class.assert_not_called()

    async def test_authentication_error(self, adapter: AnthropicAdapter) -> None:
        """An authentication error maps to InvalidCredential."""
        response = httpx.Response(401, request=httpx.Request("GET", MODELS_URL))
        error = anthropic.AuthenticationError("invalid x-api-key", response=response, body=None)
        client = make_client(listing(error=error))

        with patch("anthropic.AsyncAnthropic", return_value=client):
            with pytest.raises(InvalidCredential):
                await adapter.fetch_models({"api_key": "sk-ant-bad"})

        client.close.assert_awaited_once()

    async def test_connection_error(self, adapter: AnthropicAdapter) -> None:
        """Transport failures map to VendorUnreachable."""
        error = anthropic.APIConnectionError(request=httpx.Request("GET", MODELS_URL))
        client = make_client(listing(error=error))

        with patch("anthropic.AsyncAnthropic", return_value=client):
            with pytest.raises(VendorUnreachable):
                await adapter.fetch_models({"api_key": "sk-ant-1"})

    async def test_validate_returns_false_on_rejection(self, adapter: AnthropicAdapter) -> None:
        """validate swallows the SDK error and reports False."""
        response = httpx.Response(403, request=httpx.Request("GET", MODELS_URL))
        error = anthropic.PermissionDeniedError("forbidden", response=response, body=None)
        client = make_client(listing(error=error))

        with patch("anthropic.AsyncAnthropic", return_value=client):
            assert await adapter.validate({"api_key": "sk-ant-1"}) is False

    async def test_validate_ignores_non_string_base_url(self, adapter: AnthropicAdapter) -> None:
        """A base_url that is not a string falls back to the public endpoint."""
        client = make_client(listing(SimpleNamespace(id="claude-x", display_name="Claude X")))

        with patch("anthropic.AsyncAnthropic", return_value=client) as mock_class:
            assert await adapter.validate({"api_key": "sk-ant-1", "base_url": 123}) is True

        assert mock_class.call_args.kwargs["base_url"] == "https://api.anthropic.com"

    @pytest.mark.parametrize(
        "error",
        [httpx.InvalidURL("Invalid port"), ValueError("bad base_url")],
    )
    async def test_validate_client_construction_fails(
        self, adapter: AnthropicAdapter, error: Exception
    ) -> None:
        """A client that cannot be built makes validate return False."""
        config = {"api_key": "sk-ant-1", "base_url": "http://[::1"}

        with patch("anthropic.AsyncAnthropic", side_effect=error):
            assert await adapter.validate(config) is False

    async def test_fetch_client_construction_fails(self, adapter: AnthropicAdapter) -> None:
        """A client that cannot be built maps to VendorUnreachable."""
        with patch("anthropic.AsyncAnthropic", side_effect=httpx.InvalidURL("Invalid port")):
            with pytest.raises(VendorUnreachable):
                await adapter.fetch_models({"api_key": "sk-ant-1", "base_url": "http://[::1"})
