"""
Tests for the Gemini model backend.

The google-genai client is patched out: no network calls.
"""

from unittest.mock import MagicMock, patch

import pytest

from inference import GeminiModelBackend, GenerationRequest, StubModelBackend


class TestGeminiModelBackend:
    """One call, one credential."""

    @patch("inference.gemini.genai.Client")
    def test_generate_uses_request_key(self, mock_client_cls):
        client = MagicMock()
        client.models.generate_content.return_value = MagicMock(text="connections")
        mock_client_cls.return_value = client

        backend = GeminiModelBackend(model_name="gemini-2.5-flash-lite")
        text = backend.generate(GenerationRequest(prompt="hello", api_key="key-1"))

        assert text == "connections"
        mock_client_cls.assert_called_once_with(api_key="key-1")
        client.models.generate_content.assert_called_once_with(
            model="gemini-2.5-flash-lite", contents="hello"
        )

    @patch("inference.gemini.genai.Client")
    def test_text_is_returned_unchanged(self, mock_client_cls):
        client = MagicMock()
        client.models.generate_content.return_value = MagicMock(text="\n  1. connections\n")
        mock_client_cls.return_value = client

        text = GeminiModelBackend().generate(GenerationRequest(prompt="p", api_key="k"))

        assert text == "\n  1. connections\n"

    @patch("inference.gemini.genai.Client")
    def test_request_model_overrides_default(self, mock_client_cls):
        client = MagicMock()
        client.models.generate_content.return_value = MagicMock(text="ok")
        mock_client_cls.return_value = client

        GeminiModelBackend().generate(GenerationRequest(prompt="p", api_key="k", model="gemini-2.5-pro"))

        assert client.models.generate_content.call_args.kwargs["model"] == "gemini-2.5-pro"

    @patch("inference.gemini.genai.Client")
    def test_missing_text_returns_empty(self, mock_client_cls):
        client = MagicMock()
        client.models.generate_content.return_value = MagicMock(text=None)
        mock_client_cls.return_value = client

        assert GeminiModelBackend().generate(GenerationRequest(prompt="p", api_key="k")) == ""

    @patch("inference.gemini.genai.Client")
    def test_provider_errors_propagate(self, mock_client_cls):
        client = MagicMock()
        client.models.generate_content.side_effect = RuntimeError("429 RESOURCE_EXHAUSTED")
        mock_client_cls.return_value = client

        with pytest.raises(RuntimeError, match="RESOURCE_EXHAUSTED"):
            GeminiModelBackend().generate(GenerationRequest(prompt="p", api_key="k"))

    def test_request_repr_hides_key(self):
        assert "secret" not in repr(GenerationRequest(prompt="p", api_key="secret"))


class TestStubModelBackend:
    """Scripted replies per key."""

    def test_default_reply(self):
        backend = StubModelBackend()
        assert backend.generate(GenerationRequest(prompt="p", api_key="any")) == StubModelBackend.DEFAULT_OUTPUT
        assert backend.calls == ["any"]

    def test_scripted_exception(self):
        backend = StubModelBackend({"k": ValueError("nope")})
        with pytest.raises(ValueError):
            backend.generate(GenerationRequest(prompt="p", api_key="k"))
