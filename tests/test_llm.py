"""Tests for utils.llm.call_llm: the Anthropic client is mocked."""

from unittest.mock import MagicMock, patch

import anthropic
import httpx
import pytest

from utils.llm import call_llm, get_client, OracleError, RetryableOracleError

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _status_error(cls, status):
    response = httpx.Response(status, request=_REQUEST)
    return cls(f"status {status}", response=response, body=None)


def _client_streaming(chunks, stop_reason="end_turn"):
    client = MagicMock()
    stream = MagicMock()
    stream.text_stream = iter(chunks)
    stream.get_final_message.return_value.stop_reason = stop_reason
    client.messages.stream.return_value.__enter__.return_value = stream
    return client


def _client_raising(error):
    client = MagicMock()
    client.messages.stream.side_effect = error
    return client


def test_call_llm_joins_stream():
    client = _client_streaming(["FILE: a.ts\n", "```ts\nx\n```"])
    assert call_llm("sys", "user", client=client) == "FILE: a.ts\n```ts\nx\n```"
    kwargs = client.messages.stream.call_args.kwargs
    assert kwargs["system"] == "sys"
    assert kwargs["messages"] == [{"role": "user", "content": "user"}]
    assert kwargs["temperature"] == 0.3


def test_call_llm_custom_temperature():
    client = _client_streaming(["ok"])
    call_llm("sys", "user", temperature=0.1, client=client)
    assert client.messages.stream.call_args.kwargs["temperature"] == 0.1


def test_truncated_response_still_returned():
    client = _client_streaming(["partial"], stop_reason="max_tokens")
    assert call_llm("sys", "user", client=client) == "partial"


class TestErrorMapping:

    def test_rate_limit_is_retryable(self):
        client = _client_raising(_status_error(anthropic.RateLimitError, 429))
        with pytest.raises(RetryableOracleError):
            call_llm("sys", "user", client=client)

    def test_overloaded_is_retryable(self):
        client = _client_raising(_status_error(anthropic.APIStatusError, 529))
        with pytest.raises(RetryableOracleError):
            call_llm("sys", "user", client=client)

    def test_server_error_is_retryable(self):
        client = _client_raising(_status_error(anthropic.InternalServerError, 503))
        with pytest.raises(RetryableOracleError):
            call_llm("sys", "user", client=client)

    def test_connection_error_is_retryable(self):
        client = _client_raising(anthropic.APIConnectionError(request=_REQUEST))
        with pytest.raises(RetryableOracleError):
            call_llm("sys", "user", client=client)

    def test_bad_request_is_terminal(self):
        client = _client_raising(_status_error(anthropic.BadRequestError, 400))
        with pytest.raises(OracleError) as exc:
            call_llm("sys", "user", client=client)
        assert not isinstance(exc.value, RetryableOracleError)

    def test_auth_error_is_terminal(self):
        client = _client_raising(_status_error(anthropic.AuthenticationError, 401))
        with pytest.raises(OracleError) as exc:
            call_llm("sys", "user", client=client)
        assert not isinstance(exc.value, RetryableOracleError)


def test_get_client_requires_api_key():
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(RuntimeError, match="ANTHROPIC_API_KEY"):
            get_client()
