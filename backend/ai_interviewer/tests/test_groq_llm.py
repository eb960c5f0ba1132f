import json
from unittest.mock import Mock

import pytest
import requests

from ai_interviewer.exceptions import (
    ConfigurationError,
    ModelTimeoutError,
    ProtocolError,
    RateLimitError,
    TransportError,
)
from ai_interviewer.interviewer.config import PipelineConfig
from ai_interviewer.live_providers.groq_llm import GroqLLM
from ai_interviewer.live_providers.rate_limiter import RateLimiter


def make_response(status_code=200, body=None, reason="OK"):
    r = requests.Response()
    r.status_code = status_code
    r.reason = reason
    r.encoding = "utf-8"
    if body is None:
        body = {"choices": [{"message": {"role": "assistant", "content": '{"ok": true}'}}]}
    r._content = body.encode() if isinstance(body, str) else json.dumps(body).encode()
    return r


class CountingLimiter(RateLimiter):
    def __init__(self):
        super().__init__(min_interval_s=0)
        self.slots = 0

    async def await_slot(self):
        self.slots += 1
        await super().await_slot()


@pytest.fixture
def config():
    return PipelineConfig.from_dict({
        "api_key": "gsk_test",
        "api_url": "https://example.test/",
        "model": "llama-test",
        "temperature": 0.5,
        "max_tokens": 200,
        "top_p": 0.9,
        "timeout_s": 12,
    })


@pytest.fixture
def limiter():
    return CountingLimiter()


def make_client(config, limiter, response=None, error=None):
    session = requests.Session()
    # Error responses are falsy (Response.__bool__ is .ok), so test against None
    session.post = Mock(return_value=response if response is not None else make_response(), side_effect=error)
    return GroqLLM(config=config, rate_limiter=limiter, session=session)


class TestGroqLLM:
    def test_url_and_headers(self, config, limiter):
        llm = make_client(config, limiter)
        assert llm.url == "https://example.test/openai/v1/chat/completions"
        assert llm.session.headers["Authorization"] == "Bearer gsk_test"
        assert llm.session.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_successful_completion(self, config, limiter):
        llm = make_client(config, limiter)
        text = await llm.complete("Generate a question", system_prompt="You are strict.")

        assert text == '{"ok": true}'
        assert limiter.slots == 1
        args, kwargs = llm.session.post.call_args
        assert args == ("https://example.test/openai/v1/chat/completions",)
        assert kwargs["timeout"] == 12.0
        payload = kwargs["json"]
        assert payload["model"] == "llama-test"
        assert payload["messages"] == [
            {"role": "system", "content": "You are strict."},
            {"role": "user", "content": "Generate a question"},
        ]
        assert payload["temperature"] == 0.5
        assert payload["max_tokens"] == 200
        assert payload["top_p"] == 0.9
        assert payload["stream"] is False

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_throttle(self, limiter):
        llm = make_client(PipelineConfig.from_dict({"api_key": None}), limiter)
        with pytest.raises(ConfigurationError):
            await llm.complete("prompt")
        assert limiter.slots == 0
        llm.session.post.assert_not_called()
        assert "Authorization" not in llm.session.headers

    @pytest.mark.asyncio
    async def test_rate_limited(self, config, limiter):
        llm = make_client(config, limiter, make_response(429, {"error": "slow down"}, "Too Many Requests"))
        with pytest.raises(RateLimitError) as exc:
            await llm.complete("prompt")
        assert exc.value.status_code == 429

    @pytest.mark.asyncio
    async def test_server_error(self, config, limiter):
        llm = make_client(config, limiter, make_response(500, "upstream exploded", "Internal Server Error"))
        with pytest.raises(TransportError) as exc:
            await llm.complete("prompt")
        assert exc.value.status_code == 500
        assert "500 Internal Server Error" in str(exc.value)
        assert not isinstance(exc.value, RateLimitError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code, error", [(429, RateLimitError), (502, TransportError), (503, TransportError)])
    async def test_error_statuses_are_not_swallowed(self, config, limiter, status_code, error):
        response = make_response(status_code, "nope", "Error")
        assert not response
        llm = make_client(config, limiter, response)
        assert llm.session.post() is response
        with pytest.raises(error) as exc:
            await llm.complete("prompt")
        assert exc.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_timeout(self, config, limiter):
        llm = make_client(config, limiter, error=requests.Timeout("read timed out"))
        with pytest.raises(ModelTimeoutError):
            await llm.complete("prompt")

    @pytest.mark.asyncio
    async def test_connection_error(self, config, limiter):
        llm = make_client(config, limiter, error=requests.ConnectionError("refused"))
        with pytest.raises(TransportError) as exc:
            await llm.complete("prompt")
        assert not isinstance(exc.value, ModelTimeoutError)

    @pytest.mark.asyncio
    async def test_body_not_json(self, config, limiter):
        llm = make_client(config, limiter, make_response(200, "<html>gateway</html>"))
        with pytest.raises(ProtocolError):
            await llm.complete("prompt")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"id": "x"},
            {"choices": []},
            {"choices": [{"message": {}}]},
            {"choices": [{"message": {"content": None}}]},
        ],
    )
    async def test_unexpected_envelope(self, config, limiter, body):
        llm = make_client(config, limiter, make_response(200, body))
        with pytest.raises(ProtocolError):
            await llm.complete("prompt")
