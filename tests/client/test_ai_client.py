"""
tests/client/test_ai_client.py

Tests for AIClient against a mocked proxy and end to end against the
real FastAPI app.

Verifies:
✔ Success returns the trimmed answer
✔ 503 N times then success → N+1 POSTs, backoff 1.0 * (2**N - 1) s
✔ 401 → API-key fallback after exactly one attempt
✔ Always 503 → fallback text, never raises
✔ Network errors → network fallback after retries
✔ Blank question → no HTTP call
✔ ask() returns a tagged AIResult
✔ Image variant sends imageBase64 and uses its own fallback text
"""

from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from advisor.client import AIClient, AIResult
from advisor.client.ai_client import API_KEY_MESSAGE, EMPTY_QUESTION_MESSAGE, NETWORK_MESSAGE
from inference import ErrorKind, ModelBackend, StubModelBackend, UpstreamResult
from infra import get_model_backend
from main import app

ENDPOINT = "https://proxy.example.com/api/gemini"


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────


def make_response(status_code, body=None, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("Bad JSON")
    else:
        response.json.return_value = body if body is not None else {}
    return response


def answer(text):
    return make_response(200, {"success": True, "answer": text, "metadata": {"model": "gemini-pro"}})


@contextmanager
def mock_proxy(*outcomes):
    """Each POST returns (or raises) the next outcome."""
    with patch("httpx.AsyncClient") as mock_class:
        mock_instance = AsyncMock()
        mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
        mock_instance.__aexit__ = AsyncMock(return_value=False)
        mock_instance.post.side_effect = list(outcomes)
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def ai_client(fake_sleep):
    return AIClient(endpoint=ENDPOINT, retries=3, delay=1.0, timeout=5.0, sleep=fake_sleep)


# ─────────────────────────────────────────────────────
# Success
# ─────────────────────────────────────────────────────


class TestSuccess:
    @pytest.mark.asyncio
    async def test_returns_trimmed_answer(self, ai_client):
        with mock_proxy(answer("  Apply balanced NPK fertilizer.  ")) as proxy:
            text = await ai_client.get_ai_response("  How to increase wheat yield? ")

        assert text == "Apply balanced NPK fertilizer."
        proxy.post.assert_awaited_once_with(
            ENDPOINT, json={"question": "How to increase wheat yield?"}
        )

    @pytest.mark.asyncio
    async def test_ask_returns_tagged_success(self, ai_client):
        with mock_proxy(answer("Irrigate at crown root initiation.")):
            result = await ai_client.ask("When to irrigate wheat?")

        assert isinstance(result, AIResult)
        assert result.ok
        assert result.kind == "success"
        assert result.value == "Irrigate at crown root initiation."
        assert result.error is None

    @pytest.mark.asyncio
    async def test_image_variant_sends_image(self, ai_client):
        with mock_proxy(answer("Looks like leaf rust.")) as proxy:
            text = await ai_client.get_ai_response_with_image("What is this?", "aW1hZ2U=")

        assert text == "Looks like leaf rust."
        assert proxy.post.call_args.kwargs["json"] == {
            "question": "What is this?",
            "imageBase64": "aW1hZ2U=",
        }


# ─────────────────────────────────────────────────────
# Retry behaviour
# ─────────────────────────────────────────────────────


class TestRetries:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("failures", [0, 1, 2])
    async def test_recovers_from_transient_503(self, ai_client, fake_sleep, failures):
        outcomes = [make_response(503, {"error": "overloaded", "status": 503})] * failures
        outcomes.append(answer("Apply balanced NPK fertilizer."))

        with mock_proxy(*outcomes) as proxy:
            text = await ai_client.get_ai_response("How to increase wheat yield?")

        assert text == "Apply balanced NPK fertilizer."
        assert proxy.post.await_count == failures + 1
        assert fake_sleep.total == pytest.approx(1.0 * (2 ** failures - 1))

    @pytest.mark.asyncio
    async def test_rate_limit_429_is_retried(self, ai_client):
        with mock_proxy(make_response(429, json_error=True), answer("ok")) as proxy:
            text = await ai_client.get_ai_response("How to increase wheat yield?")

        assert text == "ok"
        assert proxy.post.await_count == 2

    @pytest.mark.asyncio
    async def test_auth_failure_is_not_retried(self, ai_client, fake_sleep):
        with mock_proxy(make_response(401, {"error": "API key not valid", "status": 401})) as proxy:
            text = await ai_client.get_ai_response("How to increase wheat yield?")

        assert text == API_KEY_MESSAGE
        assert "API key" in text
        assert proxy.post.await_count == 1
        assert fake_sleep.calls == []

    @pytest.mark.asyncio
    async def test_proxy_kind_overrides_status_family(self, ai_client):
        """Gemini reports a bad key as 400; the proxy tags it as auth."""
        body = {"error": "API key not valid.", "status": 400, "kind": "auth"}
        with mock_proxy(make_response(400, body)) as proxy:
            result = await ai_client.ask("How to increase wheat yield?")

        assert result.error.kind == ErrorKind.AUTH
        assert result.value == API_KEY_MESSAGE
        assert proxy.post.await_count == 1

    @pytest.mark.asyncio
    async def test_configuration_failure_maps_to_api_key_message(self, ai_client):
        body = {"error": "Server configuration error.", "status": 500, "kind": "configuration"}
        with mock_proxy(make_response(500, body)) as proxy:
            text = await ai_client.get_ai_response("How to increase wheat yield?")

        assert text == API_KEY_MESSAGE
        assert proxy.post.await_count == 1

    @pytest.mark.asyncio
    async def test_bad_request_is_not_retried(self, ai_client):
        with mock_proxy(make_response(400, {"error": "Question is required"})) as proxy:
            result = await ai_client.ask("How to increase wheat yield?")

        assert result.error.kind == ErrorKind.MALFORMED_REQUEST
        assert "Question is required" in result.value
        assert proxy.post.await_count == 1

    @pytest.mark.asyncio
    async def test_always_503_returns_fallback(self, ai_client, fake_sleep):
        outcomes = [make_response(503, {"error": "overloaded"})] * 4

        with mock_proxy(*outcomes) as proxy:
            result = await ai_client.ask("How to increase wheat yield?")

        assert not result.ok
        assert result.error.kind == ErrorKind.TRANSIENT
        assert result.value.startswith("Unable to get AI response at this time.")
        assert "try asking your question again later" in result.value
        assert proxy.post.await_count == 4
        assert fake_sleep.total == pytest.approx(7.0)

    @pytest.mark.asyncio
    async def test_network_errors_exhaust_to_network_message(self, ai_client):
        errors = [httpx.ConnectError("connection refused")] * 4

        with mock_proxy(*errors) as proxy:
            text = await ai_client.get_ai_response("How to increase wheat yield?")

        assert text == NETWORK_MESSAGE
        assert proxy.post.await_count == 4

    @pytest.mark.asyncio
    async def test_success_without_answer_is_terminal(self, ai_client):
        with mock_proxy(make_response(200, {"success": True, "answer": ""})) as proxy:
            result = await ai_client.ask("How to increase wheat yield?")

        assert result.error.kind == ErrorKind.NO_CONTENT
        assert proxy.post.await_count == 1


# ─────────────────────────────────────────────────────
# Validation and fallbacks
# ─────────────────────────────────────────────────────


class TestFallbacks:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("question", ["", "   ", None])
    async def test_blank_question_makes_no_http_call(self, ai_client, question):
        with patch("httpx.AsyncClient") as mock_class:
            result = await ai_client.ask(question)

        assert result.error.kind == ErrorKind.VALIDATION
        assert result.value == EMPTY_QUESTION_MESSAGE
        mock_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_image_failure_uses_image_message(self, ai_client):
        with mock_proxy(make_response(500, {"error": "Failed to get AI response"})):
            text = await ai_client.get_ai_response_with_image("What is this?", "aW1hZ2U=")

        assert text == "Unable to analyze image at this time. Error: Failed to get AI response"

    @pytest.mark.asyncio
    async def test_unexpected_exception_never_escapes(self, ai_client):
        with mock_proxy(RuntimeError("bug")):
            result = await ai_client.ask("How to increase wheat yield?")

        assert not result.ok
        assert result.error.kind == ErrorKind.UPSTREAM


# ─────────────────────────────────────────────────────
# End to end: AIClient → /api/gemini → backend
# ─────────────────────────────────────────────────────


class OverloadedThenOk(ModelBackend):
    """Upstream that answers 503 `failures` times, then succeeds."""

    model_name = "gemini-pro"

    def __init__(self, failures):
        self.failures = failures
        self.calls = 0

    def generate(self, request):
        self.calls += 1
        if self.calls <= self.failures:
            return UpstreamResult(
                status="recoverable_error",
                status_code=503,
                error_kind=ErrorKind.TRANSIENT,
                error_message="The model is overloaded.",
            )
        return UpstreamResult(status="success", output="Apply balanced NPK fertilizer.", status_code=200)


@pytest.fixture
def proxied_client(fake_sleep):
    def _make(backend):
        app.dependency_overrides[get_model_backend] = lambda: backend
        return AIClient(
            endpoint="http://testserver/api/gemini",
            sleep=fake_sleep,
            retries=3,
            delay=1.0,
            transport=httpx.ASGITransport(app=app),
        )

    yield _make
    app.dependency_overrides.clear()


class TestThroughProxy:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("failures", [0, 1, 2])
    async def test_upstream_overload_retried_through_proxy(self, proxied_client, fake_sleep, failures):
        backend = OverloadedThenOk(failures)

        text = await proxied_client(backend).get_ai_response("How to increase wheat yield?")

        assert text == "Apply balanced NPK fertilizer."
        assert backend.calls == failures + 1
        assert fake_sleep.total == pytest.approx(1.0 * (2 ** failures - 1))

    @pytest.mark.asyncio
    async def test_upstream_auth_failure_through_proxy(self, proxied_client, fake_sleep):
        backend = StubModelBackend(failure=UpstreamResult(
            status="fatal_error",
            status_code=401,
            error_kind=ErrorKind.AUTH,
            error_message="Request had invalid authentication credentials.",
        ))

        text = await proxied_client(backend).get_ai_response("How to increase wheat yield?")

        assert text == API_KEY_MESSAGE
        assert len(backend.requests) == 1
        assert fake_sleep.calls == []
