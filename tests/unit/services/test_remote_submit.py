"""Unit tests for the HTTP submit collaborator (httpx.MockTransport)."""

import json

import httpx
import pytest

from uiruntime.core.exceptions import SubmissionError
from uiruntime.services.remote_submit import HttpSubmitter


def make_submitter(settings, handler) -> HttpSubmitter:
    return HttpSubmitter(settings, transport=httpx.MockTransport(handler))


class TestHttpSubmitter:
    """Test request building and error mapping"""

    @pytest.mark.asyncio
    async def test_post_sends_json(self, settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            seen["header"] = request.headers.get("x-app")
            return httpx.Response(201, json={"id": "abc"})

        submitter = make_submitter(settings, handler)
        result = await submitter.submit(
            "https://example.com/contact", {"emailField": "a@b.com"}, headers={"X-App": "tasks"}
        )

        assert result == {"id": "abc"}
        assert seen == {"method": "POST", "body": {"emailField": "a@b.com"}, "header": "tasks"}

    @pytest.mark.asyncio
    async def test_get_sends_query_params(self, settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["query"] = dict(request.url.params)
            return httpx.Response(200, text="ok")

        submitter = make_submitter(settings, handler)
        result = await submitter.submit("https://example.com/search", {"q": "milk"}, method="get")

        assert seen["query"] == {"q": "milk"}
        assert result == "ok"

    @pytest.mark.asyncio
    async def test_empty_response(self, settings):
        submitter = make_submitter(settings, lambda request: httpx.Response(204))
        assert await submitter.submit("https://example.com/hook", {}) is None

    @pytest.mark.asyncio
    async def test_error_status(self, settings):
        submitter = make_submitter(settings, lambda request: httpx.Response(500))

        with pytest.raises(SubmissionError) as exc_info:
            await submitter.submit("https://example.com/hook", {"a": 1})

        assert exc_info.value.status_code == 500
        assert exc_info.value.endpoint == "https://example.com/hook"
        assert "HTTP 500" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_error(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        submitter = make_submitter(settings, handler)

        with pytest.raises(SubmissionError) as exc_info:
            await submitter.submit("https://example.com/hook", {})

        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.message
