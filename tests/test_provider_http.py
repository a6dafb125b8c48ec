import httpx
import pytest

from companion_gateway.errors import ProviderApiError, ProviderAuthError
from companion_gateway.provider_http import (
    error_from_response,
    provider_error_handling,
    raise_for_provider_status,
)
from companion_gateway.responses import error_to_response


def _mock_transport(handler):
    return httpx.MockTransport(handler)


def _dropbox_message(body):
    if isinstance(body, dict):
        return body.get("error_summary")
    return None


def _invalid_grant(_response, body):
    return isinstance(body, dict) and body.get("error") == "invalid_grant"


def test_error_from_response_401_is_auth_error():
    err = error_from_response(httpx.Response(401))
    assert isinstance(err, ProviderAuthError)


def test_error_from_response_uses_custom_auth_check():
    resp = httpx.Response(400, json={"error": "invalid_grant"})
    err = error_from_response(resp, is_auth_error=_invalid_grant)
    assert isinstance(err, ProviderAuthError)


def test_error_from_response_extracts_json_message():
    resp = httpx.Response(409, json={"error_summary": "path/not_found/"})
    err = error_from_response(resp, get_json_error_message=_dropbox_message)
    assert type(err) is ProviderApiError
    assert err.status_code == 409
    assert err.message == "HTTP 409: path/not_found/"


def test_error_from_response_falls_back_to_reason_phrase():
    resp = httpx.Response(404, content=b"<html>nope</html>")
    err = error_from_response(resp, get_json_error_message=_dropbox_message)
    assert err.message == "HTTP 404: Not Found"


def test_error_from_response_custom_auth_check_sees_non_json_body_as_none():
    seen = []

    def check(response, body):
        seen.append(body)
        return False

    err = error_from_response(httpx.Response(502, content=b"<html>bad gateway</html>"), is_auth_error=check)
    assert seen == [None]
    assert err.message == "HTTP 502: Bad Gateway"


def test_raise_for_provider_status_passes_success_through():
    resp = httpx.Response(200, json={"entries": []})
    assert raise_for_provider_status(resp, provider="box", tag="provider.box.list") is resp


def test_raise_for_provider_status_raises_mapped_error():
    with pytest.raises(ProviderApiError) as exc:
        raise_for_provider_status(httpx.Response(503), provider="box", tag="provider.box.list")
    assert exc.value.status_code == 503
    assert error_to_response(exc.value).status_code == 502


@pytest.mark.asyncio
async def test_provider_error_handling_converts_http_status_errors():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error_summary": "too_many_requests/"})

    async with httpx.AsyncClient(transport=_mock_transport(handler)) as client:
        with pytest.raises(ProviderApiError) as exc:
            async with provider_error_handling("dropbox", tag="provider.dropbox.list", get_json_error_message=_dropbox_message):
                resp = await client.get("https://api.example.test/2/files/list_folder")
                resp.raise_for_status()
    assert exc.value.message == "HTTP 429: too_many_requests/"
    assert isinstance(exc.value.__cause__, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_provider_error_handling_converts_revoked_token():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "expired_access_token"})

    async with httpx.AsyncClient(transport=_mock_transport(handler)) as client:
        with pytest.raises(ProviderAuthError):
            async with provider_error_handling("drive", tag="provider.drive.list"):
                resp = await client.get("https://api.example.test/drive/v3/files")
                resp.raise_for_status()


@pytest.mark.asyncio
async def test_provider_error_handling_leaves_transport_errors_alone():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=_mock_transport(handler)) as client:
        with pytest.raises(httpx.ConnectError):
            async with provider_error_handling("drive", tag="provider.drive.list"):
                await client.get("https://api.example.test/drive/v3/files")


def test_raise_for_provider_status_records_metric_and_log():
    from prometheus_client import REGISTRY
    from structlog.testing import capture_logs

    labels = {"provider": "box", "status": "503"}
    before = REGISTRY.get_sample_value("provider_errors_total", labels) or 0.0
    with capture_logs() as logs:
        with pytest.raises(ProviderApiError):
            raise_for_provider_status(httpx.Response(503), provider="box", tag="provider.box.list")
    assert REGISTRY.get_sample_value("provider_errors_total", labels) == before + 1
    assert {"event": "provider_request_failed", "provider": "box", "tag": "provider.box.list", "status_code": 503} in [
        {k: entry.get(k) for k in ("event", "provider", "tag", "status_code")} for entry in logs
    ]
