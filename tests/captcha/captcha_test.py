from urllib.parse import parse_qs

import httpx
import pytest

from faucet_relay.captcha import MockCaptchaVerifier, WebCaptchaVerifier

pytestmark = pytest.mark.anyio

VERIFY_URL = "https://captcha.example/siteverify"


def make_verifier(handler, secret: str = "secret") -> WebCaptchaVerifier:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebCaptchaVerifier(VERIFY_URL, secret, client=client)


async def test_verify_success():
    requests = []

    def handler(request: httpx.Request):
        requests.append(request)
        return httpx.Response(200, json={"success": True})

    verifier = make_verifier(handler)
    try:
        assert await verifier.verify("token", "1.2.3.4")
    finally:
        await verifier.close()

    assert len(requests) == 1
    form = parse_qs(requests[0].content.decode())
    assert str(requests[0].url) == VERIFY_URL
    assert form["secret"] == ["secret"]
    assert form["response"] == ["token"]
    assert form["remoteip"] == ["1.2.3.4"]


async def test_verify_rejected():
    def handler(request: httpx.Request):
        return httpx.Response(
            200, json={"success": False, "error-codes": ["invalid-input-response"]}
        )

    verifier = make_verifier(handler)
    assert not await verifier.verify("token", "1.2.3.4")
    await verifier.close()


async def test_verify_without_token_or_secret():
    calls = []

    def handler(request: httpx.Request):
        calls.append(request)
        return httpx.Response(200, json={"success": True})

    verifier = make_verifier(handler)
    assert not await verifier.verify(None)
    assert not await verifier.verify("")
    await verifier.close()

    verifier = make_verifier(handler, secret="")
    assert not await verifier.verify("token")
    await verifier.close()

    assert len(calls) == 0


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="internal error"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["success"]),
        httpx.Response(200, json={"success": "true"}),
    ],
)
async def test_verify_bad_upstream_response(response: httpx.Response):
    def handler(request: httpx.Request):
        return response

    verifier = make_verifier(handler)
    assert not await verifier.verify("token")
    await verifier.close()


async def test_verify_transport_error():
    def handler(request: httpx.Request):
        raise httpx.ConnectError("connection refused", request=request)

    verifier = make_verifier(handler)
    assert not await verifier.verify("token")
    await verifier.close()


async def test_mock_verifier():
    verifier = MockCaptchaVerifier(valid_tokens=["ok"])
    assert await verifier.verify("ok")
    assert not await verifier.verify("bad")
    assert not await verifier.verify(None)
    assert verifier.calls == 3
