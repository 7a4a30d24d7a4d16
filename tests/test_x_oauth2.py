import base64
import string
import urllib.parse

import pytest

from auth.x_oauth2 import (
    X_AUTHORIZE_URL,
    X_TOKEN_URL,
    TokenExchangeError,
    TokenResponse,
    build_authorization_url,
    exchange_code,
    generate_code_challenge,
    generate_code_verifier,
    generate_state,
)


def test_code_verifier_length() -> None:
    verifier = generate_code_verifier()

    assert 43 <= len(verifier) <= 128


def test_code_verifier_url_safe() -> None:
    verifier = generate_code_verifier()
    allowed = set(string.ascii_letters + string.digits + "-._~")

    assert all(char in allowed for char in verifier)


def test_state_and_verifier_are_independent() -> None:
    assert generate_state() != generate_state()
    assert generate_code_verifier() != generate_code_verifier()
    assert len(generate_state()) == 64


def test_code_challenge_is_s256() -> None:
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

    assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_code_challenge_has_no_padding_or_unsafe_chars() -> None:
    challenge = generate_code_challenge(generate_code_verifier())

    assert len(challenge) == 43
    assert "=" not in challenge
    assert "+" not in challenge
    assert "/" not in challenge


def test_build_authorization_url_contains_required_params() -> None:
    url = build_authorization_url(
        client_id="client123",
        redirect_uri="https://example.com/auth/callback",
        scopes=["tweet.read", "tweet.write", "users.read", "offline.access"],
        state="state123",
        code_challenge="challenge123",
    )

    parsed = urllib.parse.urlparse(url)
    query = urllib.parse.parse_qs(parsed.query)

    assert url.startswith(X_AUTHORIZE_URL)
    assert query["response_type"] == ["code"]
    assert query["client_id"] == ["client123"]
    assert query["redirect_uri"] == ["https://example.com/auth/callback"]
    assert query["scope"] == ["tweet.read tweet.write users.read offline.access"]
    assert query["state"] == ["state123"]
    assert query["code_challenge"] == ["challenge123"]
    assert query["code_challenge_method"] == ["S256"]


@pytest.mark.asyncio
async def test_exchange_code_success(httpx_mock) -> None:
    httpx_mock.add_response(
        url=X_TOKEN_URL,
        method="POST",
        json={
            "token_type": "bearer",
            "access_token": "access-1",
            "refresh_token": "refresh-1",
            "expires_in": 7200,
            "scope": "tweet.read",
        },
    )

    token = await exchange_code(
        client_id="id",
        client_secret="secret",
        code="code123",
        redirect_uri="https://example.com/auth/callback",
        code_verifier="verifier123",
    )

    assert token.access_token == "access-1"
    assert token.refresh_token == "refresh-1"


@pytest.mark.asyncio
async def test_exchange_code_sends_form_and_basic_auth(httpx_mock) -> None:
    httpx_mock.add_response(url=X_TOKEN_URL, method="POST", json={"access_token": "access-1"})

    await exchange_code(
        client_id="id",
        client_secret="secret",
        code="code123",
        redirect_uri="https://example.com/auth/callback",
        code_verifier="verifier123",
    )

    request = httpx_mock.get_request()
    expected_basic = base64.b64encode(b"id:secret").decode("ascii")
    form = urllib.parse.parse_qs(request.content.decode("utf-8"))

    assert request.headers["authorization"] == f"Basic {expected_basic}"
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert form == {
        "grant_type": ["authorization_code"],
        "code": ["code123"],
        "redirect_uri": ["https://example.com/auth/callback"],
        "code_verifier": ["verifier123"],
        "client_id": ["id"],
        "client_secret": ["secret"],
    }


@pytest.mark.asyncio
async def test_exchange_code_without_refresh_token(httpx_mock) -> None:
    httpx_mock.add_response(url=X_TOKEN_URL, method="POST", json={"access_token": "access-1"})

    token = await exchange_code(
        client_id="id",
        client_secret="secret",
        code="code123",
        redirect_uri="https://example.com/auth/callback",
        code_verifier="verifier123",
    )

    assert token.refresh_token is None


@pytest.mark.asyncio
async def test_exchange_code_error(httpx_mock) -> None:
    httpx_mock.add_response(url=X_TOKEN_URL, method="POST", status_code=400, text="invalid_grant")

    with pytest.raises(TokenExchangeError, match="Token request failed") as excinfo:
        await exchange_code(
            client_id="id",
            client_secret="secret",
            code="bad-code",
            redirect_uri="https://example.com/auth/callback",
            code_verifier="verifier123",
        )

    assert excinfo.value.status_code == 400
    assert excinfo.value.body == "invalid_grant"


def test_token_response_requires_access_token() -> None:
    with pytest.raises(RuntimeError, match="access_token"):
        TokenResponse.from_payload({"refresh_token": "r"})


def test_token_response_ignores_unexpected_metadata() -> None:
    token = TokenResponse.from_payload(
        {"access_token": "access-1", "scope": ["tweet.read"], "expires_in": "soon"}
    )

    assert token == TokenResponse(access_token="access-1")
