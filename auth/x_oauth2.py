from __future__ import annotations

import base64
import hashlib
import secrets
import urllib.parse
from dataclasses import dataclass

import httpx

X_AUTHORIZE_URL = "https://x.com/i/oauth2/authorize"
X_TOKEN_URL = "https://api.x.com/2/oauth2/token"


class TokenExchangeError(RuntimeError):
    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Token request failed with status {status_code}: {body}")
        self.status_code = status_code
        self.body = body


@dataclass
class TokenResponse:
    access_token: str
    refresh_token: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "TokenResponse":
        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")

        if not isinstance(access_token, str) or not access_token:
            raise RuntimeError("Token response missing access_token.")
        if not isinstance(refresh_token, str) or not refresh_token:
            refresh_token = None

        return cls(access_token=access_token, refresh_token=refresh_token)


def generate_state() -> str:
    return secrets.token_hex(32)


def generate_code_verifier() -> str:
    return secrets.token_hex(32)


def generate_code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("utf-8").rstrip("=")


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: list[str],
    state: str,
    code_challenge: str,
) -> str:
    query = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": " ".join(scopes),
        "state": state,
        "code_challenge": code_challenge,
        "code_challenge_method": "S256",
    }
    return f"{X_AUTHORIZE_URL}?{urllib.parse.urlencode(query)}"


async def exchange_code(
    client_id: str,
    client_secret: str,
    code: str,
    redirect_uri: str,
    code_verifier: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> TokenResponse:
    """Trade an authorization code for tokens.

    The client credentials go both in the form body and as HTTP Basic auth;
    X accepts either channel depending on the app type.
    """
    own_client = client is None
    http_client = client or httpx.AsyncClient(timeout=timeout)
    payload = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
        "code_verifier": code_verifier,
        "client_id": client_id,
        "client_secret": client_secret,
    }

    try:
        response = await http_client.post(
            X_TOKEN_URL,
            data=payload,
            auth=(client_id, client_secret),
        )
    finally:
        if own_client:
            await http_client.aclose()

    if not response.is_success:
        raise TokenExchangeError(response.status_code, response.text)

    return TokenResponse.from_payload(response.json())
