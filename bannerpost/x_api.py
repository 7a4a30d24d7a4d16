"""X API clients for the two credential contexts a publish needs.

Media upload only accepts the application-level OAuth1 key set, while the
post itself is made with the user's OAuth2 bearer token. Each context gets
its own ``httpx.AsyncClient`` so the credentials never mix.
"""

from __future__ import annotations

import enum

import httpx
from oauthlib.oauth1 import Client as OAuth1Client

from .env import MediaCredentials
from .http import (
    WAIT_SECONDS_EXTENSION,
    extract_error_message,
    handle_rate_limits,
    log_request,
    log_response,
)

X_API_BASE_URL = "https://api.x.com"
MEDIA_UPLOAD_URL = "https://upload.twitter.com/1.1/media/upload.json"


class FailureKind(enum.Enum):
    PERMISSION_DENIED = "permission_denied"
    RATE_LIMITED = "rate_limited"
    UPSTREAM = "upstream"
    NETWORK = "network"


class XApiError(RuntimeError):
    def __init__(
        self,
        kind: FailureKind,
        message: str,
        *,
        status_code: int | None = None,
        payload=None,
        transaction_id: str | None = None,
        wait_seconds: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.payload = payload
        self.transaction_id = transaction_id
        self.wait_seconds = wait_seconds


def classify_status(status_code: int) -> FailureKind:
    if status_code == 403:
        return FailureKind.PERMISSION_DENIED
    if status_code == 429:
        return FailureKind.RATE_LIMITED
    return FailureKind.UPSTREAM


def raise_for_x_error(response: httpx.Response) -> None:
    if response.status_code < 400:
        return

    try:
        payload = response.json()
    except ValueError:
        payload = {"raw": response.text}

    wait_seconds = response.extensions.get(WAIT_SECONDS_EXTENSION)
    raise XApiError(
        classify_status(response.status_code),
        extract_error_message(payload, response.status_code, wait_seconds),
        status_code=response.status_code,
        payload=payload,
        transaction_id=response.headers.get("x-transaction-id"),
        wait_seconds=wait_seconds,
    )


async def _send(client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TransportError as error:
        raise XApiError(FailureKind.NETWORK, f"Could not reach X: {error}") from error
    raise_for_x_error(response)
    return response


def _data_object(response: httpx.Response) -> dict:
    payload = response.json()
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        raise XApiError(
            FailureKind.UPSTREAM,
            "X API response is missing a data object.",
            status_code=response.status_code,
            payload=payload,
        )
    return data


def _event_hooks(debug: bool, request_hooks: list | None = None) -> dict[str, list]:
    hooks: dict[str, list] = {
        "request": list(request_hooks or []),
        "response": [handle_rate_limits],
    }
    if debug:
        hooks["request"].append(log_request)
        hooks["response"].append(log_response)
    return hooks


def build_oauth1_client(credentials: MediaCredentials) -> OAuth1Client:
    return OAuth1Client(
        credentials.api_key,
        client_secret=credentials.api_secret,
        resource_owner_key=credentials.access_token,
        resource_owner_secret=credentials.access_secret,
    )


def sign_oauth1_request(request: httpx.Request, oauth1_client: OAuth1Client) -> None:
    # Multipart bodies are not part of the OAuth1 signature base string.
    _, headers, _ = oauth1_client.sign(str(request.url), http_method=request.method)
    request.headers["Authorization"] = headers["Authorization"]


class MediaUploader:
    def __init__(
        self,
        credentials: MediaCredentials,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        debug: bool = False,
    ) -> None:
        self._oauth1_client = build_oauth1_client(credentials)

        async def sign_request(request: httpx.Request) -> None:
            sign_oauth1_request(request, self._oauth1_client)

        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            event_hooks=_event_hooks(debug, [sign_request]),
        )

    async def upload_png(self, data: bytes) -> str:
        response = await _send(
            self._client,
            "POST",
            MEDIA_UPLOAD_URL,
            files={"media": ("image.png", data, "image/png")},
        )
        payload = response.json()
        media_id = payload.get("media_id_string") if isinstance(payload, dict) else None
        if not isinstance(media_id, str) or not media_id:
            raise XApiError(
                FailureKind.UPSTREAM,
                "Media upload response is missing media_id_string.",
                status_code=response.status_code,
                payload=payload,
            )
        return media_id

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "MediaUploader":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class UserClient:
    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = X_API_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        debug: bool = False,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport,
            event_hooks=_event_hooks(debug),
        )

    async def me(self) -> dict:
        response = await _send(
            self._client,
            "GET",
            "/2/users/me",
            params={"user.fields": "id,name,username"},
        )
        return _data_object(response)

    async def create_post(self, text: str, media_ids: list[str]) -> dict:
        body: dict = {"text": text}
        if media_ids:
            body["media"] = {"media_ids": media_ids}
        response = await _send(self._client, "POST", "/2/tweets", json=body)
        return _data_object(response)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "UserClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
