from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response

from auth.models import PkceSession, TokenPair

STATE_COOKIE = "oauth_state"
CODE_VERIFIER_COOKIE = "oauth_code_verifier"
ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

PKCE_MAX_AGE = 60 * 60
ACCESS_TOKEN_MAX_AGE = 2 * 60 * 60
REFRESH_TOKEN_MAX_AGE = 30 * 24 * 60 * 60


def _set_cookie(response: Response, key: str, value: str, max_age: int, secure: bool) -> None:
    response.set_cookie(
        key,
        value,
        max_age=max_age,
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )


def set_pkce_cookies(response: Response, session: PkceSession, *, secure: bool) -> None:
    _set_cookie(response, STATE_COOKIE, session.state, PKCE_MAX_AGE, secure)
    _set_cookie(response, CODE_VERIFIER_COOKIE, session.code_verifier, PKCE_MAX_AGE, secure)


def read_pkce_cookies(request: Request) -> PkceSession | None:
    state = request.cookies.get(STATE_COOKIE)
    code_verifier = request.cookies.get(CODE_VERIFIER_COOKIE)
    if not state or not code_verifier:
        return None
    return PkceSession(state=state, code_verifier=code_verifier)


def clear_pkce_cookies(response: Response, *, secure: bool) -> None:
    for key in (STATE_COOKIE, CODE_VERIFIER_COOKIE):
        response.delete_cookie(key, path="/", secure=secure, httponly=True, samesite="lax")


def set_token_cookies(response: Response, tokens: TokenPair, *, secure: bool) -> None:
    _set_cookie(response, ACCESS_TOKEN_COOKIE, tokens.access_token, ACCESS_TOKEN_MAX_AGE, secure)
    if tokens.refresh_token:
        _set_cookie(
            response,
            REFRESH_TOKEN_COOKIE,
            tokens.refresh_token,
            REFRESH_TOKEN_MAX_AGE,
            secure,
        )


def read_access_token(request: Request) -> str | None:
    return request.cookies.get(ACCESS_TOKEN_COOKIE) or None
