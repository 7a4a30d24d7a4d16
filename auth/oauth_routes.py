from __future__ import annotations

import hmac

from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from auth import x_oauth2
from auth.cookies import (
    clear_pkce_cookies,
    read_access_token,
    read_pkce_cookies,
    set_pkce_cookies,
    set_token_cookies,
)
from auth.models import PkceSession, TokenPair
from auth.urls import root_redirect_url
from bannerpost.constants import AUTH_LOGGER as LOGGER
from bannerpost.env import ConfigurationError, Settings


class OAuthRoutes:
    """Browser-facing X OAuth2 PKCE flow.

    Nothing is kept on the server: the PKCE session and the resulting tokens
    live in http-only cookies scoped to the browser that started the flow.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        exchange_code_fn=x_oauth2.exchange_code,
    ) -> None:
        self.settings = settings
        self._exchange_code_fn = exchange_code_fn

    def routes(self) -> list[Route]:
        return [
            Route("/auth/start", self._handle_start, methods=["GET"]),
            Route("/auth/callback", self._handle_callback, methods=["GET"]),
            Route("/auth/check", self._handle_check, methods=["GET"]),
        ]

    # -- handlers --------------------------------------------------------------

    async def _handle_start(self, request: Request) -> Response:
        del request
        try:
            self.settings.require_oauth2()
        except ConfigurationError as error:
            LOGGER.error("Cannot start X authentication: %s", error)
            return JSONResponse(
                {"error": "Failed to initialize X authentication"},
                status_code=500,
            )

        session = PkceSession(
            state=x_oauth2.generate_state(),
            code_verifier=x_oauth2.generate_code_verifier(),
        )
        url = x_oauth2.build_authorization_url(
            client_id=self.settings.client_id,
            redirect_uri=self.settings.callback_url,
            scopes=self.settings.scopes,
            state=session.state,
            code_challenge=x_oauth2.generate_code_challenge(session.code_verifier),
        )
        LOGGER.info("Starting X authorization (redirect_uri=%s)", self.settings.callback_url)

        response = JSONResponse({"url": url})
        set_pkce_cookies(response, session, secure=self.settings.production)
        return response

    async def _handle_callback(self, request: Request) -> Response:
        try:
            return await self._complete_callback(request)
        except Exception:
            LOGGER.exception("X callback failed")
            return self._redirect(request, {"error": "callback_error"})

    async def _complete_callback(self, request: Request) -> Response:
        params = request.query_params

        error = params.get("error")
        if error:
            error_description = params.get("error_description", "")
            LOGGER.warning("X authorization returned an error: %s (%s)", error, error_description)
            return self._redirect(
                request,
                {"error": error, "error_description": error_description},
            )

        state = params.get("state")
        code = params.get("code")
        session = read_pkce_cookies(request)
        if (
            not state
            or not code
            or session is None
            or not hmac.compare_digest(state.encode(), session.state.encode())
        ):
            LOGGER.warning("Rejected X callback with missing or mismatched state")
            return self._redirect(request, {"error": "invalid_state"})

        try:
            exchanged = await self._exchange_code_fn(
                client_id=self.settings.client_id,
                client_secret=self.settings.client_secret,
                code=code,
                redirect_uri=self.settings.callback_url,
                code_verifier=session.code_verifier,
                timeout=self.settings.x_api_timeout,
            )
        except x_oauth2.TokenExchangeError as error:
            LOGGER.error(
                "Token exchange failed with status %s: %s",
                error.status_code,
                error.body,
            )
            return self._redirect(request, {"error": "token_exchange_failed"})

        response = self._redirect(request)
        set_token_cookies(
            response,
            TokenPair(
                access_token=exchanged.access_token,
                refresh_token=exchanged.refresh_token,
            ),
            secure=self.settings.production,
        )
        clear_pkce_cookies(response, secure=self.settings.production)
        return response

    async def _handle_check(self, request: Request) -> Response:
        return JSONResponse({"isAuthenticated": read_access_token(request) is not None})

    # -- helpers ---------------------------------------------------------------

    def _redirect(self, request: Request, params: dict[str, str] | None = None) -> Response:
        return RedirectResponse(
            url=root_redirect_url(str(request.base_url), params),
            status_code=302,
        )
