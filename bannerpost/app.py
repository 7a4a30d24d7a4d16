from __future__ import annotations

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from auth.oauth_routes import OAuthRoutes

from .constants import APP_VERSION
from .env import Settings
from .routes import BannerRoutes


async def health_route(request: Request) -> Response:
    del request
    return JSONResponse({"status": "ok", "version": APP_VERSION})


def build_app(
    settings: Settings,
    *,
    oauth_routes: OAuthRoutes | None = None,
    banner_routes: BannerRoutes | None = None,
) -> Starlette:
    oauth_routes = oauth_routes or OAuthRoutes(settings)
    banner_routes = banner_routes or BannerRoutes(settings)
    routes = [
        Route("/health", health_route, methods=["GET"]),
        *oauth_routes.routes(),
        *banner_routes.routes(),
    ]
    app = Starlette(routes=routes)
    app.state.settings = settings
    return app
