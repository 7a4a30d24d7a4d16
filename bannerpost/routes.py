from __future__ import annotations

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from auth.cookies import read_access_token

from .constants import BANNER_PRESETS, LOGGER, MAX_BANNER_SIDE
from .env import ConfigurationError, Settings
from .images import DIMENSION_LIST, InvalidDataURIError, decode_data_uri, resize_all
from .publish import publish_images, translate_failure
from .x_api import MediaUploader, UserClient, XApiError


def default_uploader_factory(settings: Settings) -> MediaUploader:
    return MediaUploader(
        settings.media_credentials(),
        timeout=settings.x_api_timeout,
        debug=settings.debug,
    )


def default_user_client_factory(access_token: str, settings: Settings) -> UserClient:
    return UserClient(access_token, timeout=settings.x_api_timeout, debug=settings.debug)


class BannerRoutes:
    def __init__(
        self,
        settings: Settings,
        *,
        uploader_factory=default_uploader_factory,
        user_client_factory=default_user_client_factory,
    ) -> None:
        self.settings = settings
        self._uploader_factory = uploader_factory
        self._user_client_factory = user_client_factory

    def routes(self) -> list[Route]:
        return [
            Route("/dimensions", self._handle_dimensions, methods=["GET"]),
            Route("/resize", self._handle_resize, methods=["POST"]),
            Route("/publish", self._handle_publish, methods=["POST"]),
        ]

    async def _handle_dimensions(self, request: Request) -> Response:
        del request
        return JSONResponse({"dimensions": list(BANNER_PRESETS)})

    async def _handle_resize(self, request: Request) -> Response:
        payload = await self._json_body(request)
        if payload is None:
            return _error("Invalid JSON body", 400)

        image = payload.get("image")
        raw_dimensions = payload.get("dimensions")
        if not isinstance(image, str) or not image or not raw_dimensions:
            return _error("Missing image or dimensions", 400)

        try:
            dimensions = DIMENSION_LIST.validate_python(raw_dimensions)
        except ValidationError:
            return _error(
                f"Dimensions must be width/height pairs between 1 and {MAX_BANNER_SIDE} pixels",
                400,
            )

        try:
            image_bytes = decode_data_uri(image)
            resized = await resize_all(
                image_bytes,
                dimensions,
                timeout=self.settings.resize_timeout,
            )
        except InvalidDataURIError as error:
            return _error(str(error), 400)
        except Exception:
            LOGGER.exception("Image processing error")
            return _error("Failed to process image", 500)

        LOGGER.info("Resized image to %s", ", ".join(resized))
        return JSONResponse(resized)

    async def _handle_publish(self, request: Request) -> Response:
        access_token = read_access_token(request)
        if access_token is None:
            return _error("Not authenticated. Please login with X first.", 401)

        payload = await self._json_body(request)
        images = payload.get("images") if payload is not None else None
        if not isinstance(images, dict) or not images:
            return _error("No images provided", 400)
        if not all(isinstance(value, str) for value in images.values()):
            return _error("Images must be data-URI strings", 400)

        try:
            uploader = self._uploader_factory(self.settings)
        except ConfigurationError as error:
            LOGGER.error("Cannot publish to X: %s", error)
            return _error("Internal server error", 500, details="X media upload is not configured")

        user_client = self._user_client_factory(access_token, self.settings)
        try:
            async with uploader, user_client:
                post = await publish_images(images, uploader=uploader, user_client=user_client)
        except XApiError as error:
            LOGGER.error(
                "X API error kind=%s status=%s message=%s transaction=%s wait=%s payload=%s",
                error.kind.value,
                error.status_code,
                error.message,
                error.transaction_id,
                error.wait_seconds,
                error.payload,
            )
            status_code, body = translate_failure(error)
            return JSONResponse(body, status_code=status_code)
        except Exception as error:
            LOGGER.exception("Publish failed")
            return _error("Internal server error", 500, details=str(error))

        LOGGER.info("Published post %s", post.get("id"))
        return JSONResponse({"success": True, "post": post})

    async def _json_body(self, request: Request) -> dict | None:
        try:
            payload = await request.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        return payload


def _error(message: str, status_code: int, *, details: str | None = None) -> JSONResponse:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(body, status_code=status_code)
