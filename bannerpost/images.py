"""Data-URI handling and contain-fit banner resizing with Pillow."""

from __future__ import annotations

import asyncio
import base64
import io
from collections.abc import Iterable
from typing import Annotated

from PIL import Image, ImageOps
from pydantic import BaseModel, Field, TypeAdapter

from .constants import MAX_BANNER_SIDE

WHITE = (255, 255, 255, 255)
PNG_DATA_URI_PREFIX = "data:image/png;base64,"


class InvalidDataURIError(ValueError):
    pass


BannerSide = Annotated[int, Field(gt=0, le=MAX_BANNER_SIDE)]


class Dimension(BaseModel):
    width: BannerSide
    height: BannerSide

    @property
    def label(self) -> str:
        return f"{self.width}x{self.height}"


DIMENSION_LIST = TypeAdapter(list[Dimension])


def split_data_uri(data_uri: str) -> str:
    """Return the base64 payload after the first comma of a data-URI."""
    _, _, payload = data_uri.partition(",")
    if not payload:
        raise InvalidDataURIError("Invalid base64 image format")
    return payload


def decode_data_uri(data_uri: str) -> bytes:
    return base64.b64decode(split_data_uri(data_uri))


def encode_png_data_uri(data: bytes) -> str:
    return PNG_DATA_URI_PREFIX + base64.b64encode(data).decode("ascii")


def contain_resize(image_bytes: bytes, width: int, height: int) -> bytes:
    """Scale the image to fit inside width x height and pad it with white.

    The output is a PNG of exactly the requested size with the scaled image
    centered on the canvas. Transparency inside the source image is kept.
    """
    with Image.open(io.BytesIO(image_bytes)) as source:
        source.load()
        rgba = source.convert("RGBA")

    fitted = ImageOps.contain(rgba, (width, height), Image.Resampling.LANCZOS)
    canvas = Image.new("RGBA", (width, height), WHITE)
    offset = ((width - fitted.width) // 2, (height - fitted.height) // 2)
    canvas.paste(fitted, offset)

    output = io.BytesIO()
    canvas.save(output, format="PNG")
    return output.getvalue()


async def resize_all(
    image_bytes: bytes,
    dimensions: Iterable[Dimension],
    *,
    timeout: float | None = None,
) -> dict[str, str]:
    """Resize one image to every dimension concurrently.

    The join fails the whole batch: the first failing resize propagates and
    no partial mapping is returned. Keys come from the input dimensions, so
    completion order never changes the result.
    """
    targets = list(dimensions)
    batch = asyncio.gather(
        *(
            asyncio.to_thread(contain_resize, image_bytes, target.width, target.height)
            for target in targets
        )
    )
    resized = await asyncio.wait_for(batch, timeout=timeout)
    return {
        target.label: encode_png_data_uri(data) for target, data in zip(targets, resized)
    }
