import pytest

from tests.image_helpers import make_png, to_data_uri


@pytest.fixture
def one_pixel_png() -> bytes:
    return make_png(1, 1)


@pytest.fixture
def one_pixel_data_uri(one_pixel_png: bytes) -> str:
    return to_data_uri(one_pixel_png)
