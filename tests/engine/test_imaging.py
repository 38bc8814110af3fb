from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from potd_crawler.engine.imaging import ImageTransformer, floyd_steinberg
from potd_crawler.errors import ImageDecodeError


def _open(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def test_scale_without_dimensions_returns_input(png_factory) -> None:
    payload = png_factory()
    assert ImageTransformer().scale(payload) is payload


@pytest.mark.parametrize(
    ("width", "height", "expected"),
    [
        (100, 50, (100, 50)),
        (20, None, (20, 10)),
        (None, 25, (50, 25)),
        (1, 1, (1, 1)),
    ],
)
def test_scale_dimensions(png_factory, width, height, expected) -> None:
    payload = png_factory(width=200, height=100)
    result = _open(ImageTransformer().scale(payload, width, height))
    assert result.size == expected
    assert result.mode == "RGB"


def test_scale_one_sided_rounds_down_and_never_below_one(png_factory) -> None:
    payload = png_factory(width=300, height=7)
    assert _open(ImageTransformer().scale(payload, width=100)).size == (100, 2)
    assert _open(ImageTransformer().scale(payload, width=10)).size == (10, 1)


def test_scale_rejects_non_positive(png_factory) -> None:
    with pytest.raises(ValueError):
        ImageTransformer().scale(png_factory(), width=0)


@pytest.mark.parametrize(
    ("source", "target"),
    [
        ((1200, 600), (800, 480)),
        ((300, 900), (800, 480)),
        ((10, 7), (800, 480)),
        ((800, 480), (800, 480)),
        ((333, 333), (101, 57)),
    ],
)
def test_cover_fit_fills_target_exactly(png_factory, source, target) -> None:
    payload = png_factory(width=source[0], height=source[1])
    result = _open(ImageTransformer().cover_fit_center(payload, *target))
    assert result.size == target


def test_cover_fit_crops_centre(png_factory) -> None:
    # Left and right thirds black, centre white: the centre should survive.
    image = Image.new("RGB", (300, 100), (0, 0, 0))
    image.paste((255, 255, 255), (100, 0, 200, 100))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    result = _open(ImageTransformer().cover_fit_center(buffer.getvalue(), 100, 100))
    assert result.getpixel((50, 50)) == (255, 255, 255)


def test_dither_output_is_strictly_bilevel(png_factory) -> None:
    result = _open(ImageTransformer(seed=1).dither(png_factory(width=64, height=48)))
    assert result.mode == "1"
    assert result.size == (64, 48)
    values = set(np.asarray(result.convert("L")).ravel().tolist())
    assert values <= {0, 255}


def test_dither_mid_grey_is_roughly_half_black(png_factory) -> None:
    result = _open(ImageTransformer(seed=7).dither(png_factory(width=80, height=60)))
    pixels = np.asarray(result.convert("L"))
    black_share = float((pixels == 0).mean())
    assert 0.4 <= black_share <= 0.6


def test_dither_extremes_stay_flat(png_factory) -> None:
    transformer = ImageTransformer(seed=3)
    white = np.asarray(_open(transformer.dither(png_factory(color=(255, 255, 255)))).convert("L"))
    black = np.asarray(_open(transformer.dither(png_factory(color=(0, 0, 0)))).convert("L"))
    assert (white == 255).all()
    assert (black == 0).all()


def test_dither_is_repeatable_with_seed(png_factory) -> None:
    payload = png_factory(width=32, height=32)
    first = ImageTransformer(seed=11).dither(payload)
    second = ImageTransformer(seed=11).dither(payload)
    assert first == second


def test_dither_flattens_transparency_onto_white(png_factory) -> None:
    payload = png_factory(mode="RGBA", color=(0, 0, 0, 0))
    pixels = np.asarray(_open(ImageTransformer(seed=1).dither(payload)).convert("L"))
    assert (pixels == 255).all()


def test_floyd_steinberg_diffuses_error_forward() -> None:
    pixels = np.full((4, 4), 100.0)
    white = floyd_steinberg(pixels)
    assert white.dtype == bool
    # 100 is below the midpoint, so the first pixel is black and its error pushes later pixels up.
    assert not white[0, 0]
    assert white.any()


def test_render_display_matches_panel(png_factory) -> None:
    result = _open(ImageTransformer(seed=5).render_display(png_factory(width=123, height=456), 800, 480))
    assert result.size == (800, 480)
    assert result.mode == "1"


@pytest.mark.parametrize("operation", ["scale", "cover", "dither"])
def test_corrupt_input_raises(operation: str) -> None:
    transformer = ImageTransformer()
    garbage = b"not an image at all"
    with pytest.raises(ImageDecodeError):
        if operation == "scale":
            transformer.scale(garbage, width=10)
        elif operation == "cover":
            transformer.cover_fit_center(garbage, 10, 10)
        else:
            transformer.dither(garbage)
