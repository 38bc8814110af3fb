"""Pixel operations producing the scaled, cover-fit and dithered renditions.

All operations take an encoded image payload and return a PNG payload. They
keep no state between calls, so they can run concurrently on any worker.

Example:
    transformer = ImageTransformer()
    thumb = transformer.scale(payload, width=300)
    panel = transformer.render_display(payload, 800, 480)
"""

from __future__ import annotations

import io

import numpy as np
from PIL import Image

from ..errors import ImageDecodeError

LUMA_WEIGHTS = (0.299, 0.587, 0.114)
BACKGROUND = (255, 255, 255)
RESAMPLE = Image.Resampling.BICUBIC


def _decode(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except Exception as exc:  # noqa: BLE001
        raise ImageDecodeError("Image data is corrupted or in an unsupported format") from exc
    return image


def _to_rgb(image: Image.Image) -> Image.Image:
    """Return an RGB copy, flattening any alpha channel against white."""

    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        flattened = Image.new("RGB", rgba.size, BACKGROUND)
        flattened.paste(rgba, mask=rgba.split()[3])
        return flattened
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _encode(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _check_dimension(name: str, value: int | None) -> None:
    if value is not None and value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")


def floyd_steinberg(pixels: np.ndarray, threshold: float = 128.0) -> np.ndarray:
    """Quantise a 2-D luma array to two levels with forward error diffusion.

    Returns a boolean array where ``True`` marks a white pixel. Error goes to
    the right (7/16), bottom-left (3/16), bottom (5/16) and bottom-right
    (1/16) neighbours; visited pixels never receive error.
    """

    height, width = pixels.shape
    work = pixels.astype(np.float64, copy=True)
    white = np.zeros((height, width), dtype=bool)
    for y in range(height):
        row = work[y].tolist()
        errors = [0.0] * width
        row_white = [False] * width
        carry = 0.0
        for x in range(width):
            old = row[x] + carry
            if old < threshold:
                new = 0.0
            else:
                new = 255.0
                row_white[x] = True
            err = old - new
            errors[x] = err
            carry = err * 7 / 16
        white[y] = row_white
        if y + 1 < height:
            err_row = np.asarray(errors)
            below = work[y + 1]
            below += err_row * (5 / 16)
            below[:-1] += err_row[1:] * (3 / 16)
            below[1:] += err_row[:-1] * (1 / 16)
    return white


class ImageTransformer:
    """Stateless scale / cover-fit / dither operations over encoded images.

    Args:
        noise_amplitude: Half-width of the uniform noise added to luma before
            dithering, on a 0-255 scale.
        threshold: Quantisation midpoint.
        seed: Optional seed for the noise generator. Each call builds its own
            generator, so a seeded transformer produces repeatable output.
    """

    def __init__(
        self,
        noise_amplitude: float = 5.0,
        threshold: float = 128.0,
        seed: int | None = None,
    ) -> None:
        self.noise_amplitude = noise_amplitude
        self.threshold = threshold
        self.seed = seed

    def scale(self, data: bytes, width: int | None = None, height: int | None = None) -> bytes:
        """Resize to the requested box.

        Neither dimension: the input is returned untouched. Both: exact size,
        aspect ratio ignored. One: the other follows the original aspect
        ratio, rounded down.
        """

        if width is None and height is None:
            return data
        _check_dimension("width", width)
        _check_dimension("height", height)
        image = _to_rgb(_decode(data))
        original_width, original_height = image.size

        if width is not None and height is not None:
            new_width, new_height = width, height
        elif width is not None:
            new_width = width
            new_height = int(width / original_width * original_height)
        else:
            new_height = height
            new_width = int(height / original_height * original_width)

        resized = image.resize((max(1, new_width), max(1, new_height)), RESAMPLE)
        return _encode(resized)

    def cover_fit_center(self, data: bytes, target_width: int, target_height: int) -> bytes:
        """Scale to fill ``target_width x target_height`` and crop the centred overflow."""

        _check_dimension("target_width", target_width)
        _check_dimension("target_height", target_height)
        image = _to_rgb(_decode(data))
        original_width, original_height = image.size

        scale = max(target_width / original_width, target_height / original_height)
        new_width = max(target_width, int(original_width * scale))
        new_height = max(target_height, int(original_height * scale))
        resized = image.resize((new_width, new_height), RESAMPLE)

        canvas = Image.new("RGB", (target_width, target_height), BACKGROUND)
        # Offsets are <= 0; truncate toward zero so odd overflow favours the top-left.
        offset_x = int((target_width - new_width) / 2)
        offset_y = int((target_height - new_height) / 2)
        canvas.paste(resized, (offset_x, offset_y))
        return _encode(canvas)

    def dither(self, data: bytes) -> bytes:
        """Floyd-Steinberg dither to a strict 1-bit PNG.

        Small zero-mean noise is injected before quantisation to break up
        banding in flat regions, so unseeded output differs between runs.
        """

        image = _to_rgb(_decode(data))
        rgb = np.asarray(image, dtype=np.float64)
        red, green, blue = LUMA_WEIGHTS
        luma = rgb[..., 0] * red + rgb[..., 1] * green + rgb[..., 2] * blue

        rng = np.random.default_rng(self.seed)
        noise = (rng.random(luma.shape) - 0.5) * (2 * self.noise_amplitude)
        pixels = np.clip(luma + noise, 0.0, 255.0)

        white = floyd_steinberg(pixels, self.threshold)
        levels = np.where(white, 255, 0).astype(np.uint8)
        bilevel = Image.fromarray(levels).convert("1", dither=Image.Dither.NONE)
        return _encode(bilevel)

    def render_display(self, data: bytes, width: int, height: int) -> bytes:
        """Cover-fit to the display resolution, then dither for the 1-bit panel."""

        return self.dither(self.cover_fit_center(data, width, height))


__all__ = ["ImageTransformer", "floyd_steinberg"]
