"""Detect vector (SVG) payloads and render them to PNG."""

from __future__ import annotations

from ..errors import RasterConversionError

_HEAD_BYTES = 100
_DEEP_BYTES = 1024


def _sniff(data: bytes, limit: int) -> str:
    return data[:limit].decode("utf-8", errors="ignore").lower()


def is_vector_format(data: bytes) -> bool:
    """Return True when the payload looks like SVG markup."""

    head = _sniff(data, _HEAD_BYTES).strip()
    if "<svg" in head:
        return True
    if "<?xml" in head:
        # An XML preamble or doctype can push the root tag further in.
        return "<svg" in _sniff(data, _DEEP_BYTES)
    return False


def convert_to_raster(data: bytes) -> bytes:
    """Render SVG bytes to a PNG payload."""

    try:
        import cairosvg
    except (ImportError, OSError) as exc:  # pragma: no cover - depends on system cairo
        raise RasterConversionError("SVG conversion requires cairosvg and libcairo") from exc
    try:
        png = cairosvg.svg2png(bytestring=data)
    except Exception as exc:  # noqa: BLE001
        raise RasterConversionError("Failed to convert SVG to PNG") from exc
    if not png:
        raise RasterConversionError("SVG conversion produced no output")
    return png


__all__ = ["convert_to_raster", "is_vector_format"]
