"""Daily picture-of-the-day acquisition and rendition toolkit."""

__version__ = "0.1.0"
