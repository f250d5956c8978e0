"""Conversion errors."""


class ConversionError(Exception):
    """Raised when an external conversion step produced no usable output."""


class ImageDecodeError(Exception):
    """Raised when image bytes cannot be decoded or re-encoded."""
