"""Image description services."""

from .vision import (
    DescriptionKind,
    ImageDescriber,
    VisionDescriber,
    build_describer,
    resolve_api_key,
)

__all__ = [
    "DescriptionKind",
    "ImageDescriber",
    "VisionDescriber",
    "build_describer",
    "resolve_api_key",
]
