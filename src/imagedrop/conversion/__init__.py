"""Document conversion adapters."""

from .errors import ConversionError, ImageDecodeError
from .office import DocumentConverter, LibreOfficeConverter, PowerShellConverter, build_converter
from .raster import PdfRasterizer, PopplerRasterizer, encode_png, normalize_to_png, svg_to_png

__all__ = [
    "ConversionError",
    "ImageDecodeError",
    "DocumentConverter",
    "LibreOfficeConverter",
    "PowerShellConverter",
    "build_converter",
    "PdfRasterizer",
    "PopplerRasterizer",
    "encode_png",
    "normalize_to_png",
    "svg_to_png",
]
