"""
rasterkit - 内存光栅图像变换核心

对已解码的位图执行边框、亮度、颜色键、翻转、灰度、负片、平滑缩放、裁剪等变换，
并重新编码或预览结果。
"""

from .context import BorderStyle, ChannelLayout, Color, Composite, PixelBuffer, channel_layout_of
from .color import ColorCodec, hex_to_color
from .drawing import DrawingContext, paint
from .engine import TransformEngine, get_default_engine, load_engine
from .errors import (
    EncodeFailed,
    InvalidArgument,
    InvalidColorFormat,
    InvalidDimension,
    LoadFailed,
    OutOfBounds,
    RasterError,
    UnsupportedFormat,
)
from .image import Image

__version__ = "0.1.0"

__all__ = [
    "BorderStyle",
    "ChannelLayout",
    "Color",
    "ColorCodec",
    "Composite",
    "DrawingContext",
    "EncodeFailed",
    "Image",
    "InvalidArgument",
    "InvalidColorFormat",
    "InvalidDimension",
    "LoadFailed",
    "OutOfBounds",
    "PixelBuffer",
    "RasterError",
    "TransformEngine",
    "UnsupportedFormat",
    "channel_layout_of",
    "get_default_engine",
    "hex_to_color",
    "load_engine",
    "paint",
]
