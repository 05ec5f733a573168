"""
像素滤镜

所有滤镜只作用于颜色通道，alpha 通道（如有）保持不变。
每个滤镜提供 filter(PixelBuffer) -> PixelBuffer，返回新缓冲区。
"""

import cv2
import numpy as np

from ..context import PixelBuffer
from ..errors import InvalidArgument, InvalidDimension

INTERPOLATIONS = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "area": cv2.INTER_AREA,
    "lanczos4": cv2.INTER_LANCZOS4,
}


def resolve_interpolation(name: str) -> int:
    """插值方式名 -> cv2 常量"""
    try:
        return INTERPOLATIONS[name.lower()]
    except (KeyError, AttributeError):
        raise InvalidArgument(
            f"未知的插值方式: {name!r}，可选: {sorted(INTERPOLATIONS)}"
        ) from None


class LookupOp:
    """按 256 项查找表逐通道映射"""

    def __init__(self, table: np.ndarray):
        table = np.asarray(table)
        if table.shape != (256,):
            raise InvalidArgument(f"查找表必须有 256 项，当前: {table.shape}")
        self.table = np.clip(table, 0, 255).astype(np.uint8)

    def filter(self, buffer: PixelBuffer) -> PixelBuffer:
        out = buffer.copy()
        out.rgb[...] = self.table[buffer.rgb]
        return out


class RescaleOp(LookupOp):
    """
    仿射亮度调整

    out = clamp(in * scale + offset, 0, 255)，越界截断而非回绕。
    """

    def __init__(self, scale: float, offset: float):
        self.scale = float(scale)
        self.offset = float(offset)
        values = np.arange(256, dtype=np.float64) * self.scale + self.offset
        super().__init__(np.clip(np.trunc(values), 0, 255))


class GreyscaleOp:
    """转换为保持亮度的灰度，三个颜色通道写入相同的亮度值"""

    def filter(self, buffer: PixelBuffer) -> PixelBuffer:
        rgb = np.ascontiguousarray(buffer.rgb)
        grey = cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)
        out = buffer.copy()
        out.rgb[...] = grey[:, :, np.newaxis]
        return out


# 负片：255 - x
NEGATIVE_OP = LookupOp(255 - np.arange(256))
GREY_OP = GreyscaleOp()


def scaled_instance(
    buffer: PixelBuffer,
    width: int,
    height: int,
    upscale: int = cv2.INTER_LANCZOS4,
    downscale: int = cv2.INTER_AREA
) -> PixelBuffer:
    """
    平滑缩放到 (width, height)

    两个方向都不放大时使用 downscale 插值，否则使用 upscale 插值。

    Raises:
        InvalidDimension: 目标尺寸不为正数
    """
    if width <= 0 or height <= 0:
        raise InvalidDimension(f"缩放尺寸必须为正数，当前: {width}x{height}")

    if (width, height) == buffer.size:
        return buffer.copy()

    shrinking = width <= buffer.width and height <= buffer.height
    resized = cv2.resize(
        np.ascontiguousarray(buffer.pixels),
        (width, height),  # cv2.resize 使用 (width, height)
        interpolation=downscale if shrinking else upscale
    )
    if resized.ndim == 2:
        resized = resized[:, :, np.newaxis]
    return PixelBuffer(resized, buffer.layout)
