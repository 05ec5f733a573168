"""
Transform 模块 - 像素滤镜

职责：
- 亮度仿射调整、查找表映射（负片）、灰度转换
- 平滑缩放
"""

from .ops import (
    GREY_OP,
    NEGATIVE_OP,
    GreyscaleOp,
    LookupOp,
    RescaleOp,
    resolve_interpolation,
    scaled_instance,
)

__all__ = [
    "GREY_OP",
    "NEGATIVE_OP",
    "GreyscaleOp",
    "LookupOp",
    "RescaleOp",
    "resolve_interpolation",
    "scaled_instance",
]
