"""
Color 模块 - 颜色编解码

职责：
- 解析 6 位十六进制 rrggbb 字符串
- 核心中唯一的输入校验边界
"""

from .codec import ColorCodec, hex_to_color

__all__ = ["ColorCodec", "hex_to_color"]
