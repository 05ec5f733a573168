"""
ColorCodec - 十六进制颜色解析

rrggbb 格式，无前导 '#'，不接受 alpha。
"""

import re

from ..context import Color
from ..errors import InvalidColorFormat

_HEX_RGB = re.compile(r"[0-9a-fA-F]{6}")


class ColorCodec:
    """十六进制颜色编解码器"""

    @staticmethod
    def parse(hex_rgb: str) -> Color:
        """
        解析颜色字符串

        Args:
            hex_rgb: 恰好 6 位十六进制数字，如 "1a2b3c"

        Returns:
            不透明的 Color

        Raises:
            InvalidColorFormat: 输入不是 6 位十六进制字符串
        """
        if not isinstance(hex_rgb, str) or _HEX_RGB.fullmatch(hex_rgb) is None:
            raise InvalidColorFormat(f"需要 rrggbb 十六进制颜色，当前: {hex_rgb!r}")

        return Color(
            int(hex_rgb[0:2], 16),
            int(hex_rgb[2:4], 16),
            int(hex_rgb[4:6], 16),
        )

    @staticmethod
    def format(color: Color) -> str:
        """Color -> 小写 rrggbb"""
        return f"{color.red:02x}{color.green:02x}{color.blue:02x}"


def hex_to_color(hex_rgb: str) -> Color:
    """便捷函数：解析十六进制颜色"""
    return ColorCodec.parse(hex_rgb)
