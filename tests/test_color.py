"""
ColorCodec 单元测试
"""

import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from rasterkit.color import ColorCodec, hex_to_color
from rasterkit.context import Color
from rasterkit.errors import InvalidColorFormat


class TestColorCodec:
    """ColorCodec 测试类"""

    def test_parse(self):
        """测试标准解析"""
        assert ColorCodec.parse("1a2b3c") == Color(26, 42, 60)

    def test_parse_uppercase(self):
        """测试大写十六进制"""
        assert ColorCodec.parse("FF00aa") == Color(255, 0, 170)

    def test_parse_is_opaque(self):
        """测试解析结果不透明"""
        assert ColorCodec.parse("000000").alpha == 255

    @pytest.mark.parametrize("bad", [
        "abc",          # 太短
        "zzzzzz",       # 非十六进制
        "#1a2b3c",      # 带前导 '#'
        "1a2b3c4d",     # 带 alpha
        "1a2b3c ",      # 尾随空格
        "",
        None,
        0x1A2B3C,
    ])
    def test_parse_invalid(self, bad):
        """测试非法输入抛出 InvalidColorFormat"""
        with pytest.raises(InvalidColorFormat, match="rrggbb"):
            ColorCodec.parse(bad)

    def test_invalid_is_value_error(self):
        """测试与 ValueError 兼容"""
        with pytest.raises(ValueError):
            ColorCodec.parse("xyz")

    def test_format(self):
        """测试格式化为小写 rrggbb"""
        assert ColorCodec.format(Color(26, 42, 60)) == "1a2b3c"
        assert ColorCodec.format(ColorCodec.parse("ABCDEF")) == "abcdef"

    def test_hex_to_color(self):
        """测试便捷函数"""
        assert hex_to_color("ff0000") == Color(255, 0, 0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
