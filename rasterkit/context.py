"""
Context - 数据模型

贯穿整个变换引擎的核心数据结构：通道布局、颜色、像素缓冲区。
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np

from .errors import InvalidArgument, InvalidDimension


class ChannelLayout(Enum):
    """像素通道布局"""

    RGB = "RGB"     # R, G, B
    ARGB = "ARGB"   # A, R, G, B（alpha 在最前）

    @property
    def channels(self) -> int:
        return 4 if self is ChannelLayout.ARGB else 3

    @property
    def has_alpha(self) -> bool:
        return self is ChannelLayout.ARGB


class BorderStyle(Enum):
    """边框样式"""

    PLAIN = "plain"
    RAISED = "raised"
    ETCHED = "etched"

    @classmethod
    def parse(cls, style: "BorderStyle | str | None") -> "BorderStyle":
        """
        解析边框样式

        Args:
            style: BorderStyle、样式名（不区分大小写）或 None

        Returns:
            BorderStyle，None 时为 PLAIN

        Raises:
            InvalidArgument: 无法识别的样式
        """
        if style is None:
            return cls.PLAIN
        if isinstance(style, cls):
            return style
        if isinstance(style, str):
            try:
                return cls(style.strip().lower())
            except ValueError:
                pass
        raise InvalidArgument(
            f"未知的边框样式: {style!r}，可选: {[s.value for s in cls]}"
        )


class Composite(Enum):
    """绘制合成规则"""

    SRC_OVER = "src_over"   # 按 alpha 叠加到目标
    SRC = "src"             # 直接替换（包括 alpha）


# AWT Color.brighter()/darker() 使用的系数
_SHADE_FACTOR = 0.7


@dataclass(frozen=True)
class Color:
    """8 位 RGB 颜色（可带 alpha）"""

    red: int
    green: int
    blue: int
    alpha: int = 255

    def __post_init__(self):
        for name in ("red", "green", "blue", "alpha"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise InvalidArgument(f"颜色分量 {name} 超出范围 [0, 255]: {value}")

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    @property
    def argb(self) -> int:
        """打包为 0xAARRGGBB"""
        return (self.alpha << 24) | (self.red << 16) | (self.green << 8) | self.blue

    @classmethod
    def from_argb(cls, value: int) -> "Color":
        return cls(
            red=(value >> 16) & 0xFF,
            green=(value >> 8) & 0xFF,
            blue=value & 0xFF,
            alpha=(value >> 24) & 0xFF,
        )

    def brighter(self) -> "Color":
        """浅一级的颜色（3D 边框高光）"""
        i = int(1.0 / (1.0 - _SHADE_FACTOR))
        r, g, b = self.rgb
        if r == 0 and g == 0 and b == 0:
            return Color(i, i, i, self.alpha)

        def lift(c: int) -> int:
            if 0 < c < i:
                c = i
            return min(int(c / _SHADE_FACTOR), 255)

        return Color(lift(r), lift(g), lift(b), self.alpha)

    def darker(self) -> "Color":
        """深一级的颜色（3D 边框阴影）"""
        return Color(
            max(int(self.red * _SHADE_FACTOR), 0),
            max(int(self.green * _SHADE_FACTOR), 0),
            max(int(self.blue * _SHADE_FACTOR), 0),
            self.alpha,
        )


BLACK = Color(0, 0, 0)


@dataclass(eq=False)
class PixelBuffer:
    """
    像素缓冲区 - 唯一的可变存储单元

    pixels 为 uint8 (H,W,C)，按行存储，索引为 [row, column, channel]。
    RGB 布局通道顺序 R,G,B；ARGB 布局通道顺序 A,R,G,B。
    构造时不复制 uint8 数组；包装进 Image 后数组即被冻结（writeable=False），
    需要保留可写副本时请使用 from_array。
    """

    pixels: np.ndarray
    layout: ChannelLayout

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] != self.layout.channels:
            raise InvalidDimension(
                f"像素数组必须是 (H,W,{self.layout.channels}) 格式，当前: {self.pixels.shape}"
            )
        if self.pixels.shape[0] <= 0 or self.pixels.shape[1] <= 0:
            raise InvalidDimension(f"宽高必须为正数，当前: {self.pixels.shape[:2]}")
        if self.pixels.dtype != np.uint8:
            self.pixels = np.clip(self.pixels, 0, 255).astype(np.uint8)

    @classmethod
    def allocate(cls, width: int, height: int, layout: ChannelLayout) -> "PixelBuffer":
        """
        分配新的缓冲区

        RGB 初始为黑色，ARGB 初始为全透明黑色。

        Raises:
            InvalidDimension: 宽或高不为正数
        """
        if width <= 0 or height <= 0:
            raise InvalidDimension(f"宽高必须为正数，当前: {width}x{height}")
        pixels = np.zeros((int(height), int(width), layout.channels), dtype=np.uint8)
        return cls(pixels, layout)

    @classmethod
    def from_array(cls, array: np.ndarray, layout: ChannelLayout | None = None) -> "PixelBuffer":
        """从 (H,W,3) 或 (H,W,4) 数组创建缓冲区（复制数据）"""
        array = np.asarray(array)
        if layout is None:
            if array.ndim != 3 or array.shape[2] not in (3, 4):
                raise InvalidDimension(f"像素数组必须是 (H,W,3) 或 (H,W,4)，当前: {array.shape}")
            layout = ChannelLayout.ARGB if array.shape[2] == 4 else ChannelLayout.RGB
        return cls(np.array(array, dtype=np.uint8, copy=True), layout)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def has_alpha(self) -> bool:
        return self.layout.has_alpha

    @property
    def rgb(self) -> np.ndarray:
        """颜色通道视图 (H,W,3)"""
        return self.pixels[:, :, 1:] if self.has_alpha else self.pixels

    @property
    def alpha(self) -> np.ndarray | None:
        """alpha 通道视图 (H,W)，RGB 布局返回 None"""
        return self.pixels[:, :, 0] if self.has_alpha else None

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy(), self.layout)

    def get_pixel(self, x: int, y: int) -> tuple[int, ...]:
        """按布局顺序返回 (x, y) 处的分量"""
        return tuple(int(c) for c in self.pixels[y, x])

    def get_rgb(self, x: int, y: int) -> int:
        """返回打包的 0xAARRGGBB，RGB 布局 alpha 视为 0xFF"""
        r, g, b = (int(c) for c in self.rgb[y, x])
        a = int(self.pixels[y, x, 0]) if self.has_alpha else 0xFF
        return (a << 24) | (r << 16) | (g << 8) | b

    def set_rgb(self, x: int, y: int, argb: int) -> None:
        """写入打包的 0xAARRGGBB，RGB 布局忽略 alpha"""
        color = Color.from_argb(argb)
        self.rgb[y, x] = color.rgb
        if self.has_alpha:
            self.pixels[y, x, 0] = color.alpha

    def to_rgba(self) -> np.ndarray:
        """转换为 (H,W,4) R,G,B,A 数组（供编码器使用）"""
        if self.has_alpha:
            return np.ascontiguousarray(self.pixels[:, :, [1, 2, 3, 0]])
        alpha = np.full(self.pixels.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate([self.pixels, alpha], axis=2)

    @classmethod
    def from_rgba(cls, rgba: np.ndarray) -> "PixelBuffer":
        """从 (H,W,4) R,G,B,A 数组创建 ARGB 缓冲区"""
        rgba = np.asarray(rgba, dtype=np.uint8)
        return cls(np.ascontiguousarray(rgba[:, :, [3, 0, 1, 2]]), ChannelLayout.ARGB)


def channel_layout_of(buffer: PixelBuffer) -> ChannelLayout:
    """
    根据源缓冲区是否带 alpha 决定新缓冲区的布局

    只看布局，不看像素的 alpha 值。
    """
    return ChannelLayout.ARGB if buffer.has_alpha else ChannelLayout.RGB
