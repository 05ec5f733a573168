"""
Image - 公共不可变图像值

包装唯一的 PixelBuffer，对外暴露变换操作目录。
每个操作都返回新 Image，self 永远不被修改。
"""

from pathlib import Path
from typing import BinaryIO, Callable

import numpy as np
from PIL import Image as PILImage

from .context import BorderStyle, ChannelLayout, PixelBuffer


class Image:
    """不可变图像值"""

    def __init__(self, buffer: PixelBuffer, engine=None):
        """
        Args:
            buffer: 像素缓冲区，Image 取得其独占所有权（之后只读）
            engine: 执行操作的 TransformEngine，默认使用进程级引擎
        """
        buffer.pixels.flags.writeable = False
        self._buffer = buffer
        self._engine = engine

    @property
    def engine(self):
        if self._engine is None:
            from .engine import get_default_engine
            self._engine = get_default_engine()
        return self._engine

    # ==================== 构造 ====================

    @classmethod
    def from_array(cls, array: np.ndarray, layout: ChannelLayout | None = None) -> "Image":
        """从 (H,W,3) RGB 或 (H,W,4) A,R,G,B 数组创建（复制数据）"""
        return cls(PixelBuffer.from_array(array, layout))

    @classmethod
    def from_pil(cls, image: PILImage.Image) -> "Image":
        from .codec import ImageCodec
        return cls(ImageCodec.from_pil(image))

    @classmethod
    def allocate(cls, width: int, height: int, layout: ChannelLayout = ChannelLayout.RGB) -> "Image":
        return cls(PixelBuffer.allocate(width, height, layout))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Image":
        from .engine import get_default_engine
        return get_default_engine().load_from_bytes(data)

    @classmethod
    def from_file(cls, file: str | Path | BinaryIO) -> "Image":
        from .engine import get_default_engine
        return get_default_engine().load_from_file(file)

    @classmethod
    def from_url(cls, url: str) -> "Image":
        from .engine import get_default_engine
        return get_default_engine().load_from_url(url)

    # ==================== 属性 ====================

    @property
    def buffer(self) -> PixelBuffer:
        """底层缓冲区（只读）"""
        return self._buffer

    @property
    def width(self) -> int:
        return self._buffer.width

    @property
    def height(self) -> int:
        return self._buffer.height

    @property
    def size(self) -> tuple[int, int]:
        return self._buffer.size

    @property
    def layout(self) -> ChannelLayout:
        return self._buffer.layout

    @property
    def has_alpha(self) -> bool:
        return self._buffer.has_alpha

    def get_pixel(self, x: int, y: int) -> tuple[int, ...]:
        return self._buffer.get_pixel(x, y)

    def get_rgb(self, x: int, y: int) -> int:
        return self._buffer.get_rgb(x, y)

    def to_array(self) -> np.ndarray:
        """像素副本，(H,W,3) R,G,B 或 (H,W,4) A,R,G,B"""
        return self._buffer.pixels.copy()

    def to_pil(self) -> PILImage.Image:
        from .codec import ImageCodec
        return ImageCodec.to_pil(self._buffer)

    # ==================== 操作目录 ====================

    def add_border(
        self,
        width: int | None = None,
        color: str | None = None,
        style: BorderStyle | str | None = None
    ) -> "Image":
        return self.engine.add_border(self, width=width, color=color, style=style)

    def adjust_brightness(self, scale: float, offset: float) -> "Image":
        return self.engine.adjust_brightness(self, scale, offset)

    def apply_color_key(self, color: str) -> "Image":
        """颜色键（见 TransformEngine.apply_color_key）"""
        return self.engine.apply_color_key(self, color)

    def flip_horizontal(self) -> "Image":
        return self.engine.flip_horizontal(self)

    def flip_vertical(self) -> "Image":
        return self.engine.flip_vertical(self)

    def to_greyscale(self) -> "Image":
        return self.engine.to_greyscale(self)

    def invert(self) -> "Image":
        return self.engine.invert(self)

    def resize(self, width: int, height: int) -> "Image":
        return self.engine.resize(self, width, height)

    def scale(self, ratio: float) -> "Image":
        return self.engine.scale(self, ratio)

    def thumbnail(self, size: int) -> "Image":
        return self.engine.thumbnail(self, size)

    def cropped_thumbnail(self, size: int) -> "Image":
        return self.engine.cropped_thumbnail(self, size)

    def crop(self, left: int, top: int, right: int, bottom: int) -> "Image":
        return self.engine.crop(self, left, top, right, bottom)

    def encode(self, format_id: str) -> bytes:
        """编码为 format_id（如 "png"、"jpg"）格式的字节"""
        return self.engine.encode(self, format_id)

    def save(self, sink: str | Path | BinaryIO, format_id: str | None = None) -> None:
        """写入路径或二进制流；format_id 为 None 时按路径后缀推断"""
        self.engine.save(self, sink, format_id)

    def preview(self, on_close: Callable[[], None] | None = None, display=None):
        """打开预览窗口，关闭时调用 on_close（默认结束进程）"""
        return self.engine.preview(self, on_close=on_close, display=display)

    # ==================== 值语义 ====================

    def __eq__(self, other) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return self.layout is other.layout and np.array_equal(
            self._buffer.pixels, other._buffer.pixels
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"Image({self.width}x{self.height}, {self.layout.value})"
