"""
TransformEngine - 变换引擎

每个操作都遵循同一流程：
分配目标缓冲区 -> 获取绘图上下文 -> 执行原语 -> 释放上下文 -> 包装为新 Image。
源 Image 永远不被修改。
"""

import numbers
from pathlib import Path
from typing import BinaryIO, Callable

from omegaconf import DictConfig, OmegaConf

from .color import ColorCodec
from .context import (
    BorderStyle,
    ChannelLayout,
    Color,
    Composite,
    PixelBuffer,
    channel_layout_of,
)
from .drawing import paint
from .errors import InvalidDimension, OutOfBounds
from .image import Image
from .transform import (
    GREY_OP,
    NEGATIVE_OP,
    RescaleOp,
    resolve_interpolation,
    scaled_instance,
)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "configs" / "default.yaml"


def _as_int(value, error_cls, what: str) -> int:
    """整数或整值浮点数转为 int，否则抛出 error_cls"""
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    raise error_cls(f"{what}必须为整数: {value!r}")


class TransformEngine:
    """变换操作目录"""

    def __init__(self, config: str | Path | DictConfig | None = None):
        """
        初始化引擎

        Args:
            config: 配置文件路径或 DictConfig，默认使用 configs/default.yaml
        """
        if isinstance(config, DictConfig):
            self.cfg = config
        else:
            self.cfg: DictConfig = OmegaConf.load(config or DEFAULT_CONFIG_PATH)

        border_cfg = self.cfg.get("border", {})
        self.border_width = border_cfg.get("width", 2)
        self.border_color = border_cfg.get("color", "000000")
        self.border_style = border_cfg.get("style", "plain")

        key_cfg = self.cfg.get("color_key", {})
        sentinel = ColorCodec.parse(key_cfg.get("sentinel", "8f1c1c"))
        self.sentinel = Color(*sentinel.rgb, alpha=key_cfg.get("sentinel_alpha", 0))

        resize_cfg = self.cfg.get("resize", {})
        self.upscale = resolve_interpolation(resize_cfg.get("upscale_interpolation", "lanczos4"))
        self.downscale = resolve_interpolation(resize_cfg.get("downscale_interpolation", "area"))

        # 外部协作者（延迟加载）
        self._codec = None
        self._fetcher = None
        self._display = None

    # ==================== 协作者懒加载 ====================

    @property
    def codec(self):
        """编解码器（懒加载）"""
        if self._codec is None:
            from .codec import ImageCodec
            self._codec = ImageCodec(self.cfg)
        return self._codec

    @property
    def fetcher(self):
        """URL 读取器（懒加载）"""
        if self._fetcher is None:
            from .codec import UrlFetcher
            self._fetcher = UrlFetcher(self.cfg)
        return self._fetcher

    @property
    def display(self):
        """预览窗口（懒加载）"""
        if self._display is None:
            from .preview import TkDisplay
            self._display = TkDisplay(self.cfg)
        return self._display

    def _wrap(self, buffer: PixelBuffer) -> Image:
        return Image(buffer, engine=self)

    # ==================== 加载 ====================

    def load_from_bytes(self, data: bytes) -> Image:
        return self._wrap(self.codec.decode(data))

    def load_from_file(self, file: str | Path | BinaryIO) -> Image:
        return self._wrap(self.codec.decode(file))

    def load_from_url(self, url: str) -> Image:
        """
        从 URL 加载图像

        Raises:
            InvalidArgument: URL 格式错误
            LoadFailed: 网络或解码失败
        """
        return self._wrap(self.codec.decode(self.fetcher.fetch(url)))

    def allocate(self, width: int, height: int, layout: ChannelLayout = ChannelLayout.RGB) -> Image:
        return self._wrap(PixelBuffer.allocate(width, height, layout))

    # ==================== 像素变换 ====================

    def _transform(self, image: Image, op) -> Image:
        """复制源图到同尺寸目标，再对目标应用滤镜"""
        src = image.buffer
        target = PixelBuffer.allocate(src.width, src.height, channel_layout_of(src))
        with paint(target) as g:
            g.composite = Composite.SRC
            g.draw_image(src, 0, 0)
            g.filter(op)
        return self._wrap(target)

    def adjust_brightness(self, image: Image, scale: float, offset: float) -> Image:
        """
        亮度仿射调整：out = clamp(in * scale + offset, 0, 255)

        alpha 通道不变。
        """
        return self._transform(image, RescaleOp(scale, offset))

    def to_greyscale(self, image: Image) -> Image:
        return self._transform(image, GREY_OP)

    def invert(self, image: Image) -> Image:
        return self._transform(image, NEGATIVE_OP)

    # ==================== 几何变换 ====================

    def add_border(
        self,
        image: Image,
        width: int | None = None,
        color: str | None = None,
        style: BorderStyle | str | None = None
    ) -> Image:
        """
        添加边框

        Args:
            width: 边框宽度（>= 0），默认取配置
            color: rrggbb 边框颜色，默认取配置
            style: plain | raised | etched，默认取配置

        Raises:
            InvalidDimension: 宽度为负或不是整数
            InvalidColorFormat: 颜色格式错误
            InvalidArgument: 未知样式
        """
        width = _as_int(self.border_width if width is None else width, InvalidDimension, "边框宽度")
        if width < 0:
            raise InvalidDimension(f"边框宽度不能为负数: {width}")
        fill = ColorCodec.parse(self.border_color if color is None else color)
        style = BorderStyle.parse(self.border_style if style is None else style)

        src = image.buffer
        new_width, new_height = src.width + 2 * width, src.height + 2 * width
        target = PixelBuffer.allocate(new_width, new_height, channel_layout_of(src))

        with paint(target) as g:
            g.color = fill
            if style is BorderStyle.PLAIN:
                g.fill_rect(0, 0, new_width, new_height)
            else:
                g.fill_3d_rect(0, 0, new_width, new_height, raised=style is BorderStyle.RAISED)
            g.draw_image(src, width, width)

        return self._wrap(target)

    def apply_color_key(self, image: Image, color: str) -> Image:
        """
        颜色键：与键色完全相同的不透明像素被替换为哨兵色

        结果总是 ARGB。只做精确匹配，无容差。
        """
        key = ColorCodec.parse(color)
        src = image.buffer
        target = PixelBuffer.allocate(src.width, src.height, ChannelLayout.ARGB)

        with paint(target) as g:
            g.composite = Composite.SRC
            g.draw_image(src, 0, 0)
            g.replace_rgb(key.argb, self.sentinel.argb)

        return self._wrap(target)

    def flip_horizontal(self, image: Image) -> Image:
        src = image.buffer
        w, h = src.size
        target = PixelBuffer.allocate(w, h, channel_layout_of(src))
        with paint(target) as g:
            g.composite = Composite.SRC
            g.draw_image_scaled(src, 0, 0, w, h, w, 0, 0, h)
        return self._wrap(target)

    def flip_vertical(self, image: Image) -> Image:
        src = image.buffer
        w, h = src.size
        target = PixelBuffer.allocate(w, h, channel_layout_of(src))
        with paint(target) as g:
            g.composite = Composite.SRC
            g.draw_image_scaled(src, 0, 0, w, h, 0, h, w, 0)
        return self._wrap(target)

    def resize(self, image: Image, width: int, height: int) -> Image:
        """
        平滑缩放到精确的 width x height（不保持长宽比）

        Raises:
            InvalidDimension: 宽或高不是正整数
        """
        width = _as_int(width, InvalidDimension, "缩放宽度")
        height = _as_int(height, InvalidDimension, "缩放高度")
        if width <= 0 or height <= 0:
            raise InvalidDimension(f"缩放尺寸必须为正数，当前: {width}x{height}")

        src = image.buffer
        scaled = scaled_instance(src, width, height, upscale=self.upscale, downscale=self.downscale)
        target = PixelBuffer.allocate(width, height, channel_layout_of(src))
        with paint(target) as g:
            g.composite = Composite.SRC
            g.draw_image(scaled, 0, 0)
        return self._wrap(target)

    def crop(self, image: Image, left: int, top: int, right: int, bottom: int) -> Image:
        """
        裁剪子矩形，结果不与源共享存储

        Raises:
            OutOfBounds: 需满足 0 <= left < right <= width 且 0 <= top < bottom <= height，且坐标为整数
        """
        left, top, right, bottom = (
            _as_int(v, OutOfBounds, "裁剪坐标") for v in (left, top, right, bottom)
        )
        src = image.buffer
        if not (0 <= left < right <= src.width and 0 <= top < bottom <= src.height):
            raise OutOfBounds(
                f"裁剪区域 ({left}, {top}, {right}, {bottom}) 超出 {src.width}x{src.height}"
            )
        return self._wrap(PixelBuffer(src.pixels[top:bottom, left:right].copy(), src.layout))

    def scale(self, image: Image, ratio: float) -> Image:
        """按比例缩放，每边至少 1 像素"""
        if ratio <= 0:
            raise InvalidDimension(f"缩放比例必须为正数: {ratio}")
        width = max(1, int(round(image.width * ratio)))
        height = max(1, int(round(image.height * ratio)))
        return self.resize(image, width, height)

    def thumbnail(self, image: Image, size: int) -> Image:
        """缩放到最长边等于 size"""
        if size <= 0:
            raise InvalidDimension(f"缩略图尺寸必须为正数: {size}")
        return self.scale(image, size / max(image.width, image.height))

    def cropped_thumbnail(self, image: Image, size: int) -> Image:
        """居中裁成正方形后缩放到 size x size"""
        if size <= 0:
            raise InvalidDimension(f"缩略图尺寸必须为正数: {size}")
        side = min(image.width, image.height)
        left = (image.width - side) // 2
        top = (image.height - side) // 2
        square = self.crop(image, left, top, left + side, top + side)
        return self.resize(square, size, size)

    # ==================== 输出 ====================

    def encode(self, image: Image, format_id: str) -> bytes:
        return self.codec.encode(image.buffer, format_id)

    def save(self, image: Image, sink: str | Path | BinaryIO, format_id: str | None = None) -> None:
        self.codec.write(image.buffer, sink, format_id)

    def preview(
        self,
        image: Image,
        on_close: Callable[[], None] | None = None,
        display=None
    ):
        """
        交给显示协作者，立即返回

        Args:
            on_close: 窗口关闭回调，默认结束进程
            display: BaseDisplay 实现，默认使用 TkDisplay
        """
        from .preview import terminate_process
        display = display or self.display
        return display.show(image, on_close or terminate_process)


_default_engine: TransformEngine | None = None


def get_default_engine() -> TransformEngine:
    """进程级默认引擎（使用默认配置）"""
    global _default_engine
    if _default_engine is None:
        _default_engine = TransformEngine()
    return _default_engine


def load_engine(config: str | Path | DictConfig | None = None) -> TransformEngine:
    """
    便捷函数：加载引擎

    Args:
        config: 配置文件路径或 DictConfig

    Returns:
        TransformEngine 实例
    """
    return TransformEngine(config)
