"""
ImageCodec - 解码/编码协作者

使用 Pillow 完成容器格式的读写，并把结果统一为 RGB / ARGB 像素缓冲区。
"""

import io
from pathlib import Path
from typing import BinaryIO

import numpy as np
from omegaconf import DictConfig
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from ..color import hex_to_color
from ..context import ChannelLayout, PixelBuffer
from ..drawing import paint
from ..errors import EncodeFailed, LoadFailed, UnsupportedFormat

# 带 alpha 的 Pillow 模式
_ALPHA_MODES = {"RGBA", "RGBa", "LA", "La", "PA"}

# 不能写入 alpha 的容器，写出前先铺底色
_NO_ALPHA_FORMATS = {"JPEG", "MPO", "EPS", "PCX", "PPM"}


def resolve_format(format_id: str) -> str:
    """
    格式标识 -> Pillow 格式名

    接受扩展名（"png"、".jpg"，不区分大小写）或 Pillow 格式名（"JPEG"）。

    Raises:
        UnsupportedFormat: Pillow 无法写出该格式
    """
    if not isinstance(format_id, str) or not format_id.strip():
        raise UnsupportedFormat(f"无效的格式标识: {format_id!r}")

    key = format_id.strip().lower().lstrip(".")
    extensions = PILImage.registered_extensions()
    name = extensions.get(f".{key}") or key.upper()

    if name not in PILImage.SAVE:
        raise UnsupportedFormat(f"不支持的图像格式: {format_id!r}")
    return name


def has_alpha(image: PILImage.Image) -> bool:
    """判断解码结果是否带透明通道"""
    if image.mode in _ALPHA_MODES:
        return True
    return "transparency" in image.info


class ImageCodec:
    """Pillow 编解码器"""

    def __init__(self, cfg: DictConfig | None = None):
        """
        Args:
            cfg: 配置对象，读取 encoder.flatten_background
        """
        encoder_cfg = cfg.get("encoder", {}) if cfg is not None else {}
        self.flatten_background = hex_to_color(encoder_cfg.get("flatten_background", "ffffff"))

    # ==================== 解码 ====================

    @staticmethod
    def from_pil(image: PILImage.Image) -> PixelBuffer:
        """PIL 图像 -> PixelBuffer（带 alpha 的模式映射为 ARGB）"""
        if has_alpha(image):
            rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
            return PixelBuffer.from_rgba(rgba)
        rgb = np.array(image.convert("RGB"), dtype=np.uint8)
        return PixelBuffer(rgb, ChannelLayout.RGB)

    def decode(self, source: bytes | str | Path | BinaryIO) -> PixelBuffer:
        """
        解码字节、路径或二进制流

        Raises:
            LoadFailed: 文件不存在、无法识别、尺寸过大或数据损坏
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            if len(source) == 0:
                raise LoadFailed("图像数据为空")
            source = io.BytesIO(bytes(source))

        try:
            with PILImage.open(source) as image:
                image.load()
                return self.from_pil(image)
        except FileNotFoundError as e:
            raise LoadFailed(f"文件不存在: {source}") from e
        except UnidentifiedImageError as e:
            raise LoadFailed(f"无法识别的图像数据: {e}") from e
        except OSError as e:
            raise LoadFailed(f"图像读取失败: {e}") from e
        except (PILImage.DecompressionBombError, ValueError, SyntaxError) as e:
            raise LoadFailed(f"图像解码失败: {e}") from e

    # ==================== 编码 ====================

    @staticmethod
    def to_pil(buffer: PixelBuffer) -> PILImage.Image:
        """PixelBuffer -> PIL 图像（RGB 或 RGBA）"""
        if buffer.has_alpha:
            return PILImage.fromarray(buffer.to_rgba())
        return PILImage.fromarray(np.ascontiguousarray(buffer.pixels))

    def _flatten(self, buffer: PixelBuffer) -> PixelBuffer:
        """把 ARGB 叠加到底色上得到 RGB"""
        target = PixelBuffer.allocate(buffer.width, buffer.height, ChannelLayout.RGB)
        with paint(target) as g:
            g.color = self.flatten_background
            g.fill_rect(0, 0, buffer.width, buffer.height)
            g.draw_image(buffer, 0, 0)
        return target

    def _prepare(self, buffer: PixelBuffer, name: str) -> PILImage.Image:
        if buffer.has_alpha and name in _NO_ALPHA_FORMATS:
            buffer = self._flatten(buffer)
        return self.to_pil(buffer)

    def encode(self, buffer: PixelBuffer, format_id: str) -> bytes:
        """
        编码为指定格式的字节

        Raises:
            UnsupportedFormat: 未知格式
            EncodeFailed: 编码失败
        """
        name = resolve_format(format_id)
        out = io.BytesIO()
        try:
            self._prepare(buffer, name).save(out, format=name)
        except (OSError, ValueError) as e:
            raise EncodeFailed(f"编码为 {name} 失败: {e}") from e
        return out.getvalue()

    def write(
        self,
        buffer: PixelBuffer,
        sink: str | Path | BinaryIO,
        format_id: str | None = None
    ) -> None:
        """
        编码并写入路径或可写二进制流

        Args:
            sink: 目标路径或流
            format_id: 格式标识，None 时从路径后缀推断

        Raises:
            UnsupportedFormat: 未知格式或无法推断格式
            EncodeFailed: 写出失败
        """
        if format_id is None:
            if not isinstance(sink, (str, Path)) or not Path(sink).suffix:
                raise UnsupportedFormat(f"无法从 {sink!r} 推断图像格式")
            format_id = Path(sink).suffix

        name = resolve_format(format_id)
        try:
            self._prepare(buffer, name).save(sink, format=name)
        except (OSError, ValueError) as e:
            raise EncodeFailed(f"写出 {name} 失败: {e}") from e


def create_codec(cfg: DictConfig | None = None) -> ImageCodec:
    """便捷函数：创建编解码器"""
    return ImageCodec(cfg)
