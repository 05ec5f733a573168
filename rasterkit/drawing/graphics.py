"""
DrawingContext - 作用域绘图上下文

在目标 PixelBuffer 上提供绘图原语：
- fill_rect / fill_3d_rect: 纯色填充与 3D 浮雕填充
- draw_image: 不缩放整图贴图
- draw_image_scaled: 角点形式的缩放贴图（角点交换即镜像）
- filter: 对整幅目标应用像素滤镜

生命周期严格线性：CREATED -> IN_USE -> RELEASED，不可重入。
"""

from contextlib import contextmanager
from enum import Enum
from typing import Iterator

import cv2
import numpy as np

from ..context import BLACK, Color, Composite, PixelBuffer


class ContextState(Enum):
    CREATED = "created"
    IN_USE = "in_use"
    RELEASED = "released"


class DrawingContext:
    """目标缓冲区上的绘图句柄"""

    def __init__(self, target: PixelBuffer):
        """
        Args:
            target: 绘制目标，原地修改
        """
        self.target = target
        self.color: Color = BLACK
        self.composite = Composite.SRC_OVER
        self.state = ContextState.CREATED

    @classmethod
    def acquire(cls, target: PixelBuffer) -> "DrawingContext":
        """创建并立即进入 IN_USE 状态"""
        ctx = cls(target)
        ctx._begin()
        return ctx

    def _begin(self) -> None:
        if self.state is not ContextState.CREATED:
            raise RuntimeError(f"DrawingContext 不可重入，当前状态: {self.state.value}")
        self.state = ContextState.IN_USE

    def release(self) -> None:
        """释放上下文，重复调用无副作用"""
        self.state = ContextState.RELEASED

    @property
    def released(self) -> bool:
        return self.state is ContextState.RELEASED

    def __enter__(self) -> "DrawingContext":
        if self.state is ContextState.CREATED:
            self._begin()
        elif self.state is ContextState.RELEASED:
            raise RuntimeError("DrawingContext 已释放")
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False

    def _ensure_active(self) -> None:
        if self.state is not ContextState.IN_USE:
            raise RuntimeError(f"DrawingContext 未处于使用中，当前状态: {self.state.value}")

    # ==================== 裁剪与合成 ====================

    def _clip(self, x: int, y: int, w: int, h: int) -> tuple[int, int, int, int] | None:
        """目标矩形与缓冲区求交，返回 (x0, y0, x1, y1)"""
        x0, y0 = max(x, 0), max(y, 0)
        x1 = min(x + w, self.target.width)
        y1 = min(y + h, self.target.height)
        if x0 >= x1 or y0 >= y1:
            return None
        return x0, y0, x1, y1

    def _write(
        self,
        rows: slice,
        cols: slice,
        src_rgb: np.ndarray,
        src_alpha: np.ndarray | None
    ) -> None:
        """按当前合成规则把源像素写入目标区域"""
        dst = self.target
        opaque = src_alpha is None or bool((src_alpha == 255).all())

        if opaque or self.composite is Composite.SRC:
            dst.rgb[rows, cols] = src_rgb
            if dst.has_alpha:
                dst.alpha[rows, cols] = 255 if src_alpha is None else src_alpha
            return

        # SRC_OVER（非预乘 alpha）
        sa = src_alpha.astype(np.float32)[..., np.newaxis] / 255.0
        if dst.has_alpha:
            da = dst.alpha[rows, cols].astype(np.float32)[..., np.newaxis] / 255.0
        else:
            da = np.ones_like(sa)
        out_a = sa + da * (1.0 - sa)

        dst_rgb = dst.rgb[rows, cols].astype(np.float32)
        num = src_rgb.astype(np.float32) * sa + dst_rgb * da * (1.0 - sa)
        out_rgb = np.divide(num, out_a, out=np.zeros_like(num), where=out_a > 0)

        dst.rgb[rows, cols] = np.clip(np.rint(out_rgb), 0, 255).astype(np.uint8)
        if dst.has_alpha:
            dst.alpha[rows, cols] = np.clip(np.rint(out_a[..., 0] * 255), 0, 255).astype(np.uint8)

    # ==================== 绘图原语 ====================

    def fill_rect(self, x: int, y: int, w: int, h: int) -> None:
        """用当前颜色填充矩形"""
        self._ensure_active()
        region = self._clip(x, y, w, h)
        if region is None:
            return
        x0, y0, x1, y1 = region
        shape = (y1 - y0, x1 - x0)

        src_rgb = np.empty(shape + (3,), dtype=np.uint8)
        src_rgb[...] = self.color.rgb
        src_alpha = None
        if self.color.alpha != 255:
            src_alpha = np.full(shape, self.color.alpha, dtype=np.uint8)

        self._write(slice(y0, y1), slice(x0, x1), src_rgb, src_alpha)

    def fill_3d_rect(self, x: int, y: int, w: int, h: int, raised: bool) -> None:
        """
        3D 浮雕填充

        raised 时内部为当前色，左/上边高光、右/下边阴影；
        etched 时内部为暗色，高光与阴影互换。边宽 1 像素。
        """
        self._ensure_active()
        base = self.color
        brighter = base.brighter()
        darker = base.darker()

        self.color = base if raised else darker
        self.fill_rect(x + 1, y + 1, w - 2, h - 2)

        self.color = brighter if raised else darker
        self.fill_rect(x, y, 1, h)
        self.fill_rect(x + 1, y, w - 2, 1)

        self.color = darker if raised else brighter
        self.fill_rect(x + 1, y + h - 1, w - 1, 1)
        self.fill_rect(x + w - 1, y, 1, h - 1)

        self.color = base

    def draw_image(self, source: PixelBuffer, x: int = 0, y: int = 0) -> None:
        """把整幅源图贴到 (x, y)，超出目标的部分被裁掉"""
        self._ensure_active()
        region = self._clip(x, y, source.width, source.height)
        if region is None:
            return
        x0, y0, x1, y1 = region
        src_rows = slice(y0 - y, y1 - y)
        src_cols = slice(x0 - x, x1 - x)

        src_rgb = source.rgb[src_rows, src_cols]
        src_alpha = source.alpha[src_rows, src_cols] if source.has_alpha else None
        self._write(slice(y0, y1), slice(x0, x1), src_rgb, src_alpha)

    def draw_image_scaled(
        self,
        source: PixelBuffer,
        dx1: int, dy1: int, dx2: int, dy2: int,
        sx1: int, sy1: int, sx2: int, sy2: int,
        interpolation: int = cv2.INTER_NEAREST
    ) -> None:
        """
        角点形式的缩放贴图

        源矩形 (sx1,sy1)-(sx2,sy2) 映射到目标矩形 (dx1,dy1)-(dx2,dy2)。
        只在一侧交换角点即沿该轴镜像；尺寸相同时不重采样，结果逐像素精确。

        Args:
            source: 源缓冲区
            interpolation: 尺寸不同时使用的 cv2 插值方式
        """
        self._ensure_active()
        dw, dh = abs(dx2 - dx1), abs(dy2 - dy1)
        if dw == 0 or dh == 0:
            return

        sxa, sxb = sorted((sx1, sx2))
        sya, syb = sorted((sy1, sy2))
        sxa, sya = max(sxa, 0), max(sya, 0)
        sxb, syb = min(sxb, source.width), min(syb, source.height)
        if sxa >= sxb or sya >= syb:
            return

        region = source.pixels[sya:syb, sxa:sxb]
        if (dx2 < dx1) != (sx2 < sx1):
            region = region[:, ::-1]
        if (dy2 < dy1) != (sy2 < sy1):
            region = region[::-1]

        if region.shape[:2] != (dh, dw):
            region = cv2.resize(
                np.ascontiguousarray(region),
                (dw, dh),  # cv2.resize 使用 (width, height)
                interpolation=interpolation
            )

        scaled = PixelBuffer(np.ascontiguousarray(region), source.layout)
        self.draw_image(scaled, min(dx1, dx2), min(dy1, dy2))

    def filter(self, op) -> None:
        """
        对整幅目标原地应用像素滤镜

        Args:
            op: 带 filter(PixelBuffer) -> PixelBuffer 方法的滤镜
        """
        self._ensure_active()
        result = op.filter(self.target)
        self.target.pixels[...] = result.pixels

    def replace_rgb(self, match_argb: int, replacement_argb: int) -> int:
        """
        把打包值恰好等于 match_argb 的像素替换为 replacement_argb

        Returns:
            被替换的像素数
        """
        self._ensure_active()
        target = self.target
        match = Color.from_argb(match_argb)

        mask = (target.rgb == np.array(match.rgb, dtype=np.uint8)).all(axis=2)
        if target.has_alpha:
            mask &= target.alpha == match.alpha
        elif match.alpha != 255:
            return 0

        replacement = Color.from_argb(replacement_argb)
        target.rgb[mask] = replacement.rgb
        if target.has_alpha:
            target.alpha[mask] = replacement.alpha
        return int(mask.sum())


@contextmanager
def paint(target: PixelBuffer) -> Iterator[DrawingContext]:
    """
    获取目标上的绘图上下文，退出时（包括异常）必定释放

    用法:
        with paint(buffer) as g:
            g.fill_rect(0, 0, w, h)
    """
    ctx = DrawingContext.acquire(target)
    try:
        yield ctx
    finally:
        ctx.release()
