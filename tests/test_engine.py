"""
TransformEngine 操作目录测试
"""

import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest
from omegaconf import OmegaConf

from rasterkit import Image, TransformEngine, load_engine
from rasterkit.context import ChannelLayout, PixelBuffer
from rasterkit.drawing import paint
from rasterkit.errors import (
    InvalidArgument,
    InvalidColorFormat,
    InvalidDimension,
    OutOfBounds,
)


@pytest.fixture
def engine():
    """默认配置引擎"""
    return load_engine()


@pytest.fixture
def sample_image(engine):
    """随机 RGB 图像 (10x10)"""
    rng = np.random.default_rng(0)
    pixels = rng.integers(0, 256, (10, 10, 3), dtype=np.uint8)
    return Image(PixelBuffer(pixels, ChannelLayout.RGB), engine=engine)


@pytest.fixture
def wide_image(engine):
    """随机 RGB 图像 (20x8)"""
    rng = np.random.default_rng(1)
    pixels = rng.integers(0, 256, (8, 20, 3), dtype=np.uint8)
    return Image(PixelBuffer(pixels, ChannelLayout.RGB), engine=engine)


@pytest.fixture
def alpha_image(engine):
    """随机 ARGB 图像 (6x4)"""
    rng = np.random.default_rng(2)
    pixels = rng.integers(0, 256, (4, 6, 4), dtype=np.uint8)
    return Image(PixelBuffer(pixels, ChannelLayout.ARGB), engine=engine)


class TestImmutability:
    """源图不可变测试"""

    def test_source_buffer_is_read_only(self, sample_image):
        assert not sample_image.buffer.pixels.flags.writeable
        with pytest.raises(ValueError):
            sample_image.buffer.pixels[0, 0] = 0

    @pytest.mark.parametrize("op", [
        lambda im: im.add_border(3, "ff0000", "raised"),
        lambda im: im.adjust_brightness(2.0, 30),
        lambda im: im.apply_color_key("000000"),
        lambda im: im.flip_horizontal(),
        lambda im: im.flip_vertical(),
        lambda im: im.to_greyscale(),
        lambda im: im.invert(),
        lambda im: im.resize(3, 7),
        lambda im: im.crop(1, 1, 4, 4),
    ])
    def test_operations_return_new_image(self, sample_image, op):
        before = sample_image.to_array()
        result = op(sample_image)
        assert result is not sample_image
        np.testing.assert_array_equal(sample_image.to_array(), before)

    def test_result_keeps_engine(self, engine, sample_image):
        assert sample_image.invert().engine is engine


class TestFlips:
    """翻转测试"""

    def test_flip_horizontal(self, wide_image):
        flipped = wide_image.flip_horizontal()
        assert flipped.size == wide_image.size
        assert flipped.get_pixel(0, 3) == wide_image.get_pixel(19, 3)
        np.testing.assert_array_equal(flipped.to_array(), wide_image.to_array()[:, ::-1])

    def test_flip_vertical(self, wide_image):
        flipped = wide_image.flip_vertical()
        assert flipped.get_pixel(5, 0) == wide_image.get_pixel(5, 7)

    def test_double_flip_round_trip(self, wide_image, alpha_image):
        """测试两次翻转逐像素还原"""
        for image in (wide_image, alpha_image):
            assert image.flip_horizontal().flip_horizontal() == image
            assert image.flip_vertical().flip_vertical() == image

    def test_flip_preserves_alpha(self, alpha_image):
        flipped = alpha_image.flip_horizontal()
        assert flipped.layout is ChannelLayout.ARGB
        np.testing.assert_array_equal(
            flipped.buffer.alpha, alpha_image.buffer.alpha[:, ::-1]
        )


class TestPixelOperations:
    """像素变换测试"""

    def test_invert_twice(self, sample_image, alpha_image):
        assert sample_image.invert().invert() == sample_image
        assert alpha_image.invert().invert() == alpha_image

    def test_invert_values(self, sample_image):
        np.testing.assert_array_equal(
            sample_image.invert().to_array(), 255 - sample_image.to_array()
        )

    def test_brightness_identity(self, sample_image, alpha_image):
        assert sample_image.adjust_brightness(1, 0) == sample_image
        assert alpha_image.adjust_brightness(1.0, 0.0) == alpha_image

    def test_brightness_alpha_untouched(self, alpha_image):
        out = alpha_image.adjust_brightness(0.0, 255)
        assert (out.buffer.rgb == 255).all()
        np.testing.assert_array_equal(out.buffer.alpha, alpha_image.buffer.alpha)

    def test_greyscale(self, sample_image):
        grey = sample_image.to_greyscale()
        arr = grey.to_array()
        assert grey.layout is ChannelLayout.RGB
        assert (arr[:, :, 0] == arr[:, :, 2]).all()

    def test_greyscale_keeps_alpha(self, alpha_image):
        grey = alpha_image.to_greyscale()
        assert grey.layout is ChannelLayout.ARGB
        np.testing.assert_array_equal(grey.buffer.alpha, alpha_image.buffer.alpha)


class TestAddBorder:
    """边框测试"""

    def test_plain_border(self, sample_image):
        bordered = sample_image.add_border(width=3, color="ff0000")
        assert bordered.size == (16, 16)
        assert bordered.get_pixel(0, 0) == (255, 0, 0)
        assert bordered.get_pixel(15, 15) == (255, 0, 0)
        np.testing.assert_array_equal(
            bordered.to_array()[3:13, 3:13], sample_image.to_array()
        )

    def test_defaults(self, sample_image):
        """测试默认宽度 2、黑色"""
        bordered = sample_image.add_border()
        assert bordered.size == (14, 14)
        assert bordered.get_pixel(1, 1) == (0, 0, 0)

    def test_zero_width(self, sample_image):
        assert sample_image.add_border(width=0) == sample_image

    def test_fractional_width(self, sample_image):
        with pytest.raises(InvalidDimension, match="整数"):
            sample_image.add_border(width=1.5)

    def test_raised_border(self, sample_image):
        bordered = sample_image.add_border(width=3, color="ff0000", style="raised")
        assert bordered.get_pixel(0, 5) == (255, 0, 0)
        assert bordered.get_pixel(15, 5) == (178, 0, 0)
        assert bordered.get_pixel(1, 1) == (255, 0, 0)

    def test_etched_border(self, sample_image):
        bordered = sample_image.add_border(width=3, color="ff0000", style="etched")
        assert bordered.get_pixel(0, 5) == (178, 0, 0)
        assert bordered.get_pixel(1, 1) == (178, 0, 0)
        assert bordered.get_pixel(15, 5) == (255, 0, 0)

    def test_border_keeps_alpha_layout(self, alpha_image):
        bordered = alpha_image.add_border(width=1)
        assert bordered.layout is ChannelLayout.ARGB
        assert bordered.get_pixel(0, 0) == (255, 0, 0, 0)

    def test_unknown_style(self, sample_image):
        with pytest.raises(InvalidArgument):
            sample_image.add_border(style="groovy")

    def test_negative_width(self, sample_image):
        with pytest.raises(InvalidDimension):
            sample_image.add_border(width=-1)

    def test_bad_color(self, sample_image):
        with pytest.raises(InvalidColorFormat):
            sample_image.add_border(color="red")


class TestColorKey:
    """颜色键测试"""

    @pytest.fixture
    def keyed_source(self, engine):
        pixels = np.zeros((3, 3, 3), dtype=np.uint8)
        pixels[...] = (1, 2, 3)
        pixels[1, 1] = (0x12, 0x34, 0x56)
        pixels[2, 0] = (0x12, 0x34, 0x57)
        return Image(PixelBuffer(pixels, ChannelLayout.RGB), engine=engine)

    def test_matching_pixels_replaced(self, keyed_source):
        keyed = keyed_source.apply_color_key("123456")
        assert keyed.layout is ChannelLayout.ARGB
        assert keyed.get_rgb(1, 1) == 0x008F1C1C

    def test_exact_match_only(self, keyed_source):
        keyed = keyed_source.apply_color_key("123456")
        assert keyed.get_rgb(0, 2) == 0xFF123457
        assert keyed.get_rgb(0, 0) == 0xFF010203

    def test_no_match(self, keyed_source):
        keyed = keyed_source.apply_color_key("ffffff")
        assert (keyed.buffer.alpha == 255).all()
        np.testing.assert_array_equal(keyed.buffer.rgb, keyed_source.to_array())

    def test_invalid_key(self, keyed_source):
        with pytest.raises(InvalidColorFormat):
            keyed_source.apply_color_key("12345")


class TestResize:
    """缩放测试"""

    @pytest.mark.parametrize("size", [(5, 5), (30, 7), (1, 40), (10, 10)])
    def test_exact_output_size(self, wide_image, size):
        assert wide_image.resize(*size).size == size

    def test_keeps_layout(self, alpha_image):
        assert alpha_image.resize(12, 8).layout is ChannelLayout.ARGB

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (-3, 4)])
    def test_degenerate(self, sample_image, size):
        with pytest.raises(InvalidDimension):
            sample_image.resize(*size)

    @pytest.mark.parametrize("size", [(2.5, 3), (3, 0.1), (float("nan"), 3)])
    def test_fractional_size(self, sample_image, size):
        with pytest.raises(InvalidDimension, match="整数"):
            sample_image.resize(*size)

    def test_integral_float_size(self, sample_image):
        assert sample_image.resize(4.0, 3).size == (4, 3)

    def test_scale(self, wide_image):
        assert wide_image.scale(0.5).size == (10, 4)
        assert wide_image.scale(0.01).size == (1, 1)
        with pytest.raises(InvalidDimension):
            wide_image.scale(0)

    def test_thumbnail(self, wide_image):
        assert wide_image.thumbnail(10).size == (10, 4)

    def test_cropped_thumbnail(self, wide_image):
        thumb = wide_image.cropped_thumbnail(4)
        assert thumb.size == (4, 4)


class TestCrop:
    """裁剪测试"""

    def test_full_crop_is_identity(self, sample_image):
        assert sample_image.crop(0, 0, 10, 10) == sample_image

    def test_crop_region(self, sample_image):
        cropped = sample_image.crop(2, 3, 7, 8)
        assert cropped.size == (5, 5)
        np.testing.assert_array_equal(cropped.to_array(), sample_image.to_array()[3:8, 2:7])

    def test_crop_shares_no_storage(self, sample_image):
        cropped = sample_image.crop(1, 1, 5, 5)
        assert not np.shares_memory(cropped.buffer.pixels, sample_image.buffer.pixels)

    @pytest.mark.parametrize("box", [(0.5, 0, 5, 5), (0, 0, 5, 4.5)])
    def test_fractional_coordinates(self, sample_image, box):
        with pytest.raises(OutOfBounds, match="整数"):
            sample_image.crop(*box)

    def test_crop_idempotent(self, sample_image):
        cropped = sample_image.crop(0, 0, 6, 4)
        assert cropped.crop(0, 0, 6, 4) == cropped

    def test_reembed_reproduces_region(self, sample_image):
        """测试裁剪结果贴回原偏移处与原区域一致"""
        cropped = sample_image.crop(2, 3, 7, 8)
        canvas = PixelBuffer.allocate(10, 10, ChannelLayout.RGB)
        with paint(canvas) as g:
            g.draw_image(cropped.buffer, 2, 3)
        np.testing.assert_array_equal(canvas.pixels[3:8, 2:7], sample_image.to_array()[3:8, 2:7])

    @pytest.mark.parametrize("box", [
        (5, 5, 5, 10),      # left == right
        (0, 4, 5, 4),       # top == bottom
        (6, 0, 5, 5),       # left > right
        (-1, 0, 5, 5),
        (0, 0, 11, 5),
        (0, 0, 5, 11),
    ])
    def test_out_of_bounds(self, sample_image, box):
        with pytest.raises(OutOfBounds):
            sample_image.crop(*box)


class TestConfiguration:
    """配置测试"""

    def test_default_config_loaded(self, engine):
        assert engine.border_width == 2
        assert engine.sentinel.argb == 0x008F1C1C

    def test_dictconfig_overrides(self, sample_image):
        cfg = OmegaConf.create({
            "border": {"width": 5, "color": "00ff00", "style": "etched"},
            "color_key": {"sentinel": "ffffff", "sentinel_alpha": 255},
        })
        engine = TransformEngine(cfg)
        image = Image(sample_image.buffer.copy(), engine=engine)
        bordered = image.add_border()
        assert bordered.size == (20, 20)
        assert bordered.get_pixel(2, 2) == (0, 178, 0)
        assert engine.sentinel.argb == 0xFFFFFFFF

    def test_yaml_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("border:\n  width: 7\n", encoding="utf-8")
        engine = TransformEngine(path)
        assert engine.border_width == 7
        assert engine.border_color == "000000"

    def test_bad_interpolation_name(self):
        cfg = OmegaConf.create({"resize": {"upscale_interpolation": "magic"}})
        with pytest.raises(InvalidArgument):
            TransformEngine(cfg)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
