#!/usr/bin/env python
"""
rasterkit Demo - 命令行演示脚本

使用方法:
    python examples/demo.py [input_image] [output_dir]

示例:
    python examples/demo.py examples/input.png examples/output
"""

import sys
from pathlib import Path

# 添加项目根目录到路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
import numpy as np

from rasterkit import Image, load_engine


def create_sample_image(width: int = 256, height: int = 192) -> np.ndarray:
    """
    创建一个示例图像（渐变背景 + 纯色方块）

    Returns:
        uint8 RGB 图像
    """
    img = np.zeros((height, width, 3), dtype=np.uint8)

    # 水平渐变
    img[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)[np.newaxis, :]
    img[:, :, 2] = np.linspace(255, 0, height, dtype=np.uint8)[:, np.newaxis]

    # 颜色键方块
    img[40:90, 40:90] = (0x12, 0x34, 0x56)

    # 白色方块
    img[100:160, 150:220] = 255
    return img


def main():
    parser = argparse.ArgumentParser(description="rasterkit 变换演示")
    parser.add_argument("input", nargs="?", help="输入图像路径（缺省时生成示例图像）")
    parser.add_argument("output_dir", nargs="?", default="examples/output", help="输出目录")
    parser.add_argument("--config", default=None, help="配置文件路径")
    parser.add_argument("--format", default="png", help="输出格式")
    parser.add_argument("--preview", action="store_true", help="打开预览窗口")
    args = parser.parse_args()

    engine = load_engine(args.config)

    if args.input:
        print(f"加载图像: {args.input}")
        image = engine.load_from_file(args.input)
    else:
        print("创建示例图像...")
        image = Image.from_array(create_sample_image())

    print(f"图像尺寸: {image.width}x{image.height} ({image.layout.value})")

    results = {
        "border": image.add_border(width=6, color="ff0000", style="raised"),
        "bright": image.adjust_brightness(1.2, 20),
        "color_key": image.apply_color_key("123456"),
        "flip_h": image.flip_horizontal(),
        "flip_v": image.flip_vertical(),
        "grey": image.to_greyscale(),
        "negative": image.invert(),
        "resize": image.resize(image.width // 2, image.height // 2),
        "crop": image.crop(0, 0, image.width // 2, image.height // 2),
        "thumb": image.cropped_thumbnail(64),
    }

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    for name, result in results.items():
        output_path = output_dir / f"{name}.{args.format}"
        result.save(output_path, args.format)
        print(f"输出已保存到: {output_path}")

    if args.preview:
        print("打开预览窗口（关闭窗口后退出）...")
        thread = results["border"].preview()
        thread.join()

    print("完成!")


if __name__ == "__main__":
    main()
