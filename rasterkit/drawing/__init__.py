"""
Drawing 模块 - 作用域绘图上下文

职责：
- 在目标缓冲区上执行填充、贴图、缩放/镜像贴图
- 保证每次获取的上下文在任何退出路径上都被释放
"""

from .graphics import ContextState, DrawingContext, paint

__all__ = ["ContextState", "DrawingContext", "paint"]
