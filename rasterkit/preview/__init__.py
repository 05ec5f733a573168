"""
Preview 模块 - 外部显示协作者

职责：
- 把图像交给窗口显示
- 窗口关闭时调用完成回调（默认结束进程）
"""

from .base import BaseDisplay, terminate_process
from .tk_display import TkDisplay

__all__ = ["BaseDisplay", "TkDisplay", "terminate_process"]
