"""
BaseDisplay - 显示协作者基类
"""

import os
import sys
from abc import ABC, abstractmethod
from typing import Callable


def terminate_process() -> None:
    """默认的关闭回调：结束整个进程（可从 UI 线程调用）"""
    sys.stdout.flush()
    os._exit(0)


class BaseDisplay(ABC):
    """显示协作者接口"""

    @abstractmethod
    def show(self, image, on_close: Callable[[], None]) -> None:
        """
        显示图像，立即返回

        Args:
            image: rasterkit.Image
            on_close: 窗口关闭时调用，可能在 UI 线程上执行
        """
        pass
