"""
TkDisplay - 基于 tkinter 的预览窗口

窗口在独立的 UI 线程中运行，show() 立即返回。
"""

import threading
from typing import Callable

from omegaconf import DictConfig

from .base import BaseDisplay


class TkDisplay(BaseDisplay):
    """tkinter 预览窗口"""

    def __init__(self, cfg: DictConfig | None = None):
        """
        Args:
            cfg: 配置对象，读取 preview.title / padding / title_bar
        """
        preview_cfg = cfg.get("preview", {}) if cfg is not None else {}
        self.title = preview_cfg.get("title", "Preview")
        self.padding = preview_cfg.get("padding", 10)
        self.title_bar = preview_cfg.get("title_bar", 20)

    def window_geometry(self, width: int, height: int) -> str:
        """窗口尺寸：图像四周留 padding，另加标题栏高度"""
        return f"{width + 2 * self.padding}x{height + 2 * self.padding + self.title_bar}+0+0"

    def show(self, image, on_close: Callable[[], None]) -> threading.Thread:
        """
        在后台 UI 线程打开窗口

        Returns:
            运行窗口事件循环的线程
        """
        thread = threading.Thread(
            target=self._run,
            args=(image, on_close),
            name="rasterkit-preview",
            daemon=True
        )
        thread.start()
        return thread

    def _run(self, image, on_close: Callable[[], None]) -> None:
        # tkinter 只在真正打开窗口时才需要
        import tkinter as tk
        from PIL import ImageTk

        root = tk.Tk()
        root.title(self.title)
        root.geometry(self.window_geometry(image.width, image.height))

        canvas = tk.Canvas(root, highlightthickness=0)
        canvas.pack(fill="both", expand=True)
        photo = ImageTk.PhotoImage(image.to_pil(), master=root)
        canvas.create_image(self.padding, self.padding, anchor="nw", image=photo)
        canvas.image = photo  # 保持引用，避免被回收

        def handle_close():
            root.destroy()
            print("[Preview] Window closed")
            on_close()

        root.protocol("WM_DELETE_WINDOW", handle_close)
        print(f"[Preview] Showing {image.width}x{image.height} image")
        root.mainloop()
