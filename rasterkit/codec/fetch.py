"""
UrlFetcher - 从 URL 读取图像字节

http/https 使用 requests，file: 直接读取本地路径。
"""

from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests
from omegaconf import DictConfig

from ..errors import InvalidArgument, LoadFailed

DEFAULT_USER_AGENT = "rasterkit/0.1 (+https://pypi.org/project/rasterkit/)"


class UrlFetcher:
    """URL 读取器"""

    SCHEMES = ("http", "https", "file")

    def __init__(self, cfg: DictConfig | None = None):
        loader_cfg = cfg.get("loader", {}) if cfg is not None else {}
        self.timeout = loader_cfg.get("url_timeout", 30)
        self.user_agent = loader_cfg.get("user_agent", DEFAULT_USER_AGENT)

    def validate(self, url: str) -> None:
        """
        校验 URL 格式

        Raises:
            InvalidArgument: 不是字符串、协议不支持或缺少地址
        """
        if not isinstance(url, str) or not url.strip():
            raise InvalidArgument(f"URL 格式错误: {url!r}")

        parsed = urlparse(url.strip())
        if parsed.scheme.lower() not in self.SCHEMES:
            raise InvalidArgument(f"URL 格式错误（不支持的协议）: {url!r}")
        if parsed.scheme.lower() == "file":
            if not parsed.path:
                raise InvalidArgument(f"URL 格式错误（缺少路径）: {url!r}")
        elif not parsed.netloc:
            raise InvalidArgument(f"URL 格式错误（缺少主机）: {url!r}")

    def fetch(self, url: str) -> bytes:
        """
        读取 URL 内容

        Raises:
            InvalidArgument: URL 格式错误
            LoadFailed: 网络错误、非 2xx 响应或文件读取失败
        """
        self.validate(url)
        url = url.strip()
        parsed = urlparse(url)

        if parsed.scheme.lower() == "file":
            path = Path(url2pathname(parsed.path))
            try:
                return path.read_bytes()
            except OSError as e:
                raise LoadFailed(f"读取图像失败: {e}") from e

        print(f"[Codec] Fetching image: {url}")
        try:
            rsp = requests.get(url, headers={"user-agent": self.user_agent}, timeout=self.timeout)
            rsp.raise_for_status()
        except requests.exceptions.InvalidURL as e:
            raise InvalidArgument(f"URL 格式错误: {url!r}") from e
        except requests.RequestException as e:
            raise LoadFailed(f"读取图像失败: {e}") from e

        return rsp.content
