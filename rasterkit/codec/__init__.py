"""
Codec 模块 - 外部编解码协作者

职责：
- 从字节、文件、URL 解码为 RGB/ARGB 像素缓冲区
- 把像素缓冲区编码为字节或写入目标
"""

from .codec import ImageCodec, create_codec, resolve_format
from .fetch import UrlFetcher

__all__ = ["ImageCodec", "UrlFetcher", "create_codec", "resolve_format"]
