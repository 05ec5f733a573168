"""
Errors - 异常类型

校验类错误同时继承 ValueError，外部协作者错误同时继承 OSError。
"""


class RasterError(Exception):
    """所有 rasterkit 异常的基类"""


class InvalidDimension(RasterError, ValueError):
    """宽高非正数或尺寸退化"""


class InvalidColorFormat(RasterError, ValueError):
    """十六进制颜色字符串格式错误"""


class OutOfBounds(RasterError, ValueError):
    """裁剪区域越界或不递增"""


class UnsupportedFormat(RasterError, ValueError):
    """编码器不认识的格式"""


class InvalidArgument(RasterError, ValueError):
    """参数不合法（例如 URL 格式错误、未知边框样式）"""


class LoadFailed(RasterError, OSError):
    """解码或网络加载失败"""


class EncodeFailed(RasterError, OSError):
    """编码或写出失败"""
