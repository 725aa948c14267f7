"""项目内使用的自定义异常定义。"""


class FiximgError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(FiximgError):
    """配置不合法时抛出。"""


class ToolNotFoundError(FiximgError):
    """外部 JPEG 优化工具不在 PATH 中，启动阶段即终止。"""


class ScanError(FiximgError):
    """输入目录无法打开，整个批次无法继续。"""


class CodecError(FiximgError):
    """PNG/JPEG 优化器拒绝或处理失败。"""


class CollisionError(FiximgError):
    """目标文件已存在，说明已有内容相同的产出。"""


class FileIOError(FiximgError):
    """读取源文件、写入或重命名目标文件失败。"""
