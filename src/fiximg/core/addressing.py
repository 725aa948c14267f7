"""内容寻址：由优化后的字节内容推导输出文件名。"""

from __future__ import annotations

import hashlib
from pathlib import Path

DIGEST_SIZE = 32  # 256 位，十六进制 64 个字符


def address_of(payload: bytes) -> str:
    """计算内容摘要，返回定长小写十六进制字符串。"""

    return hashlib.blake2b(payload, digest_size=DIGEST_SIZE).hexdigest()


def source_extension(path: Path) -> str:
    """返回源文件的扩展名（不含点），保留原始大小写。"""

    return path.suffix[1:]


def destination_name(digest: str, extension: str) -> str:
    if not extension:
        return digest
    return f"{digest}.{extension}"
