"""PNG/JPEG 无损重编码适配层。

PNG 在进程内交给 oxipng 重新压缩，默认保留全部辅助块；JPEG 交给外部的
jpegoptim，通过管道传入原始字节并读取优化结果。两者都只处理内存中的完整
缓冲区，不修改源文件。
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Optional

import oxipng

from fiximg.core.exceptions import CodecError, ToolNotFoundError
from fiximg.core.models import Kind

LOGGER = logging.getLogger(__name__)

JPEGOPTIM_NAME = "jpegoptim"
JPEG_SOI = b"\xff\xd8"
JPEG_EOI = b"\xff\xd9"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def resolve_jpegoptim(explicit: Optional[str] = None) -> str:
    """在 PATH 中定位 jpegoptim，返回可执行文件的完整路径。"""

    name = explicit or JPEGOPTIM_NAME
    resolved = shutil.which(name)
    if resolved is None:
        raise ToolNotFoundError(f"未找到 {name}，请确认 PATH 中存在可执行的 jpegoptim")
    LOGGER.debug("使用 jpegoptim: %s", resolved)
    return resolved


def optimize_png(data: bytes) -> bytes:
    """无损重新压缩 PNG，结果不小于原文件时直接返回原字节。

    位深、gAMA/sBIT 等颜色相关块与文本块都原样保留。
    """

    if not data.startswith(PNG_SIGNATURE):
        raise CodecError("不是 PNG 图像: 缺少 PNG 文件签名")

    try:
        optimized = oxipng.optimize_from_memory(data)
    except oxipng.PngError as exc:
        raise CodecError(f"无法优化 PNG: {exc}") from exc

    if len(optimized) >= len(data):
        return data
    return optimized


def optimize_jpeg(data: bytes, jpegoptim: str) -> bytes:
    """调用 jpegoptim 无损优化 JPEG。

    输入一次性写入 stdin 后等待进程结束再读取 stdout，诊断输出丢弃。
    进程句柄只在本次调用内存活。
    """

    try:
        completed = subprocess.run(
            [jpegoptim, "--stdin", "--stdout"],
            input=data,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as exc:
        raise CodecError(f"无法启动 {jpegoptim}: {exc}") from exc

    if completed.returncode != 0:
        raise CodecError(f"jpegoptim 处理失败，退出码 {completed.returncode}")

    output = completed.stdout
    if not output.startswith(JPEG_SOI) or not output.endswith(JPEG_EOI):
        raise CodecError(f"jpegoptim 输出不完整 ({len(output)} 字节)")
    return output


def optimize_payload(kind: Kind, data: bytes, jpegoptim: str) -> bytes:
    """按文件类别分派优化器，其他类别原样返回。"""

    if kind is Kind.PNG:
        return optimize_png(data)
    if kind is Kind.JPEG:
        return optimize_jpeg(data, jpegoptim)
    return data
