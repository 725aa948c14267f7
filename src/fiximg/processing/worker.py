"""并发处理的工作单元。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from fiximg.core.addressing import address_of
from fiximg.core.config import OutputConfig
from fiximg.core.exceptions import CodecError, CollisionError, FileIOError
from fiximg.core.models import SUCCESS_STATUS, FileOutcome, Kind
from fiximg.core.output_manager import OutputManager
from fiximg.processing.codecs import optimize_payload

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ItemTask:
    """描述单个文件的处理任务。"""

    source_path: Path
    kind: Kind
    output: OutputConfig
    jpegoptim: str


def run_task(task: ItemTask) -> FileOutcome:
    """在工作进程中执行完整的处理流程：读取、优化、寻址、落盘。

    所有单文件错误都在此处转换为失败记录，不会影响其他任务。
    """

    LOGGER.info("开始处理 %s", task.source_path)

    try:
        data = task.source_path.read_bytes()
    except OSError as exc:
        return _failure(task, "error-read", FileIOError(f"读取失败: {exc}"))

    try:
        payload = optimize_payload(task.kind, data, task.jpegoptim)
    except CodecError as exc:
        return _failure(task, "error-codec", exc)

    digest = address_of(payload)

    try:
        destination = OutputManager(task.output).place(
            payload,
            digest,
            task.source_path,
            unchanged=payload == data,
        )
    except CollisionError as exc:
        return _failure(task, "error-collision", exc)
    except FileIOError as exc:
        return _failure(task, "error-write", exc)

    LOGGER.debug("完成 %s -> %s", task.source_path, destination)
    return FileOutcome(
        source_path=task.source_path,
        status=SUCCESS_STATUS,
        output_path=destination,
    )


def _failure(task: ItemTask, status: str, exc: Exception) -> FileOutcome:
    return FileOutcome(
        source_path=task.source_path,
        status=status,
        message=str(exc),
        error_type=type(exc).__name__,
    )
