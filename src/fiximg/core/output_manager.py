"""输出落盘与冲突检测模块。

两种模式共用同一套冲突约定：目标路径必须尚不存在。检测依赖 ``os.link``
在目标已存在时原子失败，不额外加锁，因此并发任务争抢同一目标时只会有一个成功。
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

from fiximg.core.addressing import destination_name, source_extension
from fiximg.core.config import PLACEMENT_MODES, OutputConfig
from fiximg.core.exceptions import CollisionError, FileIOError, InvalidConfigurationError

LOGGER = logging.getLogger(__name__)

STAGING_PREFIX = ".fiximg-"


class OutputManager:
    """负责决定输出路径，并以“不存在才创建”的语义写入或重命名。"""

    def __init__(self, config: OutputConfig) -> None:
        if config.mode not in PLACEMENT_MODES:
            raise InvalidConfigurationError(f"未知的输出模式: {config.mode}")
        self.config = config
        self.output_dir = config.output_dir.resolve()

    @property
    def rename_in_place(self) -> bool:
        return self.config.mode == "rename"

    def prepare(self) -> None:
        """批次开始前调用一次，确保输出目录存在。"""

        if not self.rename_in_place:
            self.output_dir.mkdir(parents=True, exist_ok=True)

    def destination_for(self, digest: str, source_path: Path) -> Path:
        directory = source_path.parent if self.rename_in_place else self.output_dir
        return directory / destination_name(digest, source_extension(source_path))

    def place(self, payload: bytes, digest: str, source_path: Path, *, unchanged: bool = False) -> Path:
        """将优化结果放到内容寻址的目标位置，返回目标路径。

        ``unchanged`` 表示 payload 与源文件内容完全一致，rename 模式下可直接
        重命名源文件而无需重新写入。
        """

        destination = self.destination_for(digest, source_path)
        if self.rename_in_place:
            self._rename_in_place(payload, source_path, destination, unchanged)
        else:
            self._write_new(payload, destination)
        return destination

    def _write_new(self, payload: bytes, destination: Path) -> None:
        staged = _stage(payload, destination.parent)
        try:
            _link_exclusive(staged, destination)
        finally:
            _discard(staged)

    def _rename_in_place(self, payload: bytes, source_path: Path, destination: Path, unchanged: bool) -> None:
        if unchanged and source_path == destination:
            # 已是内容寻址文件名，重复运行时视为已完成。
            LOGGER.debug("文件名已与内容一致: %s", source_path)
            return

        if unchanged:
            _link_exclusive(source_path, destination)
        else:
            staged = _stage(payload, destination.parent)
            try:
                _link_exclusive(staged, destination)
            finally:
                _discard(staged)

        try:
            source_path.unlink()
        except OSError as exc:
            # 源文件无法移除时撤销目标，保持“要么完成要么不发生”。
            _discard(destination)
            raise FileIOError(f"无法移除源文件 {source_path}: {exc}") from exc


def _stage(payload: bytes, directory: Path) -> Path:
    """在目标目录写入临时文件，失败时不留下任何残留。"""

    try:
        fd, name = tempfile.mkstemp(prefix=STAGING_PREFIX, suffix=".tmp", dir=directory)
    except OSError as exc:
        raise FileIOError(f"无法在 {directory} 创建临时文件: {exc}") from exc

    staged = Path(name)
    try:
        with os.fdopen(fd, "wb") as handle:
            _write_payload(handle, payload)
    except OSError as exc:
        _discard(staged)
        raise FileIOError(f"写入文件失败: {exc}") from exc
    return staged


def _write_payload(handle: BinaryIO, payload: bytes) -> None:
    handle.write(payload)


def _link_exclusive(source: Path, destination: Path) -> None:
    try:
        os.link(source, destination)
    except FileExistsError as exc:
        raise CollisionError(f"目标已存在: {destination.name}") from exc
    except OSError as exc:
        raise FileIOError(f"无法创建目标文件 {destination}: {exc}") from exc


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        LOGGER.warning("清理文件失败 %s: %s", path, exc)
