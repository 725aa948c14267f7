"""输入目录扫描与文件分类。"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from fiximg.core.exceptions import ScanError
from fiximg.core.models import FileOutcome, Kind, SourceItem

LOGGER = logging.getLogger(__name__)

# 扩展名比较区分大小写，与历史行为保持一致。
KIND_BY_EXTENSION = {
    "png": Kind.PNG,
    "jpeg": Kind.JPEG,
    "jpg": Kind.JPEG,
}


@dataclass(slots=True)
class ScanResult:
    """一次目录快照：待处理文件与列举阶段即失败的条目。"""

    items: list[SourceItem] = field(default_factory=list)
    failures: list[FileOutcome] = field(default_factory=list)


def classify(path: Path) -> Kind:
    """根据扩展名判断文件类别，未知或缺失扩展名一律归为 OTHER。"""

    return KIND_BY_EXTENSION.get(path.suffix[1:], Kind.OTHER)


def collect_items(input_dir: Path) -> ScanResult:
    """非递归地扫描输入目录，一次性构建完整的工作列表。"""

    result = ScanResult()
    try:
        with os.scandir(input_dir) as entries:
            for entry in entries:
                path = Path(entry.path)
                try:
                    is_file = entry.is_file()
                except OSError as exc:
                    LOGGER.warning("无法读取目录条目 %s: %s", path, exc)
                    result.failures.append(
                        FileOutcome(
                            source_path=path,
                            status="error-scan",
                            message=f"无法读取目录条目: {exc}",
                            error_type="FileIOError",
                        )
                    )
                    continue

                if not is_file:
                    LOGGER.debug("跳过非文件条目: %s", path)
                    continue

                result.items.append(SourceItem(source_path=path, kind=classify(path)))
    except OSError as exc:
        raise ScanError(f"无法打开输入目录: {input_dir}") from exc

    result.items.sort(key=lambda item: str(item.source_path))
    return result
