"""批处理任务的配置模型。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

PlacementMode = str  # copy | rename，整个批次只选择一次。

PLACEMENT_MODES = ("copy", "rename")


@dataclass(slots=True)
class OutputConfig:
    """输出目录与落盘方式配置。

    rename 模式下 ``output_dir`` 与输入目录相同，文件在原目录内重命名。
    """

    output_dir: Path
    mode: PlacementMode = "copy"


@dataclass(slots=True)
class JobConfig:
    """单次批处理任务的配置集合，启动时构建一次，所有任务只读共享。"""

    input_dir: Path
    output: OutputConfig
    jpegoptim: Optional[str] = None
    max_workers: Optional[int] = None
    report_path: Optional[Path] = None
