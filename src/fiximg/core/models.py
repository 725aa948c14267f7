"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

SUCCESS_STATUS = "processed"


class Kind(Enum):
    """按扩展名划分的文件类别。"""

    PNG = "png"
    JPEG = "jpeg"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class SourceItem:
    """扫描阶段得到的单个待处理文件。"""

    source_path: Path
    kind: Kind


@dataclass(slots=True)
class FileOutcome:
    """记录单个文件的处理结果（用于报告/日志）。"""

    source_path: Path
    status: str
    output_path: Optional[Path] = None
    message: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS_STATUS


@dataclass(slots=True)
class BatchResult:
    """批处理的汇总结果，顺序为完成顺序而非输入顺序。"""

    outcomes: list[FileOutcome] = field(default_factory=list)
    failed_count: int = 0

    def add(self, outcome: FileOutcome) -> None:
        self.outcomes.append(outcome)
        if not outcome.ok:
            self.failed_count += 1

    @property
    def succeeded(self) -> list[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> list[FileOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def has_failures(self) -> bool:
        return self.failed_count > 0
