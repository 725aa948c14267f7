"""批处理进度通知。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class ProgressUpdate:
    """每完成一个文件推送一次，``failed`` 为累计失败数。"""

    total: int
    completed: int
    failed: int = 0
    message: Optional[str] = None
    status: str = "running"
