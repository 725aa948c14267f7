"""日志配置。"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(processName)s] %(levelname)s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """初始化项目日志配置，主进程与工作进程各调用一次。"""

    logging.basicConfig(level=level, format=LOG_FORMAT)
