"""测试共用的外部工具替身。"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest

ToolFactory = Callable[[str], str]


@pytest.fixture
def tool_factory(tmp_path: Path) -> ToolFactory:
    """生成以给定 shell 脚本为内容的可执行文件，代替 jpegoptim。"""

    if sys.platform == "win32":
        pytest.skip("替身脚本依赖 POSIX shell")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    counter = 0

    def factory(body: str) -> str:
        nonlocal counter
        counter += 1
        script = bin_dir / f"jpegoptim-{counter}"
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(0o755)
        return str(script)

    return factory


@pytest.fixture
def fake_jpegoptim(tool_factory: ToolFactory) -> str:
    """原样回写 stdin 的 jpegoptim 替身。"""

    return tool_factory("exec cat")
