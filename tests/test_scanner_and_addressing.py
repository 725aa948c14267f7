"""环节一：测试文件分类、目录扫描与内容寻址。"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path

import pytest

from fiximg.core import scanner as scanner_module
from fiximg.core.addressing import address_of, destination_name, source_extension
from fiximg.core.exceptions import ScanError
from fiximg.core.models import Kind
from fiximg.core.scanner import classify, collect_items


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("photo.png", Kind.PNG),
        ("photo.jpg", Kind.JPEG),
        ("photo.jpeg", Kind.JPEG),
        ("notes.txt", Kind.OTHER),
        ("archive.tar.gz", Kind.OTHER),
        ("README", Kind.OTHER),
        (".png", Kind.OTHER),
        # 扩展名比较区分大小写。
        ("PHOTO.PNG", Kind.OTHER),
        ("photo.JPG", Kind.OTHER),
    ],
)
def test_classify_by_extension(name: str, expected: Kind) -> None:
    assert classify(Path("/some/dir") / name) is expected


def test_collect_items_is_flat_and_skips_directories(tmp_path: Path) -> None:
    (tmp_path / "b.png").write_bytes(b"png")
    (tmp_path / "a.txt").write_bytes(b"text")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "deep.jpg").write_bytes(b"jpg")

    scan = collect_items(tmp_path)

    assert [item.source_path.name for item in scan.items] == ["a.txt", "b.png"]
    assert [item.kind for item in scan.items] == [Kind.OTHER, Kind.PNG]
    assert scan.failures == []


def test_collect_items_missing_directory_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(ScanError):
        collect_items(tmp_path / "missing")


def test_address_is_deterministic_fixed_width_hex() -> None:
    payload = b"\x89PNG\r\n\x1a\n" + bytes(range(256))

    first = address_of(payload)
    second = address_of(bytes(payload))

    assert first == second
    assert len(first) == 64
    assert first == first.lower()
    int(first, 16)
    assert address_of(payload + b"\x00") != first
    assert len(address_of(b"")) == 64


def test_destination_name_preserves_extension_as_found() -> None:
    digest = address_of(b"content")

    assert destination_name(digest, source_extension(Path("a.PNG"))) == f"{digest}.PNG"
    assert destination_name(digest, source_extension(Path("a.jpeg"))) == f"{digest}.jpeg"
    assert destination_name(digest, source_extension(Path("Makefile"))) == digest


class _UnreadableEntry:
    """模拟列举时无法获取类型的目录条目。"""

    def __init__(self, path: Path) -> None:
        self.path = str(path)

    def is_file(self) -> bool:
        raise PermissionError(13, "Permission denied", self.path)


def test_collect_items_reports_unreadable_entries(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "a.png").write_bytes(b"png")
    real_scandir = os.scandir

    @contextmanager
    def scandir_with_broken_entry(path):
        with real_scandir(path) as entries:
            yield [*entries, _UnreadableEntry(Path(path) / "ghost.jpg")]

    monkeypatch.setattr(scanner_module.os, "scandir", scandir_with_broken_entry)

    scan = collect_items(tmp_path)

    assert [item.source_path.name for item in scan.items] == ["a.png"]
    assert len(scan.failures) == 1
    failure = scan.failures[0]
    assert failure.source_path.name == "ghost.jpg"
    assert failure.status == "error-scan"
    assert failure.error_type == "FileIOError"
    assert not failure.ok
