"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from fiximg.core.config import JobConfig, OutputConfig
from fiximg.core.exceptions import FiximgError
from fiximg.core.progress import ProgressUpdate
from fiximg.processing.pipeline import process_batch
from fiximg.utils.logging import setup_logging

app = typer.Typer(help="An image optimization commandline utility.")

EXIT_FATAL = 1
EXIT_ITEM_FAILURES = 2


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("优化图片", total=update.total)
        progress.update(task_id, completed=update.completed)

    return callback


def _resolve_output(input_dir: Path, output: Optional[Path], rename_in_place: bool) -> OutputConfig:
    if rename_in_place and output is not None:
        raise typer.BadParameter("输出目录与 --rename-in-place 只能选择其一", param_hint="OUTPUT")
    if rename_in_place:
        return OutputConfig(output_dir=input_dir, mode="rename")
    if output is None:
        raise typer.BadParameter("未指定 --rename-in-place 时必须提供输出目录", param_hint="OUTPUT")
    return OutputConfig(output_dir=output.expanduser().resolve(), mode="copy")


@app.command()
def run_cli(
    input_dir: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="The input directory",
    ),
    output: Optional[Path] = typer.Argument(
        None,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="The output directory",
    ),
    rename_in_place: bool = typer.Option(False, "--rename-in-place", help="Rename the input files in place"),
    max_workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="并发进程数量，默认等于 CPU 数"),
    jpegoptim: Optional[str] = typer.Option(None, "--jpegoptim", help="jpegoptim 可执行文件，默认在 PATH 中查找"),
    report: Optional[Path] = typer.Option(None, "--report", help="将处理结果写入 CSV 文件"),
    strict: bool = typer.Option(False, "--strict", help="存在失败文件时以非零状态退出"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """优化目录中的 PNG/JPEG，并以内容摘要命名输出文件。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)

    resolved_input = input_dir.expanduser().resolve()
    job = JobConfig(
        input_dir=resolved_input,
        output=_resolve_output(resolved_input, output, rename_in_place),
        jpegoptim=jpegoptim,
        max_workers=max_workers,
        report_path=report.expanduser().resolve() if report else None,
    )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
    )

    try:
        with progress:
            result = process_batch(job, progress_callback=_build_progress_callback(progress))
    except FiximgError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=EXIT_FATAL) from exc

    for outcome in result.failed:
        typer.echo(f"{outcome.source_path}: {outcome.message}")

    typer.echo(f"处理完成：成功 {len(result.succeeded)} 个，失败 {result.failed_count} 个。")
    if job.report_path is not None:
        typer.echo(f"报告文件：{job.report_path}")

    if strict and result.has_failures:
        raise typer.Exit(code=EXIT_ITEM_FAILURES)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
