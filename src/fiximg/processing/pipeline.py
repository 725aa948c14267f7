"""处理流水线：预检、扫描、并发优化与内容寻址落盘。"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Callable, Optional

from fiximg.core.config import JobConfig
from fiximg.core.models import BatchResult, FileOutcome
from fiximg.core.output_manager import OutputManager
from fiximg.core.progress import ProgressUpdate
from fiximg.core.report import write_csv_report
from fiximg.core.scanner import collect_items
from fiximg.processing.codecs import resolve_jpegoptim
from fiximg.processing.worker import ItemTask, run_task
from fiximg.utils.logging import setup_logging

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def process_batch(config: JobConfig, progress_callback: ProgressCallback = None) -> BatchResult:
    """批量处理入口。

    jpegoptim 预检与输入目录打开失败属于致命错误，直接抛出；其余错误都按文件
    记录在结果中。
    """

    jpegoptim = resolve_jpegoptim(config.jpegoptim)
    output_manager = OutputManager(config.output)

    LOGGER.info("开始扫描输入目录 %s", config.input_dir)
    scan = collect_items(config.input_dir)
    total = len(scan.items) + len(scan.failures)
    LOGGER.info("发现 %d 个待处理文件", len(scan.items))

    result = BatchResult()
    for outcome in scan.failures:
        _record_outcome(result, outcome, total, progress_callback)

    if not scan.items:
        _emit_progress(progress_callback, result, total, "没有需要处理的文件", status="done")
        _write_report(config, result)
        return result

    output_manager.prepare()
    tasks = [
        ItemTask(
            source_path=item.source_path,
            kind=item.kind,
            output=config.output,
            jpegoptim=jpegoptim,
        )
        for item in scan.items
    ]

    max_workers = config.max_workers or os.cpu_count() or 1
    if max_workers <= 1:
        for task in tasks:
            _record_outcome(result, run_task(task), total, progress_callback)
    else:
        with ProcessPoolExecutor(
            max_workers=max_workers,
            initializer=setup_logging,
            initargs=(logging.getLogger().getEffectiveLevel(),),
        ) as executor:
            future_map = {executor.submit(run_task, task): task for task in tasks}
            for future in as_completed(future_map):
                task = future_map[future]
                try:
                    outcome = future.result()
                except Exception as exc:  # noqa: BLE001
                    LOGGER.exception("任务执行异常：%s", exc)
                    outcome = FileOutcome(
                        source_path=task.source_path,
                        status="error-worker",
                        message=str(exc),
                        error_type=type(exc).__name__,
                    )
                _record_outcome(result, outcome, total, progress_callback)

    _emit_progress(progress_callback, result, total, "处理完成", status="done")
    _write_report(config, result)
    return result


def _record_outcome(
    result: BatchResult,
    outcome: FileOutcome,
    total: int,
    callback: ProgressCallback,
) -> None:
    result.add(outcome)
    if outcome.ok:
        message = f"完成 {outcome.source_path.name}"
    else:
        LOGGER.warning("%s: %s", outcome.source_path, outcome.message)
        message = f"失败 {outcome.source_path.name}"
    _emit_progress(callback, result, total, message)


def _emit_progress(
    callback: ProgressCallback,
    result: BatchResult,
    total: int,
    message: Optional[str] = None,
    status: str = "running",
) -> None:
    if not callback:
        return
    callback(
        ProgressUpdate(
            total=total,
            completed=len(result.outcomes),
            failed=result.failed_count,
            message=message,
            status=status,
        )
    )


def _write_report(config: JobConfig, result: BatchResult) -> None:
    if config.report_path is None:
        return
    try:
        write_csv_report(result.outcomes, config.report_path)
    except OSError as exc:
        LOGGER.error("写入报告失败：%s", exc)
