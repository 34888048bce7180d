# trans_extract/performance.py
"""运行期性能指标与进度通知。"""

import time
from typing import Any, Callable, Literal, Optional

import structlog

from trans_extract.types import PerformanceMetrics, ProgressUpdate

ProgressCallback = Callable[[ProgressUpdate], None]


class PerformanceMonitor:
    """
    记录一次运行的耗时、已处理文件数和键数量，并把进度推送给已注册的回调。

    监视器只通过回调与展示层交互，CLI 用它驱动 Rich 进度条，测试则可以直接
    注册一个收集函数。
    """

    def __init__(self, logger: Optional[Any] = None) -> None:
        self._logger = logger or structlog.get_logger(__name__)
        self._metrics: Optional[PerformanceMetrics] = None
        self._callbacks: list[ProgressCallback] = []

    @property
    def metrics(self) -> Optional[PerformanceMetrics]:
        return self._metrics

    def start_monitoring(self) -> None:
        self._metrics = PerformanceMetrics(start_time=time.monotonic())

    def end_monitoring(self) -> PerformanceMetrics:
        if self._metrics is None:
            raise RuntimeError("性能监控尚未启动。")
        end = time.monotonic()
        self._metrics.end_time = end
        self._metrics.duration_ms = round((end - self._metrics.start_time) * 1000, 2)
        return self._metrics

    def update_progress(
        self,
        current: int,
        total: int,
        status: Literal["processing", "completed", "error"] = "processing",
    ) -> None:
        if self._metrics is None:
            return
        self._metrics.files_processed = current

        percentage = round(current / total * 100) if total > 0 else 0
        speed = self._speed(current)
        eta = (total - current) / speed if speed and current < total else None
        update = ProgressUpdate(
            current=current,
            total=total,
            percentage=percentage,
            speed=speed,
            eta_seconds=eta,
            status=status,
        )
        for callback in list(self._callbacks):
            callback(update)

        self._logger.debug(
            "进度更新。",
            current=current,
            total=total,
            percentage=percentage,
            speed=round(speed, 2) if speed else None,
        )

    def update_files_processed(self, count: int) -> None:
        """覆盖进度更新写入的计数，进度计数中包含处理失败的文件。"""
        if self._metrics is not None:
            self._metrics.files_processed = count

    def update_keys_processed(self, count: int) -> None:
        if self._metrics is not None:
            self._metrics.total_keys = count

    def update_files_skipped(self, count: int) -> None:
        if self._metrics is not None:
            self._metrics.files_skipped = count

    def on_progress(self, callback: ProgressCallback) -> None:
        self._callbacks.append(callback)

    def remove_progress_callback(self, callback: ProgressCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def log_metrics(self) -> None:
        if self._metrics is None:
            return
        metrics = self._metrics
        extra: dict[str, float] = {}
        if metrics.duration_ms:
            seconds = metrics.duration_ms / 1000
            extra["keys_per_second"] = round(metrics.total_keys / seconds, 2)
            extra["files_per_second"] = round(metrics.files_processed / seconds, 2)
        self._logger.info(
            "性能指标。",
            duration_ms=metrics.duration_ms,
            files_processed=metrics.files_processed,
            files_skipped=metrics.files_skipped,
            total_keys=metrics.total_keys,
            **extra,
        )

    def reset(self) -> None:
        self._metrics = None
        self._callbacks = []

    def _speed(self, current: int) -> Optional[float]:
        if self._metrics is None or current == 0:
            return None
        elapsed = time.monotonic() - self._metrics.start_time
        return current / elapsed if elapsed > 0 else None
