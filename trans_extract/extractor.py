# trans_extract/extractor.py
"""
提取编排器：枚举源文件，以有界并发的批次运行模式匹配与键生成，
再把结果去重、校验，汇总为一份 `ExtractionReport`。

单个文件的失败只会被记录并计数，不会中断整个运行；只有无效的根搜索路径
才会以 `InvalidSearchPathError` 终止运行。
"""

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import structlog

from trans_extract.aggregation import (
    collect_services,
    deduplicate,
    find_key_collisions,
    group_by_service,
)
from trans_extract.config import TransExtractConfig
from trans_extract.exceptions import InvalidSearchPathError
from trans_extract.filesystem import (
    filter_files_by_size,
    find_source_files,
    read_source_file,
    relative_to_root,
)
from trans_extract.keys import determine_category, determine_priority, generate_key
from trans_extract.patterns import (
    DEFAULT_PATTERNS,
    ExtractionPattern,
    extract_comments,
    find_matches,
    find_nearby_comment,
    line_of,
)
from trans_extract.performance import PerformanceMonitor
from trans_extract.types import (
    DatasetMetadata,
    ExtractionReport,
    TranslationDataset,
    TranslationKey,
    ValidationResult,
)
from trans_extract.validator import Validator


@dataclass
class ExtractionOptions:
    """一次提取运行的参数。为 None 的字段回退到配置中的值。"""

    path: str = "."
    ignore: Optional[list[str]] = None
    exclude_patterns: list[str] = field(default_factory=list)
    patterns: Sequence[ExtractionPattern] = DEFAULT_PATTERNS
    extensions: Optional[list[str]] = None
    verbose: bool = False
    validate: Optional[bool] = None
    max_file_size: Optional[float] = None
    concurrency: Optional[int] = None
    include_comments: bool = False
    timeout: Optional[float] = None


@dataclass
class _BatchOutcome:
    keys: list[TranslationKey] = field(default_factory=list)
    processed: int = 0
    failed: int = 0
    timed_out: bool = False


class TranslationExtractor:
    """从源代码目录中提取翻译键。"""

    def __init__(
        self,
        config: TransExtractConfig,
        logger: Optional[Any] = None,
        validator: Optional[Validator] = None,
        monitor: Optional[PerformanceMonitor] = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger(__name__)
        self.validator = validator or Validator.from_config(config)
        self.monitor = monitor or PerformanceMonitor(self.logger)

    async def extract(self, options: ExtractionOptions) -> ExtractionReport:
        """
        执行一次完整的提取。

        Raises:
            InvalidSearchPathError: 根搜索路径无效。此时不会进行任何文件 I/O。
        """
        validate = (
            options.validate
            if options.validate is not None
            else self.config.features.enable_validation
        )
        self._validate_root(options.path, validate)

        if options.ignore is not None:
            ignore = list(options.ignore)
        else:
            ignore = list(self.config.extraction.ignore)
        ignore.extend(options.exclude_patterns)
        extensions = options.extensions or self.config.extraction.extensions
        max_file_size = options.max_file_size or self.config.performance.max_file_size
        concurrency = max(
            1, options.concurrency or self.config.performance.max_concurrency
        )
        timeout = (
            options.timeout
            if options.timeout is not None
            else self.config.performance.timeout
        )

        started = time.monotonic()
        self.monitor.start_monitoring()
        self.logger.info(
            "开始提取翻译键。",
            path=options.path,
            concurrency=concurrency,
            max_file_size_mb=max_file_size,
        )

        files = await asyncio.to_thread(
            find_source_files, options.path, extensions, ignore
        )
        kept, skipped = await asyncio.to_thread(
            filter_files_by_size, files, max_file_size
        )
        self.monitor.update_files_skipped(len(skipped))
        self.logger.info(
            "已找到待处理的源文件。",
            found=len(files),
            kept=len(kept),
            skipped=len(skipped),
        )

        outcome = await self._process_in_batches(
            kept, options, concurrency=concurrency, timeout=timeout, started=started
        )

        keys = deduplicate(outcome.keys)
        collisions = find_key_collisions(keys)
        for key, texts in collisions.items():
            self.logger.warning("多个不同文本生成了同一个键。", key=key, texts=texts)

        validation: Optional[ValidationResult] = None
        if validate:
            validation = self.validator.validate_translation_keys(
                keys, root=options.path
            )
            self._log_validation(validation)

        # 进度条按已完成（含失败）的文件计数，指标只统计成功处理的文件。
        self.monitor.update_files_processed(outcome.processed)
        self.monitor.update_keys_processed(len(keys))
        metrics = self.monitor.end_monitoring()
        self.monitor.log_metrics()

        report = ExtractionReport(
            keys=keys,
            files_found=len(files),
            files_processed=outcome.processed,
            files_skipped=len(skipped),
            files_failed=outcome.failed,
            timed_out=outcome.timed_out,
            services=collect_services(keys),
            collisions=collisions,
            validation=validation,
            metrics=metrics,
            service_summary=group_by_service(keys),
        )
        self.logger.info(
            "提取完成。",
            total_keys=len(keys),
            files_processed=report.files_processed,
            files_skipped=report.files_skipped,
            files_failed=report.files_failed,
            timed_out=report.timed_out,
        )
        return report

    def build_dataset(self, report: ExtractionReport) -> TranslationDataset:
        duration_ms = report.metrics.duration_ms if report.metrics else None
        metadata = DatasetMetadata(
            version=self.config.version,
            environment=self.config.environment,
            total_files=report.files_found,
            extraction_time=duration_ms or 0.0,
        )
        return report.to_dataset(metadata)

    def _validate_root(self, path: str, validate: bool) -> None:
        if validate and self.config.security.validate_inputs:
            result = self.validator.validate_path(path)
            for warning in result.warnings:
                self.logger.warning(
                    warning.message, path=path, suggestion=warning.suggestion
                )
            if not result.is_valid:
                messages = "; ".join(error.message for error in result.errors)
                raise InvalidSearchPathError(f"无效的搜索路径 '{path}': {messages}")
        if not path or not Path(path).is_dir():
            raise InvalidSearchPathError(f"搜索路径不存在或不是目录: '{path}'")

    async def _process_in_batches(
        self,
        files: list[str],
        options: ExtractionOptions,
        concurrency: int,
        timeout: float,
        started: float,
    ) -> _BatchOutcome:
        outcome = _BatchOutcome()
        total = len(files)

        for batch_start in range(0, total, concurrency):
            # 超时只在批次之间检查：已经开始的批次总会执行完。
            if time.monotonic() - started > timeout:
                self.logger.warning(
                    "提取超时，停止调度剩余文件。",
                    timeout_seconds=timeout,
                    remaining_files=total - batch_start,
                )
                outcome.timed_out = True
                break

            batch = files[batch_start : batch_start + concurrency]
            results = await asyncio.gather(
                *(
                    asyncio.to_thread(self._extract_from_file, file_path, options)
                    for file_path in batch
                ),
                return_exceptions=True,
            )
            # gather 按传入顺序返回结果，因此追加顺序就是文件枚举顺序。
            for file_path, result in zip(batch, results):
                if isinstance(result, BaseException):
                    outcome.failed += 1
                    self.logger.error(
                        "处理文件失败，已跳过。", file=file_path, error=str(result)
                    )
                    continue
                outcome.processed += 1
                outcome.keys.extend(result)
                if options.verbose:
                    self.logger.info("已处理文件。", file=file_path, keys=len(result))

            self.monitor.update_progress(outcome.processed + outcome.failed, total)

        return outcome

    def _extract_from_file(
        self, file_path: str, options: ExtractionOptions
    ) -> list[TranslationKey]:
        content = read_source_file(file_path)
        relative = relative_to_root(file_path, options.path)
        comments = extract_comments(content) if options.include_comments else []
        service_tokens = self.config.extraction.service_tokens
        keys: list[TranslationKey] = []

        for match in find_matches(content, options.patterns):
            text = self.validator.sanitize_output(match.text)
            # 清洗可能缩短文本，需要重新检查长度下限。
            if len(text) < 3:
                continue
            line = line_of(content, match.start)
            keys.append(
                TranslationKey(
                    key=generate_key(text, match.type, relative, service_tokens),
                    text=text,
                    type=match.type,
                    file=relative,
                    line=line,
                    context=find_nearby_comment(comments, line) if comments else None,
                    priority=determine_priority(text, match.type),
                    category=determine_category(relative, service_tokens),
                )
            )
        return keys

    def _log_validation(self, validation: ValidationResult) -> None:
        for error in validation.errors:
            self.logger.error(
                "校验错误。",
                message=error.message,
                severity=error.severity,
                file=error.file,
                line=error.line,
            )
        for warning in validation.warnings:
            self.logger.warning(
                "校验警告。",
                message=warning.message,
                suggestion=warning.suggestion,
                file=warning.file,
                line=warning.line,
            )
