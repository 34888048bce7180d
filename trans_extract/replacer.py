# trans_extract/replacer.py
"""
替换引擎：把源代码中已登记的字符串字面量替换为翻译调用。

所有规则都在原始文本上扫描，只替换带引号的字面量本身（引号一并替换），
字面量之外的字节（包括异常构造的第二个参数）保持不变。一个字面量一旦被
前面的规则处理过，后面的规则就不会再碰它。
"""

import asyncio
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import structlog

from trans_extract.config import TransExtractConfig
from trans_extract.dataset import load_dataset_or_empty
from trans_extract.exceptions import FileAccessError
from trans_extract.filesystem import (
    backup_file,
    find_source_files,
    read_source_file,
    write_source_file,
)
from trans_extract.patterns import line_of
from trans_extract.types import (
    FileReplacementResult,
    PatternType,
    Replacement,
    ReplacementReport,
    TranslationKey,
)
from trans_extract.utils import same_source_file

_LITERAL = r"(?P<literal>['\"`](?P<text>[^'\"`]+)['\"`])"


@dataclass(frozen=True)
class ReplacementRule:
    """一条替换规则。regex 必须包含 `literal`（含引号）和 `text` 两个命名组。"""

    name: str
    regex: re.Pattern[str]
    key_type: PatternType


REPLACEMENT_RULES: tuple[ReplacementRule, ...] = (
    ReplacementRule(
        name="exception_with_argument",
        regex=re.compile(
            rf"throw new \w+Exception\({_LITERAL}"
            r",\s*(?:\{[^}]*\}|\w+(?:\.\w+)*)\)"
        ),
        key_type=PatternType.EXCEPTION,
    ),
    ReplacementRule(
        name="exception",
        regex=re.compile(rf"throw new \w+Exception\({_LITERAL}\)"),
        key_type=PatternType.EXCEPTION,
    ),
    ReplacementRule(
        name="return_message",
        regex=re.compile(rf"return\s*\{{[^}}]*?message\s*:\s*{_LITERAL}[^}}]*\}}"),
        key_type=PatternType.RETURN_MESSAGE,
    ),
    ReplacementRule(
        name="message_property",
        regex=re.compile(rf"message\s*:\s*{_LITERAL}"),
        key_type=PatternType.MESSAGE_PROPERTY,
    ),
    ReplacementRule(
        name="template_literal",
        regex=re.compile(r"errors\.push\((?P<literal>`(?P<text>[^`]+)`)\)"),
        key_type=PatternType.TEMPLATE_LITERAL,
    ),
)


class KeyLookup:
    """
    文本 -> 键 的反向查找表。

    同一段文本可能出现在多个文件里，也可能被不同模式识别，因而拥有多个键。
    查找时依次优先：来自当前文件的键、类型与当前规则一致的键、第一次出现的键。
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[TranslationKey]] = {}

    @classmethod
    def from_keys(cls, keys: Iterable[TranslationKey]) -> "KeyLookup":
        lookup = cls()
        for item in keys:
            lookup._entries.setdefault(item.text, []).append(item)
        return lookup

    def __len__(self) -> int:
        return len(self._entries)

    def texts(self, types: Optional[Iterable[PatternType]] = None) -> set[str]:
        """返回查找表中的所有文本；给出 `types` 时只保留拥有这些类型键的文本。"""
        if types is None:
            return set(self._entries)
        wanted = set(types)
        return {
            text
            for text, entries in self._entries.items()
            if any(entry.type in wanted for entry in entries)
        }

    def find(
        self,
        text: str,
        preferred_type: PatternType,
        file_path: Optional[str] = None,
    ) -> Optional[str]:
        entries = self._entries.get(text)
        if not entries:
            return None
        if file_path is not None:
            same_file = [e for e in entries if same_source_file(file_path, e.file)]
            if same_file:
                entries = same_file
        for entry in entries:
            if entry.type == preferred_type:
                return entry.key
        return entries[0].key


def format_call(call_template: str, key: str) -> str:
    """`this.translate` + 键 -> `this.translate('KEY')`。"""
    return f"{call_template}('{key}')"


def replace_in_text(
    content: str,
    lookup: KeyLookup,
    call_template: str = "this.translate",
    rules: Sequence[ReplacementRule] = REPLACEMENT_RULES,
    max_replacements: Optional[int] = None,
    file_path: Optional[str] = None,
) -> tuple[str, list[Replacement]]:
    """
    在一段文本上应用所有替换规则。纯函数，不做任何 I/O。

    `file_path` 是这段文本所在的文件，用于在同一文本有多个键时选出该文件自己的键。

    Returns:
        (替换后的文本, 按文档顺序排列的替换列表)。没有任何替换时返回原文本。
    """
    consumed: list[tuple[int, int]] = []
    planned: list[Replacement] = []

    for rule in rules:
        for m in rule.regex.finditer(content):
            start, end = m.span("literal")
            if any(start < c_end and c_start < end for c_start, c_end in consumed):
                continue
            text = m.group("text")
            key = lookup.find(text, rule.key_type, file_path)
            if key is None:
                continue
            consumed.append((start, end))
            planned.append(
                Replacement(
                    line=line_of(content, start),
                    text=text,
                    key=key,
                    rule=rule.key_type,
                    start=start,
                    end=end,
                )
            )

    planned.sort(key=lambda r: r.start)
    if max_replacements is not None:
        planned = planned[:max_replacements]
    if not planned:
        return content, []

    parts: list[str] = []
    cursor = 0
    for replacement in planned:
        parts.append(content[cursor : replacement.start])
        parts.append(format_call(call_template, replacement.key))
        cursor = replacement.end
    parts.append(content[cursor:])
    return "".join(parts), planned


@dataclass
class ReplacementOptions:
    path: str = "."
    keys_file: str = "translation-keys.json"
    backup: Optional[bool] = None
    dry_run: Optional[bool] = None
    max_replacements: Optional[int] = None
    concurrency: Optional[int] = None
    ignore: Optional[list[str]] = None
    verbose: bool = False


class TranslationReplacer:
    """把数据集中登记过的字符串字面量替换为翻译调用。"""

    def __init__(self, config: TransExtractConfig, logger: Optional[Any] = None):
        self.config = config
        self.logger = logger or structlog.get_logger(__name__)

    async def replace(self, options: ReplacementOptions) -> ReplacementReport:
        dry_run = (
            options.dry_run
            if options.dry_run is not None
            else self.config.features.enable_dry_run
        )
        backup = (
            options.backup
            if options.backup is not None
            else self.config.features.enable_backup
        )
        concurrency = max(
            1, options.concurrency or self.config.performance.max_concurrency
        )
        report = ReplacementReport(dry_run=dry_run)

        dataset = await asyncio.to_thread(
            load_dataset_or_empty, Path(options.keys_file), self.logger
        )
        lookup = KeyLookup.from_keys(dataset.keys)
        if not len(lookup):
            self.logger.info("没有可用的翻译键，不进行任何替换。")
            return report

        ignore = (
            options.ignore
            if options.ignore is not None
            else self.config.extraction.ignore
        )
        if Path(options.path).is_file():
            files = [Path(options.path).as_posix()]
        else:
            files = await asyncio.to_thread(
                find_source_files,
                options.path,
                self.config.extraction.extensions,
                ignore,
            )
        self.logger.info(
            "开始替换。", path=options.path, files=len(files), dry_run=dry_run
        )

        for batch_start in range(0, len(files), concurrency):
            batch = files[batch_start : batch_start + concurrency]
            results = await asyncio.gather(
                *(
                    asyncio.to_thread(
                        self._replace_in_file,
                        file_path,
                        lookup,
                        dry_run,
                        backup,
                        options.max_replacements,
                    )
                    for file_path in batch
                ),
                return_exceptions=True,
            )
            for file_path, result in zip(batch, results):
                report.files_scanned += 1
                if isinstance(result, BaseException):
                    report.files_failed += 1
                    self.logger.error(
                        "处理文件失败，已跳过。", file=file_path, error=str(result)
                    )
                    report.files.append(
                        FileReplacementResult(file=file_path, error=str(result))
                    )
                    continue
                if result.count:
                    report.files.append(result)
                    if result.written:
                        report.files_modified += 1
                    self._log_file_result(result, dry_run, options.verbose)

        report.unmatched_texts = self._find_unmatched_texts(lookup, report)
        if report.unmatched_texts:
            self.logger.warning(
                "部分数据集文本没有匹配到任何字面量，对应的键未被接入。",
                count=len(report.unmatched_texts),
                examples=report.unmatched_texts[:5],
            )
        self.logger.info("替换完成。", **report.summary())
        return report

    @staticmethod
    def _find_unmatched_texts(
        lookup: KeyLookup, report: ReplacementReport
    ) -> list[str]:
        # 拼接字符串没有替换规则，不计入未匹配。
        replaceable = lookup.texts(rule.key_type for rule in REPLACEMENT_RULES)
        matched = {
            replacement.text
            for result in report.files
            for replacement in result.replacements
        }
        return sorted(replaceable - matched)

    def _replace_in_file(
        self,
        file_path: str,
        lookup: KeyLookup,
        dry_run: bool,
        backup: bool,
        max_replacements: Optional[int],
    ) -> FileReplacementResult:
        content = read_source_file(file_path)
        new_content, replacements = replace_in_text(
            content,
            lookup,
            self.config.extraction.translate_call,
            max_replacements=max_replacements,
            file_path=file_path,
        )
        result = FileReplacementResult(file=file_path, replacements=replacements)
        if not replacements or dry_run:
            return result

        if backup:
            result.backup_path = backup_file(file_path)
        try:
            write_source_file(file_path, new_content)
        except FileAccessError:
            self.logger.error(
                "写入失败，原文件保持不变。", file=file_path, backup=result.backup_path
            )
            raise
        result.written = True
        return result

    def _log_file_result(
        self, result: FileReplacementResult, dry_run: bool, verbose: bool
    ) -> None:
        if dry_run:
            for replacement in result.replacements:
                self.logger.info(
                    "[试运行] 将替换字面量。",
                    file=result.file,
                    line=replacement.line,
                    text=replacement.text,
                    key=replacement.key,
                )
            return
        self.logger.info(
            "文件已更新。",
            file=result.file,
            replacements=result.count,
            backup=result.backup_path,
        )
        if verbose:
            for replacement in result.replacements:
                self.logger.debug(
                    "已替换字面量。",
                    file=result.file,
                    line=replacement.line,
                    key=replacement.key,
                )
