# trans_extract/generator.py
"""
模板生成器：把数据集按服务拆分，为每个服务写出各语言的翻译文件。

源语言文件包含原文；其他语言文件中的每个值都是一条待人工翻译的 TODO 占位。
"""

import asyncio
import json
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Optional

import structlog

from trans_extract.aggregation import find_key_collisions, group_keys_by_service
from trans_extract.config import TransExtractConfig
from trans_extract.dataset import load_dataset_or_empty
from trans_extract.exceptions import FileAccessError
from trans_extract.filesystem import BACKUP_SUFFIX
from trans_extract.types import GenerationReport, TranslationKey
from trans_extract.utils import validate_lang_codes

TRANSLATIONS_SUBDIR = Path("src") / "translations"
README_NAME = "README.md"


@dataclass
class GenerationOptions:
    input: str = "translation-keys.json"
    output_root: str = "."
    languages: Optional[list[str]] = None
    source_language: Optional[str] = None
    template: bool = True
    backup_existing: bool = False
    dry_run: bool = False
    verbose: bool = False


def is_safe_service_name(service: str) -> bool:
    """
    服务名会直接拼接到输出根目录下，只接受单个普通路径段。

    空名、`.`、`..`、绝对路径以及含分隔符或盘符的名称都会让文件写到
    输出根目录之外，或写到不相关的位置。
    """
    if service in ("", ".", ".."):
        return False
    if "/" in service or "\\" in service or ":" in service:
        return False
    return not PurePosixPath(service).is_absolute()


def build_source_map(keys: list[TranslationKey]) -> dict[str, str]:
    """构建 键 -> 原文 的映射。同一个键出现多次时保留第一次的文本。"""
    translations: dict[str, str] = {}
    for item in keys:
        translations.setdefault(item.key, item.text)
    return translations


def build_template_map(source: dict[str, str], lang: str) -> dict[str, str]:
    return {key: f'TODO: Translate "{text}" to {lang}' for key, text in source.items()}


def render_translation_file(translations: dict[str, str]) -> str:
    return json.dumps(translations, indent=2, ensure_ascii=False) + "\n"


def render_readme(
    service: str,
    total_keys: int,
    languages: list[str],
    source_language: str,
    template: bool,
) -> str:
    """生成每个服务翻译目录下的 README，说明文件清单、翻译进度与使用方式。"""
    file_lines = []
    status_lines = []
    for lang in languages:
        if lang == source_language:
            file_lines.append(f"- `{lang}.json` - source texts ({total_keys} keys)")
            status_lines.append(
                f"- **{lang.upper()}**: {total_keys} translations (100%)"
            )
        elif template:
            file_lines.append(f"- `{lang}.json` - {lang} translations (template)")
            status_lines.append(f"- **{lang.upper()}**: 0 translations (0%)")

    return "\n".join(
        [
            f"# {service} Translation Files",
            "",
            f"This directory contains translation files for the {service} service.",
            "",
            "## Files",
            "",
            *file_lines,
            "",
            "## Translation Status",
            "",
            *status_lines,
            "",
            "## How to Translate",
            "",
            "1. Open the language file you want to translate (e.g. `fr.json`).",
            "2. Replace each `TODO: Translate ...` value with the translation.",
            "3. Keep the translation keys unchanged.",
            "",
            "## Usage",
            "",
            "```typescript",
            "const message = this.translate('SERVICE.FILE.TYPE.TEXT');",
            "```",
            "",
            f"Generated by trans-extract on {datetime.now(timezone.utc).isoformat()}",
            "",
        ]
    )


class TemplateGenerator:
    """根据翻译键数据集生成各服务、各语言的翻译文件。"""

    def __init__(self, config: TransExtractConfig, logger: Optional[Any] = None):
        self.config = config
        self.logger = logger or structlog.get_logger(__name__)

    async def generate(self, options: GenerationOptions) -> GenerationReport:
        languages = options.languages or list(self.config.extraction.languages)
        source_language = (
            options.source_language or self.config.extraction.source_language
        )
        validate_lang_codes([*languages, source_language])
        if source_language not in languages:
            languages = [source_language, *languages]

        report = GenerationReport(languages=languages, dry_run=options.dry_run)

        dataset = await asyncio.to_thread(
            load_dataset_or_empty, Path(options.input), self.logger
        )
        self.logger.info(
            "已加载翻译键。", input=options.input, total_keys=len(dataset.keys)
        )
        if not dataset.keys:
            self.logger.info("没有找到任何翻译键，跳过文件生成。")
            return report

        grouped = group_keys_by_service(dataset.keys)
        self.logger.info("已按服务分组。", services=list(grouped))

        for service, keys in grouped.items():
            if not is_safe_service_name(service):
                self.logger.error(
                    "服务名不能作为输出目录，已跳过该服务。",
                    service=service,
                    total_keys=len(keys),
                    output_root=options.output_root,
                )
                report.rejected_services.append(service)
                continue
            collisions = find_key_collisions(keys)
            for key, texts in collisions.items():
                self.logger.warning(
                    "同一个键对应多个不同文本，使用第一个文本。",
                    service=service,
                    key=key,
                    texts=texts,
                )
            report.collisions.update(collisions)

            source = build_source_map(keys)
            report.services.append(service)
            report.keys_per_service[service] = len(source)

            outputs = self._plan_service_files(
                service, source, languages, source_language, options
            )
            for path, content in outputs:
                if options.dry_run:
                    self.logger.info("[试运行] 将写入文件。", path=str(path))
                    report.files_written.append(str(path))
                    continue
                try:
                    backup = await asyncio.to_thread(
                        self._write_file, path, content, options.backup_existing
                    )
                except FileAccessError as e:
                    self.logger.error("写入翻译文件失败。", path=str(path), error=str(e))
                    report.files_failed.append(str(path))
                    continue
                report.files_written.append(str(path))
                if backup:
                    report.backups.append(backup)
                if options.verbose:
                    self.logger.info("已生成文件。", path=str(path))

            self.logger.info(
                "服务翻译文件已生成。", service=service, total_keys=len(source)
            )

        self.logger.info(
            "翻译文件生成完成。",
            services=len(report.services),
            files=len(report.files_written),
            dry_run=options.dry_run,
        )
        return report

    def _plan_service_files(
        self,
        service: str,
        source: dict[str, str],
        languages: list[str],
        source_language: str,
        options: GenerationOptions,
    ) -> list[tuple[Path, str]]:
        directory = Path(options.output_root) / service / TRANSLATIONS_SUBDIR
        outputs = [
            (directory / f"{source_language}.json", render_translation_file(source))
        ]
        if options.template:
            for lang in languages:
                if lang == source_language:
                    continue
                outputs.append(
                    (
                        directory / f"{lang}.json",
                        render_translation_file(build_template_map(source, lang)),
                    )
                )
        outputs.append(
            (
                directory / README_NAME,
                render_readme(
                    service, len(source), languages, source_language, options.template
                ),
            )
        )
        return outputs

    @staticmethod
    def _write_file(path: Path, content: str, backup_existing: bool) -> Optional[str]:
        backup: Optional[str] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if backup_existing and path.exists():
                backup = f"{path}{BACKUP_SUFFIX}"
                shutil.copyfile(path, backup)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise FileAccessError(f"无法写入翻译文件 {path}: {e}") from e
        return backup
