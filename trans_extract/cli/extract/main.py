# trans_extract/cli/extract/main.py
"""处理 `extract` 命令：扫描源代码并保存翻译键数据集。"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import structlog
import typer
from rich.table import Table

from trans_extract.cli.utils import console, get_config, progress_bar
from trans_extract.config import TransExtractConfig
from trans_extract.dataset import save_dataset
from trans_extract.exceptions import DatasetError, InvalidSearchPathError
from trans_extract.extractor import ExtractionOptions, TranslationExtractor
from trans_extract.performance import PerformanceMonitor
from trans_extract.types import ExtractionReport
from trans_extract.utils import split_csv_option

log = structlog.get_logger("trans_extract.cli.extract")


async def _async_extract_run(
    config: TransExtractConfig, options: ExtractionOptions, output: Path
) -> ExtractionReport:
    """异步执行提取的核心逻辑，并把数据集写入磁盘。"""
    monitor = PerformanceMonitor()
    extractor = TranslationExtractor(config, monitor=monitor)
    show_progress = config.features.enable_progress_bar and not options.verbose
    with progress_bar(monitor, "正在提取翻译键...", enabled=show_progress):
        report = await extractor.extract(options)
    written = await asyncio.to_thread(
        save_dataset, extractor.build_dataset(report), output
    )
    for path in written:
        console.print(f"[green]✅ 已写入 {path}[/green]")
    return report


def _print_summary(report: ExtractionReport) -> None:
    table = Table(title="翻译键汇总", show_header=True, header_style="bold cyan")
    table.add_column("服务", style="cyan")
    table.add_column("总数", style="magenta", justify="right")
    table.add_column("异常", justify="right")
    table.add_column("模板", justify="right")
    table.add_column("其他", justify="right")
    for summary in report.service_summary:
        table.add_row(
            summary.service,
            str(summary.total),
            str(summary.exception),
            str(summary.template),
            str(summary.other),
        )
    console.print(table)
    console.print(
        f"共提取 [bold]{len(report.keys)}[/bold] 个翻译键，"
        f"处理 {report.files_processed} 个文件，跳过 {report.files_skipped} 个，"
        f"失败 {report.files_failed} 个。"
    )
    if report.timed_out:
        console.print("[yellow]⚠️ 提取超时，结果可能不完整。[/yellow]")
    if report.collisions:
        console.print(
            f"[yellow]⚠️ 发现 {len(report.collisions)} 个键冲突（同一个键对应多个文本）。[/yellow]"
        )


def extract(
    ctx: typer.Context,
    path: Annotated[str, typer.Option("--path", "-p", help="要扫描的根目录。")] = ".",
    output: Annotated[
        Path, typer.Option("--output", "-o", help="数据集输出文件。")
    ] = Path("translation-keys.json"),
    ignore: Annotated[
        Optional[str],
        typer.Option("--ignore", "-i", help="逗号分隔的忽略规则，替换默认规则。"),
    ] = None,
    exclude: Annotated[
        Optional[str],
        typer.Option("--exclude", help="逗号分隔的额外忽略规则，追加到忽略规则之后。"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="输出每个文件的处理详情。")
    ] = False,
    validate: Annotated[
        Optional[bool],
        typer.Option("--validate/--no-validate", help="是否校验提取结果。"),
    ] = None,
    include_comments: Annotated[
        bool,
        typer.Option("--include-comments", help="把附近的注释作为上下文记录下来。"),
    ] = False,
    max_file_size: Annotated[
        Optional[float],
        typer.Option("--max-file-size", min=0.001, help="单个文件的最大体积（MB）。"),
    ] = None,
    concurrency: Annotated[
        Optional[int],
        typer.Option("--concurrency", min=1, max=20, help="每批并发处理的文件数。"),
    ] = None,
) -> None:
    """扫描源代码，提取可翻译字符串并生成翻译键数据集。"""
    config = get_config(ctx)
    options = ExtractionOptions(
        path=path,
        ignore=split_csv_option(ignore) if ignore is not None else None,
        exclude_patterns=split_csv_option(exclude),
        verbose=verbose,
        validate=validate,
        include_comments=include_comments,
        max_file_size=max_file_size,
        concurrency=concurrency,
    )
    try:
        report = asyncio.run(_async_extract_run(config, options, output))
    except (InvalidSearchPathError, DatasetError) as e:
        log.error("提取失败。", error=str(e))
        console.print(f"[red]❌ 提取失败: {e}[/red]")
        raise typer.Exit(code=1) from e

    _print_summary(report)
