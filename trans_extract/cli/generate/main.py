# trans_extract/cli/generate/main.py
"""处理 `generate` 命令：为每个服务生成各语言的翻译文件。"""

import asyncio
from typing import Annotated, Optional

import structlog
import typer
from rich.table import Table

from trans_extract.cli.utils import console, get_config
from trans_extract.generator import GenerationOptions, TemplateGenerator
from trans_extract.types import GenerationReport
from trans_extract.utils import split_csv_option

log = structlog.get_logger("trans_extract.cli.generate")


def _print_summary(report: GenerationReport) -> None:
    if report.rejected_services:
        console.print(
            "[red]已跳过无法作为输出目录的服务: "
            f"{', '.join(report.rejected_services)}[/red]"
        )
    if not report.services:
        console.print("[yellow]没有可生成的翻译键，未写入任何文件。[/yellow]")
        return

    title = "翻译文件生成预演" if report.dry_run else "翻译文件生成报告"
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("服务", style="cyan")
    table.add_column("键数量", style="magenta", justify="right")
    table.add_column("语言", justify="left")
    for service in report.services:
        table.add_row(
            service,
            str(report.keys_per_service.get(service, 0)),
            ", ".join(report.languages),
        )
    console.print(table)

    verb = "将写入" if report.dry_run else "已写入"
    console.print(f"{verb} [bold]{len(report.files_written)}[/bold] 个文件。")
    if report.backups:
        console.print(f"已备份 {len(report.backups)} 个已存在的文件。")
    if report.files_failed:
        console.print(f"[red]{len(report.files_failed)} 个文件写入失败。[/red]")


def generate(
    ctx: typer.Context,
    input_file: Annotated[
        str, typer.Option("--input", "-i", help="翻译键数据集文件。")
    ] = "translation-keys.json",
    languages: Annotated[
        Optional[str],
        typer.Option("--languages", "-l", help="逗号分隔的目标语言列表。"),
    ] = None,
    source_language: Annotated[
        Optional[str], typer.Option("--source-language", help="源语言。")
    ] = None,
    template: Annotated[
        bool,
        typer.Option("--template/--no-template", help="是否为非源语言生成 TODO 模板。"),
    ] = True,
    output_root: Annotated[
        str, typer.Option("--output-root", help="各服务目录所在的根目录。")
    ] = ".",
    backup: Annotated[
        bool, typer.Option("--backup", help="覆盖前备份已存在的翻译文件。")
    ] = False,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="只报告将要写入的文件。")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """根据翻译键数据集，为每个服务生成各语言的翻译文件。"""
    config = get_config(ctx)
    options = GenerationOptions(
        input=input_file,
        output_root=output_root,
        languages=split_csv_option(languages) or None,
        source_language=source_language,
        template=template,
        backup_existing=backup,
        dry_run=dry_run,
        verbose=verbose,
    )
    try:
        report = asyncio.run(TemplateGenerator(config).generate(options))
    except ValueError as e:
        log.error("生成失败。", error=str(e))
        console.print(f"[red]❌ 生成失败: {e}[/red]")
        raise typer.Exit(code=1) from e

    _print_summary(report)
