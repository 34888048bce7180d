# trans_extract/cli/replace/main.py
"""处理 `replace` 命令：把源代码中的字符串字面量替换为翻译调用。"""

import asyncio
from typing import Annotated, Optional

import typer
from rich.table import Table

from trans_extract.cli.utils import console, get_config
from trans_extract.replacer import ReplacementOptions, TranslationReplacer
from trans_extract.types import ReplacementReport


def _print_summary(report: ReplacementReport) -> None:
    title = "替换预演报告" if report.dry_run else "替换报告"
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("文件", style="cyan")
    table.add_column("替换数量", style="magenta", justify="right")
    table.add_column("备份", style="dim")
    table.add_column("错误", style="red")
    for result in report.files:
        table.add_row(
            result.file,
            str(result.count),
            result.backup_path or "-",
            result.error or "",
        )
    console.print(table)
    console.print(
        f"扫描 {report.files_scanned} 个文件，修改 {report.files_modified} 个，"
        f"共 [bold]{report.total_replacements}[/bold] 处替换，"
        f"失败 {report.files_failed} 个。"
    )
    if report.unmatched_texts:
        console.print(
            f"[yellow]{len(report.unmatched_texts)} 条数据集文本没有匹配到任何字面量。[/yellow]"
        )
    if report.dry_run:
        console.print("[yellow]试运行模式：没有写入任何文件。[/yellow]")


def replace(
    ctx: typer.Context,
    path: Annotated[
        str, typer.Option("--path", "-p", help="要处理的目录或单个文件。")
    ] = ".",
    keys_file: Annotated[
        str, typer.Option("--keys", "-k", help="翻译键数据集文件。")
    ] = "translation-keys.json",
    backup: Annotated[
        Optional[bool],
        typer.Option("--backup/--no-backup", help="修改前是否写入 .backup 备份。"),
    ] = None,
    dry_run: Annotated[
        Optional[bool],
        typer.Option("--dry-run/--no-dry-run", help="只报告将要进行的替换。"),
    ] = None,
    max_replacements: Annotated[
        Optional[int],
        typer.Option("--max-replacements", min=1, help="每个文件最多替换的数量。"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """把已登记的字符串字面量替换为翻译调用。"""
    config = get_config(ctx)
    options = ReplacementOptions(
        path=path,
        keys_file=keys_file,
        backup=backup,
        dry_run=dry_run,
        max_replacements=max_replacements,
        verbose=verbose,
    )
    report = asyncio.run(TranslationReplacer(config).replace(options))
    _print_summary(report)
