# trans_extract/cli/utils.py
"""提供 CLI 命令使用的共享工具函数。"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from trans_extract.cli.state import State
from trans_extract.config import TransExtractConfig
from trans_extract.performance import PerformanceMonitor
from trans_extract.types import ProgressUpdate

console = Console()


def get_config(ctx: typer.Context) -> TransExtractConfig:
    """从 Typer 上下文中取出生效配置。配置不可用时以退出码 1 终止。"""
    state: Optional[State] = ctx.obj
    if state is None or state.effective is None:
        message = state.config_error if state else "配置尚未加载。"
        console.print(f"[bold red]❌ 配置不可用: {message}[/bold red]")
        raise typer.Exit(code=1)
    return state.effective


@contextmanager
def progress_bar(
    monitor: PerformanceMonitor, description: str, enabled: bool = True
) -> Iterator[None]:
    """
    在上下文存续期间，把性能监视器的进度推送到一个 Rich 进度条上。
    """
    if not enabled:
        yield
        return

    progress = Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    )
    task_id = progress.add_task(description, total=None)

    def on_update(update: ProgressUpdate) -> None:
        progress.update(task_id, completed=update.current, total=update.total)

    monitor.on_progress(on_update)
    try:
        with progress:
            yield
    finally:
        monitor.remove_progress_callback(on_update)
