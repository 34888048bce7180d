# trans_extract/cli/config/main.py
"""处理 `config` 子命令：查看、校验、修改和重置配置文件。"""

from pathlib import Path
from typing import Annotated, Optional

import questionary
import typer
from rich.table import Table

from trans_extract.cli.state import State
from trans_extract.cli.utils import console
from trans_extract.config_loader import (
    CONFIG_FILE_NAMES,
    load_file_config,
    read_raw_config,
    reset_config,
    save_config,
    set_config_value,
)
from trans_extract.exceptions import ConfigurationError
from trans_extract.validator import Validator

config_app = typer.Typer(help="查看与管理 Trans-Extract 配置。", no_args_is_help=True)


def _target_path(state: Optional[State]) -> Path:
    """`set` 与 `reset` 写入的文件：已有的配置文件，否则为当前目录下的默认文件。"""
    if state is not None and state.config_path is not None:
        return state.config_path
    return Path.cwd() / CONFIG_FILE_NAMES[0]


@config_app.command("show")
def show(
    ctx: typer.Context,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="同时显示施加环境覆盖后的配置。")
    ] = False,
) -> None:
    """显示当前配置。"""
    state: Optional[State] = ctx.obj
    if state is None or state.config is None:
        message = state.config_error if state else "配置尚未加载。"
        console.print(f"[bold red]❌ 配置无效: {message}[/bold red]")
        raise typer.Exit(code=1)

    source = str(state.config_path) if state.config_path else "(默认值与环境变量)"
    console.print(f"[cyan]配置来源:[/cyan] {source}")
    console.print_json(data=state.config.model_dump(mode="json"))

    if verbose and state.effective is not None:
        table = Table(title="生效配置（已施加环境覆盖）", header_style="bold cyan")
        table.add_column("配置项", style="cyan")
        table.add_column("值", style="magenta")
        table.add_row("environment", state.effective.environment)
        table.add_row("logging.level", state.effective.logging.level)
        table.add_row("logging.format", state.effective.logging.format)
        table.add_row(
            "performance.max_concurrency",
            str(state.effective.performance.max_concurrency),
        )
        table.add_row(
            "features.enable_validation",
            str(state.effective.features.enable_validation),
        )
        console.print(table)


@config_app.command("validate")
def validate(ctx: typer.Context) -> None:
    """校验配置文件，逐项列出所有问题。"""
    state: Optional[State] = ctx.obj
    path = state.config_path if state else None
    if path is None:
        console.print("[green]✅ 未找到配置文件，使用默认配置。[/green]")
        return

    try:
        data = read_raw_config(path)
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=1) from e

    result = Validator().validate_configuration(data)
    if not result.is_valid:
        console.print(f"[bold red]❌ 配置文件 {path} 无效：[/bold red]")
        for error in result.errors:
            console.print(f"  [red]- {error.message}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✅ 配置文件 {path} 有效。[/green]")


@config_app.command("set")
def set_value(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="点分隔的配置键，例如 performance.max_concurrency")],
    value: Annotated[str, typer.Argument(help="新值。true/false 与数字会被自动转换。")],
) -> None:
    """修改配置文件中的一个值。"""
    path = _target_path(ctx.obj)
    try:
        updated = set_config_value(load_file_config(path), key, value)
        save_config(updated, path)
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=1) from e
    console.print(f"[green]✅ 已设置 {key} = {value} ({path})[/green]")


@config_app.command("reset")
def reset(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="跳过确认。")] = False,
) -> None:
    """把配置文件重置为默认值。"""
    path = _target_path(ctx.obj)
    if not yes:
        proceed = questionary.confirm(
            f"这将覆盖 {path} 中的所有配置，是否继续？", default=False
        ).ask()
        if not proceed:
            console.print("[red]操作已取消。[/red]")
            raise typer.Exit()
    reset_config(path)
    console.print(f"[green]✅ 配置已重置为默认值 ({path})[/green]")
