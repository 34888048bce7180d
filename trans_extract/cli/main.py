# trans_extract/cli/main.py
"""Trans-Extract CLI 的主入口点。"""

from pathlib import Path
from typing import Annotated, Optional

import structlog
import typer
from rich.console import Console

import trans_extract
from trans_extract.cli.config.main import config_app
from trans_extract.cli.extract.main import extract
from trans_extract.cli.generate.main import generate
from trans_extract.cli.replace.main import replace
from trans_extract.cli.state import State
from trans_extract.config_loader import find_config_file, load_config
from trans_extract.exceptions import ConfigurationError
from trans_extract.logging_config import setup_logging

app = typer.Typer(
    name="trans-extract",
    help="🌐 Trans-Extract: 提取源代码中的可翻译字符串、生成翻译模板并替换为翻译调用。",
    add_completion=False,
    no_args_is_help=True,
)

app.command("extract")(extract)
app.command("generate")(generate)
app.command("replace")(replace)
app.add_typer(config_app, name="config")

console = Console()
log = structlog.get_logger("trans_extract.cli")


def version_callback(value: bool) -> None:
    """处理 --version 选项的回调函数。"""
    if value:
        console.print(
            f"Trans-Extract [bold cyan]v{trans_extract.__version__}[/bold cyan]"
        )
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="配置文件路径（默认自动查找）。"),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="覆盖日志级别 (DEBUG/INFO/WARNING/ERROR)。"),
    ] = None,
    log_format: Annotated[
        Optional[str],
        typer.Option("--log-format", help="覆盖日志格式 (console/json)。"),
    ] = None,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="显示版本信息并退出。",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    主回调函数，在任何子命令执行前运行：加载配置、施加环境覆盖并配置日志。

    配置无效时，除 `config` 子命令外的所有命令都会以退出码 1 终止；
    `config` 子命令仍然可以运行，以便检查或重置损坏的配置。
    """
    config_path = config_file or find_config_file()
    try:
        config = load_config(config_file)
    except ConfigurationError as e:
        if ctx.invoked_subcommand == "config":
            ctx.obj = State(config=None, config_path=config_path, config_error=str(e))
            setup_logging()
            return
        console.print("[bold red]❌ 启动失败：无法加载配置。[/bold red]")
        console.print(f"[dim]{e}[/dim]")
        raise typer.Exit(code=1) from e

    effective = config.effective()
    logging_overrides: dict[str, str] = {}
    if log_level:
        logging_overrides["level"] = log_level.upper()
    if log_format:
        logging_overrides["format"] = log_format.lower()
    if logging_overrides:
        try:
            logging_settings = effective.logging.model_validate(
                {**effective.logging.model_dump(), **logging_overrides}
            )
        except ValueError as e:
            console.print(f"[bold red]❌ 无效的日志选项: {e}[/bold red]")
            raise typer.Exit(code=1) from e
        effective = effective.model_copy(update={"logging": logging_settings})

    try:
        setup_logging(
            log_level=effective.logging.level,
            log_format=effective.logging.format,
            output=effective.logging.output,
            file_path=effective.logging.file_path,
        )
    except (OSError, ValueError) as e:
        console.print(f"[bold red]❌ 启动失败：无法初始化日志。[/bold red] {e}")
        raise typer.Exit(code=1) from e

    log.debug(
        "配置已加载。",
        config_path=str(config_path) if config_path else None,
        environment=effective.environment,
    )
    ctx.obj = State(config=config, effective=effective, config_path=config_path)


if __name__ == "__main__":
    app()
