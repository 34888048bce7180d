# trans_extract/logging_config.py
"""
本模块负责集中配置项目的日志系统。

控制台格式使用基于 Rich 的面板渲染器，json 格式则输出每行一个 JSON 对象，
便于在 CI 中收集。日志可以输出到控制台、文件或同时输出到两者。
"""

import logging
from collections.abc import MutableMapping
from typing import Any, Literal, Optional

import structlog
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from structlog.typing import Processor

APP_LOGGER_NAME = "trans_extract"


class PanelRenderer:
    """
    一个 structlog 处理器，把每条日志渲染为一个 Rich 面板：
    标题是日志级别和记录器名称，正文是事件消息和按键排序的上下文表格。
    """

    def __init__(
        self,
        kv_truncate_at: int = 80,
        show_timestamp: bool = True,
        show_logger_name: bool = True,
        kv_key_width: int = 15,
    ):
        self._console = Console()
        self._kv_truncate_at = kv_truncate_at
        self._show_timestamp = show_timestamp
        self._show_logger_name = show_logger_name
        self._kv_key_width = kv_key_width

        # 级别文本定长，面板标题才能对齐。
        self._level_styles = {
            "debug": ("blue", "DEBUG   "),
            "info": ("green", "INFO    "),
            "warning": ("yellow", "WARNING "),
            "error": ("bold red", "ERROR   "),
            "critical": ("bold magenta", "CRITICAL"),
        }

    def __call__(
        self, logger: Any, name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event = str(event_dict.pop("event", "")).strip()
        if not event:
            return ""

        timestamp = event_dict.pop("timestamp", "")
        level = event_dict.pop("level", "info").lower()
        logger_name = event_dict.pop("logger", "unknown")
        style, level_text = self._level_styles.get(level, ("default", level.upper()))

        title_parts = [f"[{style}]{level_text}[/]"]
        if self._show_logger_name:
            title_parts.append(f"[cyan dim]({logger_name})[/]")

        renderables: list[RenderableType] = [Text(event, justify="left")]
        if event_dict:
            renderables.append(self._render_kv(event_dict))

        subtitle = (
            Text(str(timestamp), style="dim")
            if self._show_timestamp and timestamp
            else None
        )

        with self._console.capture() as capture:
            self._console.print(
                Panel(
                    Group(*renderables),
                    title=Text.from_markup(" ".join(title_parts)),
                    border_style=style,
                    subtitle=subtitle,
                    subtitle_align="right",
                    expand=False,
                    title_align="left",
                )
            )
        return capture.get().rstrip()

    def _render_kv(self, kv: MutableMapping[str, Any]) -> Table:
        table = Table(show_header=False, show_edge=False, box=None, padding=(0, 1))
        table.add_column(style="dim", justify="right", width=self._kv_key_width)
        table.add_column(style="bright_white", overflow="fold")

        for key, value in sorted(kv.items()):
            value_repr = repr(value)
            # 长字符串去掉外层引号，换行时更易读。
            if len(value_repr) > self._kv_truncate_at or "\n" in value_repr:
                if value_repr[:1] in ("'", '"') and value_repr[-1:] == value_repr[:1]:
                    value_repr = value_repr[1:-1]
            table.add_row(f"{key} :", Text(value_repr))
        return table


class PassthroughFormatter(logging.Formatter):
    """直接传递 structlog 已经渲染好的字符串。"""

    def format(self, record: logging.LogRecord) -> str:
        return str(record.getMessage())


def setup_logging(
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    output: Literal["console", "file", "both"] = "console",
    file_path: Optional[str] = None,
    show_timestamp: bool = True,
    show_logger_name: bool = True,
) -> None:
    """
    配置全局的 structlog 日志系统。这是整个应用的日志配置入口。

    Args:
        log_level: 要显示的最低日志级别 (DEBUG, INFO, WARNING, ERROR)。
        log_format: 'console' 为 Rich 面板输出，'json' 为机器可读输出。
        output: 日志输出目标：控制台、文件或两者。
        file_path: 当 output 包含文件时，日志文件的路径。
        show_timestamp: 是否在日志中包含时间戳。
        show_logger_name: 是否在日志中包含记录器的名称。
    """
    level = log_level.upper()
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "console":
        processors.append(
            PanelRenderer(
                show_timestamp=show_timestamp, show_logger_name=show_logger_name
            )
        )
    else:
        processors[3] = structlog.processors.TimeStamper(fmt="iso", utc=True)
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handlers: list[logging.Handler] = []
    if output in ("console", "both"):
        handlers.append(logging.StreamHandler())
    if output in ("file", "both"):
        if not file_path:
            raise ValueError("日志输出包含文件时必须提供 file_path。")
        handlers.append(logging.FileHandler(file_path, encoding="utf-8"))

    root_logger = logging.getLogger()
    for old_handler in list(root_logger.handlers):
        root_logger.removeHandler(old_handler)
        old_handler.close()
    for handler in handlers:
        handler.setFormatter(PassthroughFormatter())
        root_logger.addHandler(handler)
    # 根记录器保持较高级别，屏蔽第三方库的噪音。
    root_logger.setLevel(logging.WARNING)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(level)
    app_logger.propagate = True

    structlog.get_logger(f"{APP_LOGGER_NAME}.logging_config").debug(
        "日志系统已配置完成。",
        log_format=log_format,
        app_log_level=level,
        output=output,
    )
