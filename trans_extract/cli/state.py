# trans_extract/cli/state.py
"""定义 CLI 应用的共享状态对象。"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from trans_extract.config import TransExtractConfig


class State:
    """一个简单的类，用于通过 Typer 上下文传递共享状态。"""

    def __init__(
        self,
        config: Optional["TransExtractConfig"],
        effective: Optional["TransExtractConfig"] = None,
        config_path: Optional[Path] = None,
        config_error: Optional[str] = None,
    ) -> None:
        """初始化状态对象。

        Args:
            config: 合并了默认值、环境变量与配置文件的配置（未施加环境覆盖）。
                加载失败时为 None，仅 `config` 子命令允许在这种情况下继续运行。
            effective: 施加了环境覆盖和命令行日志选项之后的配置。
            config_path: 显式指定或自动找到的配置文件路径。
            config_error: 配置加载失败时的错误信息。
        """
        self.config = config
        self.effective = effective
        self.config_path = config_path
        self.config_error = config_error
