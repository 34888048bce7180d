# trans_extract/config_loader.py
"""
本模块负责在磁盘上查找、加载、保存和修改 Trans-Extract 的 JSON 配置文件。

配置文件中的值会覆盖环境变量和默认值；无法读取的配置文件只会产生警告，
而内容无效的配置文件则会以 `ConfigurationError` 的形式终止运行。
"""

import json
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from trans_extract.config import TransExtractConfig
from trans_extract.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

CONFIG_FILE_NAMES = (".trans-extract.json", "trans-extract.json")


def candidate_config_paths(cwd: Optional[Path] = None) -> list[Path]:
    """按优先级返回配置文件的候选路径：当前目录下的文件优先于用户主目录。"""
    base = cwd or Path.cwd()
    paths = [base / name for name in CONFIG_FILE_NAMES]
    paths.append(Path.home() / CONFIG_FILE_NAMES[0])
    return paths


def find_config_file(cwd: Optional[Path] = None) -> Optional[Path]:
    for path in candidate_config_paths(cwd):
        if path.is_file():
            return path
    return None


def _format_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        location = ".".join(str(p) for p in err["loc"])
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


def load_config(path: Optional[Path] = None) -> TransExtractConfig:
    """
    加载配置。

    Args:
        path: 显式指定的配置文件。为 None 时按候选路径自动查找。

    Returns:
        合并了默认值、环境变量与配置文件的配置对象（尚未施加环境覆盖）。

    Raises:
        ConfigurationError: 显式指定的文件不存在，或配置值未通过校验。
    """
    if path is not None and not path.is_file():
        raise ConfigurationError(f"配置文件不存在: {path}")

    config_path = path or find_config_file()
    file_values: dict[str, Any] = {}
    if config_path is not None:
        try:
            file_values = json.loads(config_path.read_text(encoding="utf-8"))
            logger.debug("已加载配置文件。", path=str(config_path))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(
                "无法读取配置文件，将使用默认配置。",
                path=str(config_path),
                error=str(e),
            )
            file_values = {}
        if not isinstance(file_values, dict):
            raise ConfigurationError(f"配置文件的顶层必须是 JSON 对象: {config_path}")

    try:
        return TransExtractConfig(**file_values)
    except ValidationError as e:
        raise ConfigurationError(
            f"配置无效: {_format_validation_error(e)}"
        ) from e


def default_config() -> TransExtractConfig:
    """返回只包含默认值的配置，不读取环境变量和配置文件。"""
    return TransExtractConfig.model_validate({})


def load_file_config(path: Path) -> TransExtractConfig:
    """
    只用默认值和配置文件构建配置，忽略环境变量。
    `config set` 以它为基础修改并写回文件，避免把环境变量固化到文件中。
    """
    if not path.is_file():
        return default_config()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"无法读取配置文件 {path}: {e}") from e
    try:
        return TransExtractConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"配置无效: {_format_validation_error(e)}"
        ) from e


def read_raw_config(path: Path) -> dict[str, Any]:
    """读取配置文件的原始 JSON 内容，供 `config validate` 逐项报告问题。"""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"无法读取配置文件 {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"配置文件的顶层必须是 JSON 对象: {path}")
    return data


def save_config(config: TransExtractConfig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(config.model_dump(mode="json"), indent=2, ensure_ascii=False)
        + "\n",
        encoding="utf-8",
    )
    logger.info("配置已保存。", path=str(path))


def parse_config_value(raw: str, current: Any = None) -> Any:
    """
    将命令行传入的字符串解析为配置值。

    `true`/`false` 解析为布尔值，数字字符串解析为 int 或 float；
    当目标字段当前是列表时，按逗号拆分。其余情况保留原字符串。
    """
    lowered = raw.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if isinstance(current, list):
        return [part.strip() for part in raw.split(",") if part.strip()]
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def set_config_value(
    config: TransExtractConfig, dotted_key: str, raw_value: str
) -> TransExtractConfig:
    """
    按点分隔的键路径（例如 `performance.max_concurrency`）修改一个配置值，
    并返回重新校验后的新配置对象。
    """
    data = config.model_dump()
    parts = dotted_key.split(".")
    node: Any = data
    for part in parts[:-1]:
        if not isinstance(node, dict) or part not in node:
            raise ConfigurationError(f"未知的配置键: {dotted_key}")
        node = node[part]
    leaf = parts[-1]
    if not isinstance(node, dict) or leaf not in node:
        raise ConfigurationError(f"未知的配置键: {dotted_key}")

    node[leaf] = parse_config_value(raw_value, node[leaf])
    try:
        return TransExtractConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"配置值无效: {_format_validation_error(e)}"
        ) from e


def reset_config(path: Path) -> TransExtractConfig:
    """将配置文件重置为默认值。"""
    config = default_config()
    save_config(config, path)
    return config
