# trans_extract/dataset.py
"""
翻译键数据集的持久化。

数据集以 2 空格缩进的 JSON 保存（字段为 keys / totalKeys / services /
generatedAt，以及可选的 metadata），同时在旁边写一份 CSV 便于人工审阅。
"""

import csv
import json
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from trans_extract.exceptions import DatasetError
from trans_extract.types import TranslationDataset

logger = structlog.get_logger(__name__)

CSV_HEADER = ("Key", "Text", "Type", "File", "Line")


def dataset_to_json(dataset: TranslationDataset) -> str:
    payload = dataset.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def csv_path_for(json_path: Path) -> Path:
    return json_path.with_suffix(".csv")


def save_dataset(
    dataset: TranslationDataset, path: Path, write_csv: bool = True
) -> list[Path]:
    """
    把数据集写入磁盘。

    Returns:
        实际写入的文件路径列表（JSON 在前，CSV 在后）。

    Raises:
        DatasetError: 目标文件无法写入。
    """
    written: list[Path] = []
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dataset_to_json(dataset), encoding="utf-8")
        written.append(path)
        if write_csv:
            csv_path = csv_path_for(path)
            with open(csv_path, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(CSV_HEADER)
                for item in dataset.keys:
                    writer.writerow(
                        (item.key, item.text, item.type.value, item.file, item.line)
                    )
            written.append(csv_path)
    except OSError as e:
        raise DatasetError(f"无法写入数据集 {path}: {e}") from e

    logger.info("数据集已保存。", path=str(path), total_keys=dataset.total_keys)
    return written


def load_dataset(path: Path) -> TranslationDataset:
    """
    读取并校验数据集。

    Raises:
        DatasetError: 文件不存在、不是合法 JSON 或结构不符合数据集格式。
    """
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DatasetError(f"无法读取数据集 {path}: {e}") from e
    try:
        return TranslationDataset.model_validate(raw)
    except ValidationError as e:
        raise DatasetError(f"数据集格式无效 {path}: {e}") from e


def load_dataset_or_empty(
    path: Path, log: Optional[Any] = None
) -> TranslationDataset:
    """读取数据集；失败时记录错误并退化为空数据集，调用方据此不做任何写入。"""
    try:
        return load_dataset(path)
    except DatasetError as e:
        (log or logger).error("加载数据集失败，按空数据集处理。", error=str(e))
        return TranslationDataset()
