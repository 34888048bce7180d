# tests/unit/test_dataset.py
"""针对 `trans_extract.dataset` 模块的单元测试。"""

import csv
import json
from pathlib import Path

import pytest

from trans_extract.dataset import (
    load_dataset,
    load_dataset_or_empty,
    save_dataset,
)
from trans_extract.exceptions import DatasetError
from trans_extract.types import (
    DatasetMetadata,
    PatternType,
    TranslationDataset,
    TranslationKey,
)


@pytest.fixture
def dataset() -> TranslationDataset:
    keys = [
        TranslationKey(
            key="AUTH.AUTH_SERVICE.EXCEPTION.USER_ALREADY_EXISTS",
            text="Usuário já existe",
            type=PatternType.EXCEPTION,
            file="auth/src/auth.service.ts",
            line=12,
        )
    ]
    return TranslationDataset(
        keys=keys,
        total_keys=1,
        services=["auth"],
        metadata=DatasetMetadata(total_files=3, extraction_time=12.5),
    )


def test_save_dataset_writes_camel_case_json_and_csv(
    tmp_path: Path, dataset: TranslationDataset
) -> None:
    """测试数据集以 camelCase 字段、2 空格缩进保存，并附带 CSV。"""
    path = tmp_path / "out" / "translation-keys.json"
    written = save_dataset(dataset, path)

    assert written == [path, path.with_suffix(".csv")]
    raw_text = path.read_text(encoding="utf-8")
    data = json.loads(raw_text)
    assert set(data) == {"keys", "totalKeys", "services", "generatedAt", "metadata"}
    assert data["metadata"]["totalFiles"] == 3
    assert data["keys"][0]["type"] == "EXCEPTION"
    assert '\n  "keys": [' in raw_text
    assert "Usuário já existe" in raw_text

    with open(path.with_suffix(".csv"), encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Key", "Text", "Type", "File", "Line"]
    assert rows[1][0] == "AUTH.AUTH_SERVICE.EXCEPTION.USER_ALREADY_EXISTS"
    assert rows[1][4] == "12"


def test_load_dataset_accepts_minimal_payload(tmp_path: Path) -> None:
    """测试只包含必需字段的数据集也能被读取。"""
    path = tmp_path / "keys.json"
    path.write_text(
        json.dumps(
            {
                "keys": [
                    {
                        "key": "A.B.EXCEPTION.X",
                        "text": "Some text",
                        "type": "EXCEPTION",
                        "file": "a/src/b.ts",
                        "line": 1,
                    }
                ],
                "totalKeys": 1,
                "services": ["a"],
                "generatedAt": "2024-01-01T00:00:00.000Z",
            }
        ),
        encoding="utf-8",
    )
    loaded = load_dataset(path)
    assert loaded.total_keys == 1
    assert loaded.keys[0].type is PatternType.EXCEPTION
    assert loaded.generated_at == "2024-01-01T00:00:00.000Z"


def test_load_dataset_errors(tmp_path: Path) -> None:
    """测试缺失、非法 JSON 与结构错误都以 DatasetError 报告。"""
    with pytest.raises(DatasetError):
        load_dataset(tmp_path / "missing.json")

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{", encoding="utf-8")
    with pytest.raises(DatasetError):
        load_dataset(bad_json)

    bad_shape = tmp_path / "shape.json"
    bad_shape.write_text(json.dumps({"keys": [{"key": 1}]}), encoding="utf-8")
    with pytest.raises(DatasetError):
        load_dataset(bad_shape)


def test_load_dataset_or_empty_degrades(tmp_path: Path) -> None:
    assert load_dataset_or_empty(tmp_path / "missing.json").keys == []
