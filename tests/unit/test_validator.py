# tests/unit/test_validator.py
"""针对 `trans_extract.validator` 模块的单元测试。"""

from pathlib import Path

import pytest

from trans_extract.types import PatternType, TranslationKey
from trans_extract.validator import Validator


@pytest.fixture
def validator() -> Validator:
    return Validator(max_key_length=40, max_file_size=1)


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "auth.service.ts"
    path.write_text("export {};\n", encoding="utf-8")
    return path


def test_validate_path_rules(validator: Validator) -> None:
    """测试搜索路径校验：空路径和空字节是错误，上级目录引用只是警告。"""
    assert validator.validate_path(".").is_valid

    empty = validator.validate_path("")
    assert not empty.is_valid

    traversal = validator.validate_path("../src")
    assert traversal.is_valid
    assert len(traversal.warnings) == 1

    null_byte = validator.validate_path("src\0")
    assert not null_byte.is_valid
    assert null_byte.errors[0].severity == "critical"


def test_validate_file_path(validator: Validator, source_file: Path, tmp_path: Path) -> None:
    """测试源文件校验：存在性、扩展名与体积。"""
    assert validator.validate_file_path(str(source_file)).is_valid

    missing = validator.validate_file_path(str(tmp_path / "missing.ts"))
    assert not missing.is_valid

    wrong_ext = tmp_path / "notes.md"
    wrong_ext.write_text("x", encoding="utf-8")
    assert not validator.validate_file_path(str(wrong_ext)).is_valid

    too_big = tmp_path / "big.ts"
    too_big.write_bytes(b"x" * (1024 * 1024 + 1))
    result = validator.validate_file_path(str(too_big))
    assert not result.is_valid
    assert "MB" in result.errors[0].message


def test_validate_translation_key(validator: Validator, source_file: Path) -> None:
    """测试翻译键校验：过长的键是错误，可疑文本是警告。"""
    ok = TranslationKey(
        key="AUTH.AUTH_SERVICE.EXCEPTION.OK",
        text="Fine text",
        type=PatternType.EXCEPTION,
        file=str(source_file),
        line=1,
    )
    assert validator.validate_translation_key(ok).is_valid

    too_long = ok.model_copy(update={"key": "K" * 41})
    assert not validator.validate_translation_key(too_long).is_valid

    suspicious = ok.model_copy(update={"text": "click javascript:alert(1)"})
    result = validator.validate_translation_key(suspicious)
    assert result.is_valid
    assert result.warnings


def test_validate_translation_keys_reports_duplicates(
    validator: Validator, source_file: Path
) -> None:
    """测试批量校验时对重复的键给出警告。"""
    base = TranslationKey(
        key="AUTH.AUTH_SERVICE.EXCEPTION.HELLO",
        text="Hello!",
        type=PatternType.EXCEPTION,
        file=str(source_file),
        line=1,
    )
    other = base.model_copy(update={"text": "Hello?", "line": 2})

    result = validator.validate_translation_keys([base, other])

    assert result.is_valid
    assert any("HELLO" in w.message for w in result.warnings)


def test_validate_translation_keys_resolves_files_against_root(
    validator: Validator,
    source_file: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """测试键中的相对文件路径按提取根目录解析，而不是按当前目录。"""
    key = TranslationKey(
        key="AUTH.AUTH_SERVICE.EXCEPTION.HELLO",
        text="Hello!",
        type=PatternType.EXCEPTION,
        file=source_file.name,
        line=1,
    )
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)

    assert not validator.validate_translation_keys([key]).is_valid
    assert validator.validate_translation_keys([key], root="..").is_valid
    assert validator.validate_translation_keys([key], root=tmp_path).is_valid


def test_validate_input_string(validator: Validator) -> None:
    """测试任意输入字符串的校验。"""
    assert not validator.validate_input_string("  ", "名称").is_valid
    long_input = validator.validate_input_string("x" * 1001, "名称")
    assert long_input.is_valid
    assert long_input.warnings


@pytest.mark.parametrize(
    "text",
    [
        "<script>alert(1)</script>",
        "javascript:void(0)",
        "data:text/html,hi",
        "vbscript:msgbox",
        "img onerror=steal()",
        "eval(code)",
        "document.cookie",
        "window.location",
        "confirm (x)",
    ],
)
def test_contains_suspicious_content(validator: Validator, text: str) -> None:
    """测试可疑内容识别。"""
    assert validator.contains_suspicious_content(text)


def test_plain_text_is_not_suspicious(validator: Validator) -> None:
    assert not validator.contains_suspicious_content("User already exists")


def test_sanitize_output(validator: Validator) -> None:
    """测试输出清洗会移除危险片段并去掉首尾空白。"""
    assert validator.sanitize_output("  Hello <script>x()</script>world ") == "Hello world"
    assert validator.sanitize_output("a < b > c") == "a  b  c"
    assert validator.sanitize_output("Go javascript:here") == "Go here"


def test_sanitize_output_disabled() -> None:
    """测试关闭输出清洗时原样返回。"""
    raw = " <b>bold</b> "
    assert Validator(sanitize_outputs=False).sanitize_output(raw) == raw


def test_validate_configuration(validator: Validator) -> None:
    """测试原始配置数据的校验会逐项报告问题。"""
    assert validator.validate_configuration({}).is_valid

    result = validator.validate_configuration(
        {"performance": {"max_concurrency": 50, "max_file_size": 0}}
    )
    assert not result.is_valid
    messages = " ".join(e.message for e in result.errors)
    assert "max_concurrency" in messages
    assert "max_file_size" in messages
