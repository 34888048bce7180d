# trans_extract/validator.py
"""
本模块实现了输入与输出的安全校验。

验证器从不抛出异常：所有问题都以 `ValidationResult` 中的错误或警告返回，
由调用方决定是否终止运行。只有根搜索路径的校验失败是运行级别致命的。
"""

import os
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import pydantic

from trans_extract.config import TransExtractConfig
from trans_extract.types import (
    TranslationKey,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)

ALLOWED_FILE_TYPES = (".ts", ".js", ".tsx", ".jsx")
MAX_INPUT_LENGTH = 1000
BYTES_PER_MB = 1024 * 1024

UNSAFE_PATH_SUGGESTION = "使用绝对路径，或不包含上级目录引用的相对路径"

RE_SCRIPT_TAG = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.I)
RE_ANGLE_BRACKETS = re.compile(r"[<>]")
RE_JAVASCRIPT_PROTOCOL = re.compile(r"javascript:", re.I)
RE_DATA_HTML = re.compile(r"data:text/html", re.I)
RE_VBSCRIPT_PROTOCOL = re.compile(r"vbscript:", re.I)
RE_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.I)
RE_EVAL_CALL = re.compile(r"eval\s*\(", re.I)
RE_DOCUMENT_ACCESS = re.compile(r"document\.", re.I)
RE_WINDOW_ACCESS = re.compile(r"window\.", re.I)
RE_DIALOG_CALL = re.compile(r"(?:alert|confirm|prompt)\s*\(", re.I)

SUSPICIOUS_PATTERNS = (
    RE_SCRIPT_TAG,
    RE_JAVASCRIPT_PROTOCOL,
    RE_DATA_HTML,
    RE_VBSCRIPT_PROTOCOL,
    RE_EVENT_HANDLER,
    RE_EVAL_CALL,
    RE_DOCUMENT_ACCESS,
    RE_WINDOW_ACCESS,
    RE_DIALOG_CALL,
)
# 顺序很重要：先移除完整的 script 标签，再移除剩余的尖括号。
SANITIZE_PATTERNS = (
    RE_SCRIPT_TAG,
    RE_ANGLE_BRACKETS,
    RE_JAVASCRIPT_PROTOCOL,
    RE_DATA_HTML,
    RE_EVENT_HANDLER,
    RE_EVAL_CALL,
    RE_DIALOG_CALL,
)


def _has_unsafe_path_parts(path: str) -> bool:
    return ".." in path or "~" in path


class Validator:
    """根据安全配置校验路径、翻译键和任意输入，并清洗输出文本。"""

    def __init__(
        self,
        max_key_length: int = 200,
        max_file_size: float = 10,
        sanitize_outputs: bool = True,
        allowed_file_types: Iterable[str] = ALLOWED_FILE_TYPES,
    ) -> None:
        self.max_key_length = max_key_length
        self.max_file_size = max_file_size
        self.sanitize_outputs = sanitize_outputs
        self.allowed_file_types = tuple(ext.lower() for ext in allowed_file_types)

    @classmethod
    def from_config(cls, config: TransExtractConfig) -> "Validator":
        return cls(
            max_key_length=config.security.max_key_length,
            max_file_size=config.performance.max_file_size,
            sanitize_outputs=config.security.sanitize_outputs,
        )

    def validate_path(self, path: str) -> ValidationResult:
        """校验一个搜索路径字符串本身（不访问文件系统）。"""
        result = ValidationResult()
        if not path or not path.strip():
            result.errors.append(ValidationError(message="路径不能为空"))
        if _has_unsafe_path_parts(path):
            result.warnings.append(
                ValidationWarning(
                    message="路径包含潜在的不安全片段",
                    suggestion=UNSAFE_PATH_SUGGESTION,
                )
            )
        if "\0" in path:
            result.errors.append(
                ValidationError(severity="critical", message="路径包含空字节")
            )
        result.is_valid = not result.errors
        return result

    def validate_file_path(self, file_path: str) -> ValidationResult:
        """校验一个源文件：必须存在、体积不超限、扩展名在允许列表中。"""
        result = ValidationResult()
        path = Path(file_path)
        if not path.exists():
            result.errors.append(
                ValidationError(message=f"文件不存在: {file_path}", file=file_path)
            )
            result.is_valid = False
            return result

        try:
            size_mb = path.stat().st_size / BYTES_PER_MB
            if size_mb > self.max_file_size:
                result.errors.append(
                    ValidationError(
                        message=(
                            f"文件大小 ({size_mb:.2f}MB) 超过了允许的最大值 "
                            f"({self.max_file_size}MB)"
                        ),
                        file=file_path,
                    )
                )
        except OSError as e:
            result.errors.append(
                ValidationError(message=f"无法访问文件: {e}", file=file_path)
            )

        ext = os.path.splitext(file_path)[1].lower()
        if ext not in self.allowed_file_types:
            result.errors.append(
                ValidationError(
                    message=(
                        f"不允许的文件类型 {ext or '(无扩展名)'}。"
                        f"允许的类型: {', '.join(self.allowed_file_types)}"
                    ),
                    file=file_path,
                )
            )

        if _has_unsafe_path_parts(file_path):
            result.warnings.append(
                ValidationWarning(
                    message="文件路径包含潜在的不安全片段",
                    suggestion=UNSAFE_PATH_SUGGESTION,
                    file=file_path,
                )
            )

        result.is_valid = not result.errors
        return result

    def validate_translation_key(
        self, key: TranslationKey, check_file: bool = True
    ) -> ValidationResult:
        result = ValidationResult()
        location = {"file": key.file, "line": key.line}

        if not key.key or not key.key.strip():
            result.errors.append(
                ValidationError(severity="critical", message="翻译键为空", **location)
            )
        elif len(key.key) > self.max_key_length:
            result.errors.append(
                ValidationError(
                    message=(
                        f"翻译键长度 ({len(key.key)}) 超过了允许的最大值 "
                        f"({self.max_key_length})"
                    ),
                    code=key.key,
                    **location,
                )
            )

        if not key.text or not key.text.strip():
            result.errors.append(
                ValidationError(
                    severity="critical", message="翻译文本为空", **location
                )
            )
        elif self.contains_suspicious_content(key.text):
            result.warnings.append(
                ValidationWarning(
                    message="翻译文本包含潜在的可疑内容",
                    suggestion="检查该文本是否存在安全隐患",
                    **location,
                )
            )

        if check_file:
            result.merge(self.validate_file_path(key.file))

        if key.line < 1:
            result.errors.append(ValidationError(message="无效的行号", **location))

        result.is_valid = not result.errors
        return result

    def validate_translation_keys(
        self, keys: Iterable[TranslationKey], root: str | Path = "."
    ) -> ValidationResult:
        """
        逐条校验翻译键，并对重复出现的键额外给出警告。

        `key.file` 相对于提取时的根目录，检查文件是否存在时需要拼上 `root`。
        """
        result = ValidationResult()
        occurrences: dict[str, list[TranslationKey]] = {}
        # 同一文件只检查一次文件系统
        checked_files: set[str] = set()

        for key in keys:
            if key.file not in checked_files:
                checked_files.add(key.file)
                # 根目录已单独校验过，这里用解析后的路径，避免对每个文件重复告警。
                resolved = (Path(root) / key.file).resolve()
                result.merge(self.validate_file_path(str(resolved)))
            result.merge(self.validate_translation_key(key, check_file=False))
            if key.key:
                occurrences.setdefault(key.key, []).append(key)

        for key_name, duplicates in occurrences.items():
            if len(duplicates) > 1:
                result.warnings.append(
                    ValidationWarning(
                        message=f"发现重复的翻译键: {key_name}",
                        suggestion="考虑合并重复的键，或为不同文本使用不同的键",
                        file=duplicates[0].file,
                        line=duplicates[0].line,
                    )
                )

        result.is_valid = not result.errors
        return result

    def validate_input_string(self, value: str, context: str) -> ValidationResult:
        result = ValidationResult()
        if not value or not value.strip():
            result.errors.append(ValidationError(message=f"{context} 不能为空"))
        if value and len(value) > MAX_INPUT_LENGTH:
            result.warnings.append(
                ValidationWarning(
                    message=f"{context} 过长 ({len(value)} 个字符)",
                    suggestion="考虑将其拆分为更小的部分",
                )
            )
        if value and self.contains_suspicious_content(value):
            result.warnings.append(
                ValidationWarning(
                    message=f"{context} 包含潜在的可疑内容",
                    suggestion="检查该输入是否存在安全隐患",
                )
            )
        result.is_valid = not result.errors
        return result

    def contains_suspicious_content(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in SUSPICIOUS_PATTERNS)

    def sanitize_output(self, output: str) -> str:
        """移除潜在危险的片段并去掉首尾空白。关闭输出清洗时原样返回。"""
        if not self.sanitize_outputs:
            return output
        for pattern in SANITIZE_PATTERNS:
            output = pattern.sub("", output)
        return output.strip()

    def validate_configuration(self, data: Mapping[str, Any]) -> ValidationResult:
        """用配置模型校验一份原始配置数据（例如从 JSON 文件读取的字典）。"""
        result = ValidationResult()
        try:
            TransExtractConfig.model_validate(dict(data))
        except pydantic.ValidationError as e:
            for err in e.errors():
                location = ".".join(str(p) for p in err["loc"]) or "(root)"
                result.errors.append(
                    ValidationError(message=f"{location}: {err['msg']}")
                )
        result.is_valid = not result.errors
        return result
