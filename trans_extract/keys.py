# trans_extract/keys.py
"""
键生成器：把一条匹配文本和它所在的文件路径转换为确定性的翻译键。

键的格式为 `SERVICE.FILEBASENAME.TYPE.NORMALIZED_TEXT`，只包含字母、数字、
下划线和点。相同的输入永远得到相同的键。
"""

import hashlib
import re
from collections.abc import Sequence
from pathlib import PurePosixPath

from trans_extract.config import DEFAULT_SERVICE_TOKENS
from trans_extract.types import PatternType, Priority
from trans_extract.utils import path_segments

UNKNOWN_SERVICE = "UNKNOWN"
UNKNOWN_CATEGORY = "unknown"
# 分类时额外识别的服务名（网关层）
CATEGORY_EXTRA_TOKENS = ("bff",)

RE_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)
RE_WHITESPACE = re.compile(r"\s+", re.ASCII)
RE_NON_IDENT = re.compile(r"[^A-Za-z0-9_]")


def normalize_text(text: str) -> str:
    """
    将文本归一化为键的最后一段。

    处理步骤:
    1. 删除所有既不是 ASCII 单词字符也不是空白的字符。
    2. 去掉首尾空白，把连续空白压缩为一个 `_`。
    3. 转为大写。

    如果结果为空（例如文本只包含标点或非 ASCII 字符），则使用
    `TEXT_<sha1 前 8 位>`，保证键仍然是合法的标识符且彼此可区分。
    """
    normalized = RE_NON_WORD.sub("", text)
    normalized = RE_WHITESPACE.sub("_", normalized.strip()).upper()
    if not normalized.strip("_"):
        digest = hashlib.sha1(text.encode("utf-8")).hexdigest()[:8].upper()
        return f"TEXT_{digest}"
    return normalized


def _sanitize_segment(value: str) -> str:
    return RE_NON_IDENT.sub("_", value)


def derive_service(
    file_path: str, service_tokens: Sequence[str] = DEFAULT_SERVICE_TOKENS
) -> str:
    """
    从文件路径推导键的 SERVICE 段。

    优先使用第一个属于已知服务名的路径段；否则使用紧挨在 `src` 之前的路径段；
    都没有时返回 `UNKNOWN`。
    """
    segments = path_segments(file_path)
    tokens = set(service_tokens)
    for segment in segments:
        if segment in tokens:
            return _sanitize_segment(segment.upper())
    if "src" in segments:
        src_index = segments.index("src")
        if src_index > 0:
            return _sanitize_segment(segments[src_index - 1].upper())
    return UNKNOWN_SERVICE


def derive_file_basename(file_path: str) -> str:
    """去掉最后一个扩展名，其余的点替换为 `_`，再转为大写。"""
    name = PurePosixPath(file_path.replace("\\", "/")).name
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return _sanitize_segment(stem.replace(".", "_").upper())


def generate_key(
    text: str,
    pattern_type: PatternType,
    file_path: str,
    service_tokens: Sequence[str] = DEFAULT_SERVICE_TOKENS,
) -> str:
    service = derive_service(file_path, service_tokens)
    basename = derive_file_basename(file_path)
    return f"{service}.{basename}.{pattern_type.value}.{normalize_text(text)}"


def determine_priority(text: str, pattern_type: PatternType) -> Priority:
    lowered = text.lower()
    if pattern_type is PatternType.EXCEPTION or "error" in lowered:
        return Priority.HIGH
    if pattern_type is PatternType.RETURN_MESSAGE or "validation" in lowered:
        return Priority.MEDIUM
    return Priority.LOW


def determine_category(
    file_path: str, service_tokens: Sequence[str] = DEFAULT_SERVICE_TOKENS
) -> str:
    segments = path_segments(file_path)
    tokens = set(service_tokens) | set(CATEGORY_EXTRA_TOKENS)
    for segment in segments:
        if segment in tokens:
            return segment
    if "src" in segments:
        src_index = segments.index("src")
        if src_index > 0:
            return segments[src_index - 1]
    return UNKNOWN_CATEGORY
