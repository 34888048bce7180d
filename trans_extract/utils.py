# trans_extract/utils.py
"""
本模块包含项目范围内的通用工具函数。
"""

import re
from pathlib import PurePosixPath

from langcodes import Language
from langcodes.tag_parser import LanguageTagError

# 语言子标签应该由 2-3 个字母组成 (BCP 47)
LANGUAGE_SUBTAG_PATTERN = re.compile(r"^[a-zA-Z]{2,3}$")


def validate_lang_codes(lang_codes: list[str]) -> None:
    """使用 `langcodes` 库校验语言代码列表中的每个代码是否符合 BCP 47 规范。"""
    for code in lang_codes:
        try:
            lang = Language.get(code)
            if not lang.language or not LANGUAGE_SUBTAG_PATTERN.match(lang.language):
                raise LanguageTagError(
                    f"Tag '{code}' lacks a valid 2-3 letter language subtag."
                )
        except LanguageTagError as e:
            raise ValueError(f"提供的语言代码 '{code}' 格式无效。原因: {e}") from e


def split_csv_option(value: str | None) -> list[str]:
    """将 CLI 中逗号分隔的选项值拆分为去除空白的列表，空项会被丢弃。"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def path_segments(file_path: str) -> list[str]:
    """
    将文件路径拆分为路径段，同时兼容 POSIX 与 Windows 分隔符。

    前导的 `.` 段会被丢弃，因此 `./auth/src/a.ts` 与 `auth/src/a.ts`
    得到相同的结果。
    """
    normalized = file_path.replace("\\", "/")
    return [part for part in PurePosixPath(normalized).parts if part not in (".", "/")]


def first_path_segment(file_path: str) -> str:
    """返回路径的第一个路径段，用于按服务分组。空路径返回空字符串。"""
    segments = path_segments(file_path)
    return segments[0] if segments else ""


def same_source_file(file_path: str, recorded: str) -> bool:
    """
    判断一个磁盘路径与数据集中记录的路径是否指向同一个源文件。

    数据集中的路径相对于提取时的根目录，而替换时枚举到的路径可能带有
    另一个根前缀，所以按路径段比较较短一方的后缀。
    """
    actual = path_segments(file_path)
    expected = path_segments(recorded)
    if not actual or not expected:
        return False
    n = min(len(actual), len(expected))
    return actual[-n:] == expected[-n:]
