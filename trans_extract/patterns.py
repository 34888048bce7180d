# trans_extract/patterns.py
"""
模式匹配器：在整个文件的文本上运行一组正则表达式，找出面向用户的字符串字面量。

这里不做任何语法分析。每个模式恰好有一个捕获组，捕获组的内容（不含引号）
就是候选文本；长度不在 [min_length, max_length] 区间内的候选会被丢弃。
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from trans_extract.types import PatternMatch, PatternType

# 字符串字面量的引号（单引号、双引号、反引号）
_Q = "['\"`]"
_NOT_Q = "[^'\"`]"


@dataclass(frozen=True)
class ExtractionPattern:
    """一个带元数据的、预编译的提取模式。priority 越小越先执行。"""

    regex: re.Pattern[str]
    type: PatternType
    description: str
    priority: int
    min_length: int = 3
    max_length: int = 500

    def __post_init__(self) -> None:
        if self.regex.groups != 1:
            raise ValueError(
                f"提取模式 {self.type.value} 必须恰好包含一个捕获组，"
                f"实际为 {self.regex.groups} 个。"
            )


DEFAULT_PATTERNS: tuple[ExtractionPattern, ...] = (
    ExtractionPattern(
        regex=re.compile(
            rf"throw new \w+Exception\({_Q}({_NOT_Q}+){_Q}"
            rf"(?:,\s*(?:\{{[^}}]*\}}|\w+(?:\.\w+)*))?\)"
        ),
        type=PatternType.EXCEPTION,
        description="异常构造参数中的消息",
        priority=1,
    ),
    ExtractionPattern(
        regex=re.compile(
            rf"return\s*\{{[^}}]*?message\s*:\s*{_Q}({_NOT_Q}+){_Q}[^}}]*\}}"
        ),
        type=PatternType.RETURN_MESSAGE,
        description="返回对象中的 message 字段",
        priority=2,
    ),
    ExtractionPattern(
        regex=re.compile(r"errors\.push\(`([^`]+)`\)"),
        type=PatternType.TEMPLATE_LITERAL,
        description="推入错误列表的模板字符串",
        priority=3,
    ),
    ExtractionPattern(
        regex=re.compile(rf"message\s*:\s*{_Q}({_NOT_Q}+){_Q}"),
        type=PatternType.MESSAGE_PROPERTY,
        description="任意位置的 message 属性",
        priority=4,
    ),
    ExtractionPattern(
        regex=re.compile(rf"{_Q}({_NOT_Q}{{10,}}){_Q}\s*\+\s*{_Q}{_NOT_Q}+{_Q}"),
        type=PatternType.CONCATENATED_STRING,
        description="字符串拼接中的第一个操作数",
        priority=5,
    ),
)

# 注释提取
RE_LINE_COMMENT = re.compile(r"//(.*)$", re.MULTILINE)
RE_BLOCK_COMMENT = re.compile(r"/\*([\s\S]*?)\*/")
RE_BLOCK_DECORATION = re.compile(r"^\s*\*+\s?", re.MULTILINE)
CONTEXT_LOOKBACK_LINES = 5


@dataclass(frozen=True)
class SourceComment:
    start_line: int
    end_line: int
    text: str


def line_of(content: str, offset: int) -> int:
    """返回偏移量所在的行号（从 1 开始）。"""
    return content.count("\n", 0, offset) + 1


def find_matches(
    content: str, patterns: Iterable[ExtractionPattern] = DEFAULT_PATTERNS
) -> list[PatternMatch]:
    """
    在给定文本上运行所有模式，返回按 (匹配起始偏移, 模式优先级) 排序的匹配列表。

    不同模式可能匹配到同一个字面量（例如 RETURN_MESSAGE 与 MESSAGE_PROPERTY），
    这里不做去重，去重由聚合阶段按 (key, text) 完成。
    """
    matches: list[PatternMatch] = []
    for pattern in sorted(patterns, key=lambda p: p.priority):
        # finditer 每次匹配后都会前进，不会因为空匹配而死循环。
        for m in pattern.regex.finditer(content):
            text = m.group(1)
            if not pattern.min_length <= len(text) <= pattern.max_length:
                continue
            matches.append(
                PatternMatch(
                    text=text,
                    type=pattern.type,
                    priority=pattern.priority,
                    start=m.start(),
                    end=m.end(),
                    text_start=m.start(1),
                    text_end=m.end(1),
                )
            )
    matches.sort(key=lambda match: (match.start, match.priority))
    return matches


def extract_comments(content: str) -> list[SourceComment]:
    """提取文件中的单行与多行注释，并去掉注释标记。"""
    comments: list[SourceComment] = []
    for m in RE_LINE_COMMENT.finditer(content):
        # 跳过 URL 中的 `//`，例如 'https://...'
        if m.start() > 0 and content[m.start() - 1] == ":":
            continue
        text = m.group(1).strip()
        if text:
            line = line_of(content, m.start())
            comments.append(SourceComment(line, line, text))
    for m in RE_BLOCK_COMMENT.finditer(content):
        text = RE_BLOCK_DECORATION.sub("", m.group(1)).strip()
        text = " ".join(text.split())
        if text:
            comments.append(
                SourceComment(
                    line_of(content, m.start()), line_of(content, m.end()), text
                )
            )
    comments.sort(key=lambda c: c.end_line)
    return comments


def find_nearby_comment(
    comments: list[SourceComment], line: int, lookback: int = CONTEXT_LOOKBACK_LINES
) -> Optional[str]:
    """返回在匹配行或其上方 `lookback` 行之内结束的、离匹配最近的注释。"""
    best: Optional[SourceComment] = None
    for comment in comments:
        if line - lookback <= comment.end_line <= line:
            if best is None or comment.end_line >= best.end_line:
                best = comment
    return best.text if best else None
