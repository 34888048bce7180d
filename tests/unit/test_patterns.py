# tests/unit/test_patterns.py
"""针对 `trans_extract.patterns` 模块的单元测试。"""

import re

import pytest

from trans_extract.patterns import (
    DEFAULT_PATTERNS,
    ExtractionPattern,
    extract_comments,
    find_matches,
    find_nearby_comment,
    line_of,
)
from trans_extract.types import PatternType


def test_exception_pattern_captures_message_without_quotes() -> None:
    """测试异常构造中的消息被捕获，且不包含引号。"""
    content = "throw new BadRequestException('User already exists with this email');"
    matches = find_matches(content)

    assert len(matches) == 1
    assert matches[0].type is PatternType.EXCEPTION
    assert matches[0].text == "User already exists with this email"
    assert content[matches[0].text_start - 1] == "'"


@pytest.mark.parametrize(
    "content",
    [
        "throw new NotFoundException('Profile not found', { cause: err });",
        "throw new NotFoundException(\"Profile not found\", ErrorCode.NOT_FOUND);",
        "throw new NotFoundException(`Profile not found`);",
    ],
)
def test_exception_pattern_accepts_second_argument_and_any_quote(content: str) -> None:
    """测试异常模式接受第二个参数以及三种引号。"""
    matches = find_matches(content)
    assert [(m.type, m.text) for m in matches] == [
        (PatternType.EXCEPTION, "Profile not found")
    ]


def test_return_message_also_yields_message_property_in_order() -> None:
    """测试返回对象中的 message 同时被两个模式识别，且 RETURN_MESSAGE 排在前面。"""
    matches = find_matches("return { message: 'Validation failed' };")

    assert [m.type for m in matches] == [
        PatternType.RETURN_MESSAGE,
        PatternType.MESSAGE_PROPERTY,
    ]
    assert {m.text for m in matches} == {"Validation failed"}


def test_return_message_spanning_multiple_lines() -> None:
    """测试跨多行的返回对象仍能被识别。"""
    content = """
        return {
          success: true,
          message: 'Validation failed'
        };
    """
    types = [m.type for m in find_matches(content)]
    assert types == [PatternType.RETURN_MESSAGE, PatternType.MESSAGE_PROPERTY]


def test_template_literal_in_errors_push() -> None:
    """测试 errors.push 中的模板字符串被完整捕获，包括插值部分。"""
    content = "errors.push(`The field '${fieldName}' is required`);"
    matches = find_matches(content)

    assert len(matches) == 1
    assert matches[0].type is PatternType.TEMPLATE_LITERAL
    assert matches[0].text == "The field '${fieldName}' is required"


def test_concatenated_string_captures_first_operand() -> None:
    """测试字符串拼接只捕获至少 10 个字符的第一个操作数。"""
    matches = find_matches("const msg = 'Something went wrong: ' + 'retry';")
    assert [(m.type, m.text) for m in matches] == [
        (PatternType.CONCATENATED_STRING, "Something went wrong: ")
    ]
    assert find_matches("const s = 'short' + 'x';") == []


@pytest.mark.parametrize(
    "text, expected_count",
    [
        ("ab", 0),
        ("abc", 1),
        ("a" * 500, 1),
        ("a" * 501, 0),
    ],
)
def test_length_boundaries(text: str, expected_count: int) -> None:
    """测试长度边界：3 和 500 保留，2 和 501 丢弃。"""
    content = f"throw new BadRequestException('{text}');"
    assert len(find_matches(content)) == expected_count


def test_matches_are_sorted_by_offset_then_priority() -> None:
    """测试结果按匹配起始偏移排序，偏移相同时按模式优先级排序。"""
    content = (
        "errors.push(`First problem here`);\n"
        "throw new BadRequestException('Second problem here');\n"
    )
    matches = find_matches(content)
    assert [m.text for m in matches] == ["First problem here", "Second problem here"]
    assert matches[0].start < matches[1].start


def test_find_matches_is_pure() -> None:
    """测试同一输入多次调用得到相同结果。"""
    content = "return { message: 'Validation failed' };"
    assert find_matches(content) == find_matches(content)


def test_pattern_requires_single_capture_group() -> None:
    """测试提取模式必须恰好包含一个捕获组。"""
    with pytest.raises(ValueError):
        ExtractionPattern(
            regex=re.compile(r"(a)(b)"),
            type=PatternType.EXCEPTION,
            description="invalid",
            priority=1,
        )


def test_default_catalog_priority_order() -> None:
    """测试默认模式目录的优先级顺序。"""
    assert [p.type for p in DEFAULT_PATTERNS] == [
        PatternType.EXCEPTION,
        PatternType.RETURN_MESSAGE,
        PatternType.TEMPLATE_LITERAL,
        PatternType.MESSAGE_PROPERTY,
        PatternType.CONCATENATED_STRING,
    ]


def test_line_of_is_one_based() -> None:
    """测试行号从 1 开始计数。"""
    content = "a\nb\nc"
    assert line_of(content, 0) == 1
    assert line_of(content, content.index("c")) == 3


def test_nearby_comment_lookup() -> None:
    """测试在匹配上方 5 行之内查找最近的注释。"""
    content = (
        "// far away comment\n"  # 1
        "\n"  # 2
        "\n"  # 3
        "\n"  # 4
        "\n"  # 5
        "\n"  # 6
        "/* close\n"  # 7
        " * comment */\n"  # 8
        "throw new BadRequestException('Oops happened');\n"  # 9
        "const url = 'https://example.com';\n"  # 10
    )
    comments = extract_comments(content)

    assert [c.text for c in comments] == ["far away comment", "close comment"]
    assert find_nearby_comment(comments, 9) == "close comment"
    assert find_nearby_comment(comments, 20) is None
