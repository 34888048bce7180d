# tests/unit/test_aggregation.py
"""针对 `trans_extract.aggregation` 模块的单元测试。"""

from trans_extract.aggregation import (
    collect_services,
    deduplicate,
    find_key_collisions,
    group_by_service,
    group_keys_by_service,
)
from trans_extract.types import PatternType, TranslationKey


def _key(
    key: str,
    text: str,
    file: str = "auth/src/a.ts",
    type_: PatternType = PatternType.MESSAGE_PROPERTY,
    line: int = 1,
) -> TranslationKey:
    return TranslationKey(key=key, text=text, type=type_, file=file, line=line)


def test_deduplicate_keeps_first_occurrence_and_order() -> None:
    """测试去重保留第一次出现的条目，并保持原有顺序。"""
    first = _key("A.B.C.X", "x text", line=1)
    second = _key("A.B.C.Y", "y text", line=2)
    duplicate = _key("A.B.C.X", "x text", file="auth/src/other.ts", line=9)

    result = deduplicate([first, second, duplicate])

    assert result == [first, second]
    assert result[0].line == 1


def test_deduplicate_keeps_same_key_with_different_text() -> None:
    """测试键相同但文本不同的条目不会被去重。"""
    keys = [_key("A.B.C.X", "Hello!"), _key("A.B.C.X", "Hello?")]
    assert deduplicate(keys) == keys


def test_deduplicate_result_has_unique_identities() -> None:
    """测试去重后不存在重复的 (key, text)。"""
    keys = [_key(f"K{i % 3}", f"t{i % 2}") for i in range(12)]
    result = deduplicate(keys)
    identities = [(k.key, k.text) for k in result]
    assert len(identities) == len(set(identities))
    assert set(identities) == {(k.key, k.text) for k in keys}


def test_group_by_service_counts_types_by_first_path_segment() -> None:
    """测试按路径第一段汇总各类键的数量。"""
    keys = [
        _key("1", "one", "auth/src/a.ts", PatternType.EXCEPTION),
        _key("2", "two", "auth/src/a.ts", PatternType.TEMPLATE_LITERAL),
        _key("3", "three", "auth/src/b.ts", PatternType.RETURN_MESSAGE),
        _key("4", "four", "profile/src/c.ts", PatternType.MESSAGE_PROPERTY),
    ]
    summaries = {s.service: s for s in group_by_service(keys)}

    assert list(summaries) == ["auth", "profile"]
    auth = summaries["auth"]
    assert (auth.total, auth.exception, auth.template, auth.other) == (3, 1, 1, 1)
    assert summaries["profile"].other == 1


def test_collect_services_first_seen_order() -> None:
    """测试服务列表按首次出现顺序排列且不重复。"""
    keys = [
        _key("1", "one", "profile/src/a.ts"),
        _key("2", "two", "auth/src/a.ts"),
        _key("3", "three", "profile/src/b.ts"),
    ]
    assert collect_services(keys) == ["profile", "auth"]
    assert list(group_keys_by_service(keys)) == ["profile", "auth"]


def test_find_key_collisions() -> None:
    """测试找出被多个不同文本共享的键。"""
    keys = [
        _key("A.B.C.HELLO", "Hello!"),
        _key("A.B.C.HELLO", "Hello?"),
        _key("A.B.C.BYE", "Bye"),
    ]
    assert find_key_collisions(keys) == {"A.B.C.HELLO": ["Hello!", "Hello?"]}
