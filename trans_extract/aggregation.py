# trans_extract/aggregation.py
"""去重与汇总：把提取阶段的原始键列表整理为数据集和报告所需的形状。"""

from collections.abc import Iterable

from trans_extract.types import PatternType, ServiceSummary, TranslationKey
from trans_extract.utils import first_path_segment


def deduplicate(keys: Iterable[TranslationKey]) -> list[TranslationKey]:
    """按 `key:text` 去重，保留第一次出现的条目，并保持原有顺序。"""
    seen: set[str] = set()
    unique: list[TranslationKey] = []
    for item in keys:
        identity = f"{item.key}:{item.text}"
        if identity in seen:
            continue
        seen.add(identity)
        unique.append(item)
    return unique


def collect_services(keys: Iterable[TranslationKey]) -> list[str]:
    """按首次出现的顺序返回所有不同的服务（文件路径的第一段）。"""
    services: dict[str, None] = {}
    for item in keys:
        services.setdefault(first_path_segment(item.file), None)
    return list(services)


def group_by_service(keys: Iterable[TranslationKey]) -> list[ServiceSummary]:
    """
    按文件路径的第一段汇总各类键的数量，仅用于报告。

    注意这与键中的 SERVICE 段是两套独立的机制：后者来自服务名识别规则，
    前者只看路径的第一段。
    """
    summaries: dict[str, ServiceSummary] = {}
    for item in keys:
        service = first_path_segment(item.file)
        summary = summaries.setdefault(service, ServiceSummary(service=service))
        summary.total += 1
        if item.type is PatternType.EXCEPTION:
            summary.exception += 1
        elif item.type is PatternType.TEMPLATE_LITERAL:
            summary.template += 1
        else:
            summary.other += 1
    return list(summaries.values())


def group_keys_by_service(
    keys: Iterable[TranslationKey],
) -> dict[str, list[TranslationKey]]:
    grouped: dict[str, list[TranslationKey]] = {}
    for item in keys:
        grouped.setdefault(first_path_segment(item.file), []).append(item)
    return grouped


def find_key_collisions(keys: Iterable[TranslationKey]) -> dict[str, list[str]]:
    """找出被多个不同文本共享的键。返回 键 -> 按首次出现顺序排列的不同文本。"""
    texts_by_key: dict[str, list[str]] = {}
    for item in keys:
        texts = texts_by_key.setdefault(item.key, [])
        if item.text not in texts:
            texts.append(item.text)
    return {key: texts for key, texts in texts_by_key.items() if len(texts) > 1}
