# trans_extract/__init__.py
"""Trans-Extract: 从 TypeScript 源代码中提取面向用户的字符串，生成翻译模板，
并把源代码中的字面量替换为翻译调用。
"""

__version__ = "1.0.0"

from .config import TransExtractConfig
from .extractor import ExtractionOptions, TranslationExtractor
from .generator import GenerationOptions, TemplateGenerator
from .replacer import ReplacementOptions, TranslationReplacer
from .types import PatternType, TranslationDataset, TranslationKey

__all__ = [
    "__version__",
    "TransExtractConfig",
    "TranslationExtractor",
    "ExtractionOptions",
    "TemplateGenerator",
    "GenerationOptions",
    "TranslationReplacer",
    "ReplacementOptions",
    "PatternType",
    "TranslationKey",
    "TranslationDataset",
]
