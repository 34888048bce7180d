# trans_extract/types.py
"""
本模块定义了 Trans-Extract 系统的核心数据类型。

所有跨组件传递的数据结构都集中在这里，持久化的数据集字段使用 camelCase
别名以保持 JSON 格式的稳定，而 Python 侧统一使用 snake_case 属性名。
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PatternType(str, Enum):
    """识别出某个字符串字面量的模式种类。"""

    EXCEPTION = "EXCEPTION"
    RETURN_MESSAGE = "RETURN_MESSAGE"
    TEMPLATE_LITERAL = "TEMPLATE_LITERAL"
    MESSAGE_PROPERTY = "MESSAGE_PROPERTY"
    CONCATENATED_STRING = "CONCATENATED_STRING"


class Priority(str, Enum):
    """翻译键的翻译优先级。"""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PatternMatch(BaseModel):
    """模式匹配器返回的一个原始匹配结果。"""

    model_config = ConfigDict(frozen=True)

    text: str
    type: PatternType
    priority: int
    start: int
    end: int
    text_start: int
    text_end: int


class TranslationKey(BaseModel):
    """从源代码中提取出的一个可翻译字符串及其生成的键。"""

    model_config = ConfigDict(frozen=True)

    key: str
    text: str
    type: PatternType
    file: str
    line: int = Field(ge=1)
    context: Optional[str] = None
    priority: Optional[Priority] = None
    category: Optional[str] = None


class DatasetMetadata(BaseModel):
    """数据集的可选元数据。"""

    model_config = ConfigDict(populate_by_name=True)

    version: str = "1.0.0"
    environment: str = "development"
    total_files: int = Field(default=0, alias="totalFiles")
    extraction_time: float = Field(default=0.0, alias="extractionTime")


class TranslationDataset(BaseModel):
    """提取阶段持久化的结果，也是生成与替换阶段的输入。"""

    model_config = ConfigDict(populate_by_name=True)

    keys: list[TranslationKey] = Field(default_factory=list)
    total_keys: int = Field(default=0, alias="totalKeys")
    services: list[str] = Field(default_factory=list)
    generated_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        alias="generatedAt",
    )
    metadata: Optional[DatasetMetadata] = None


class ServiceSummary(BaseModel):
    """按服务（路径的第一段）汇总的键数量统计，仅用于报告。"""

    service: str
    total: int = 0
    exception: int = 0
    template: int = 0
    other: int = 0


class ValidationError(BaseModel):
    """验证器报告的一个错误。severity 为 critical 时表示数据本身不可用。"""

    severity: Literal["error", "critical"] = "error"
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    code: Optional[str] = None


class ValidationWarning(BaseModel):
    """验证器报告的一个警告，附带处理建议。"""

    message: str
    suggestion: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None


class ValidationResult(BaseModel):
    """一次验证的结果。"""

    is_valid: bool = True
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)

    def merge(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.is_valid = self.is_valid and other.is_valid


class PerformanceMetrics(BaseModel):
    """一次运行的性能指标。"""

    start_time: float
    end_time: Optional[float] = None
    duration_ms: Optional[float] = None
    files_processed: int = 0
    files_skipped: int = 0
    total_keys: int = 0


class ProgressUpdate(BaseModel):
    """性能监视器推送给进度回调的进度信息。"""

    current: int
    total: int
    percentage: int
    speed: Optional[float] = None
    eta_seconds: Optional[float] = None
    status: Literal["processing", "completed", "error"] = "processing"


class ExtractionReport(BaseModel):
    """提取编排器的运行结果。"""

    keys: list[TranslationKey] = Field(default_factory=list)
    files_found: int = 0
    files_processed: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    timed_out: bool = False
    services: list[str] = Field(default_factory=list)
    collisions: dict[str, list[str]] = Field(default_factory=dict)
    validation: Optional[ValidationResult] = None
    metrics: Optional[PerformanceMetrics] = None
    service_summary: list[ServiceSummary] = Field(default_factory=list)

    def to_dataset(
        self, metadata: Optional[DatasetMetadata] = None
    ) -> TranslationDataset:
        return TranslationDataset(
            keys=list(self.keys),
            total_keys=len(self.keys),
            services=list(self.services),
            metadata=metadata,
        )


class GenerationReport(BaseModel):
    """模板生成器的运行结果。"""

    services: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    files_written: list[str] = Field(default_factory=list)
    backups: list[str] = Field(default_factory=list)
    files_failed: list[str] = Field(default_factory=list)
    # 名称无法安全地作为输出子目录的服务，例如 `..`
    rejected_services: list[str] = Field(default_factory=list)
    keys_per_service: dict[str, int] = Field(default_factory=dict)
    collisions: dict[str, list[str]] = Field(default_factory=dict)
    dry_run: bool = False


class Replacement(BaseModel):
    """替换引擎在某个文件中完成（或在试运行中计划）的一次替换。"""

    line: int
    text: str
    key: str
    rule: PatternType
    start: int
    end: int


class FileReplacementResult(BaseModel):
    """单个文件的替换结果。"""

    file: str
    replacements: list[Replacement] = Field(default_factory=list)
    backup_path: Optional[str] = None
    written: bool = False
    error: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.replacements)


class ReplacementReport(BaseModel):
    """替换引擎的运行结果。"""

    files: list[FileReplacementResult] = Field(default_factory=list)
    files_scanned: int = 0
    files_modified: int = 0
    files_failed: int = 0
    dry_run: bool = False
    # 数据集中未在任何字面量中匹配到的文本，例如清洗时去掉了尖括号的文本
    unmatched_texts: list[str] = Field(default_factory=list)

    @property
    def total_replacements(self) -> int:
        return sum(result.count for result in self.files)

    def summary(self) -> dict[str, Any]:
        return {
            "files_scanned": self.files_scanned,
            "files_modified": self.files_modified,
            "files_failed": self.files_failed,
            "total_replacements": self.total_replacements,
            "unmatched_texts": len(self.unmatched_texts),
            "dry_run": self.dry_run,
        }
