# trans_extract/config.py
"""
本模块定义了 Trans-Extract 的配置模型。

配置按照 默认值 < 环境变量 (`TX_` 前缀, 嵌套字段以 `__` 分隔) < 配置文件
的顺序叠加，最后再由 `effective()` 根据运行环境施加强制覆盖。
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trans_extract.utils import validate_lang_codes

DEFAULT_IGNORE = [
    "**/node_modules/**",
    "**/dist/**",
    "**/coverage/**",
    "**/*.spec.ts",
    "**/*.test.ts",
]
DEFAULT_SERVICE_TOKENS = ["auth", "profile", "notification", "location"]
DEFAULT_LANGUAGES = ["en", "fr", "es", "de", "ar"]

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
Environment = Literal["development", "staging", "production"]


class LoggingSettings(BaseModel):
    level: LogLevel = "INFO"
    format: Literal["json", "console"] = "console"
    output: Literal["console", "file", "both"] = "console"
    file_path: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        if isinstance(v, str):
            upper = v.upper()
            return "WARNING" if upper == "WARN" else upper
        return v

    @model_validator(mode="after")
    def check_file_path(self) -> "LoggingSettings":
        if self.output in ("file", "both") and not self.file_path:
            raise ValueError("当日志输出包含文件时，必须提供 logging.file_path")
        return self


class PerformanceSettings(BaseModel):
    max_concurrency: int = Field(default=4, ge=1, le=20)
    max_file_size: int = Field(
        default=10, ge=1, le=100, description="单个源文件允许的最大体积（MB）"
    )
    timeout: int = Field(default=300, ge=30, le=3600, description="整体超时（秒）")


class SecuritySettings(BaseModel):
    validate_inputs: bool = True
    sanitize_outputs: bool = True
    max_key_length: int = Field(default=200, ge=10, le=500)


class FeaturesSettings(BaseModel):
    enable_validation: bool = True
    enable_backup: bool = True
    enable_dry_run: bool = False
    enable_progress_bar: bool = True


class ExtractionSettings(BaseModel):
    ignore: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE))
    extensions: list[str] = Field(default_factory=lambda: [".ts"])
    service_tokens: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SERVICE_TOKENS)
    )
    languages: list[str] = Field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    source_language: str = "en"
    translate_call: str = "this.translate"

    @field_validator("languages")
    @classmethod
    def validate_languages(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("languages 不能为空")
        validate_lang_codes(v)
        return v

    @field_validator("source_language")
    @classmethod
    def validate_source_language(cls, v: str) -> str:
        validate_lang_codes([v])
        return v

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in v]


class TransExtractConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TX_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    version: str = "1.0.0"
    environment: Environment = "development"

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    performance: PerformanceSettings = Field(default_factory=PerformanceSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    features: FeaturesSettings = Field(default_factory=FeaturesSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)

    def effective(self) -> "TransExtractConfig":
        """返回施加了运行环境强制覆盖之后的配置副本，原对象保持不变。"""
        data = self.model_dump()
        if self.environment == "production":
            data["logging"]["level"] = "WARNING"
            data["logging"]["format"] = "json"
            data["performance"]["max_concurrency"] = min(
                self.performance.max_concurrency, 8
            )
            data["features"]["enable_validation"] = True
            data["security"]["validate_inputs"] = True
            data["security"]["sanitize_outputs"] = True
        elif self.environment == "staging":
            data["logging"]["level"] = "INFO"
            data["security"]["validate_inputs"] = True
        return self.model_validate(data)
