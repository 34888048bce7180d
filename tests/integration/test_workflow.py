# tests/integration/test_workflow.py
"""
端到端流程测试：提取 -> 生成 -> 替换。

直接调用三个组件的异步接口，验证它们通过磁盘上的数据集正确衔接。
"""

import json
from pathlib import Path

import pytest

from trans_extract.config import TransExtractConfig
from trans_extract.dataset import load_dataset, save_dataset
from trans_extract.extractor import ExtractionOptions, TranslationExtractor
from trans_extract.generator import GenerationOptions, TemplateGenerator
from trans_extract.replacer import ReplacementOptions, TranslationReplacer


@pytest.mark.asyncio
async def test_full_workflow(project_dir: Path, config: TransExtractConfig) -> None:
    """测试完整的提取、生成与替换流程。"""
    keys_file = project_dir / "translation-keys.json"

    # 1. 提取
    extractor = TranslationExtractor(config)
    report = await extractor.extract(ExtractionOptions(path="."))
    save_dataset(extractor.build_dataset(report), keys_file)
    dataset = load_dataset(keys_file)
    assert dataset.total_keys == 6

    # 2. 生成
    generation = await TemplateGenerator(config).generate(
        GenerationOptions(input=str(keys_file), languages=["en", "fr"])
    )
    assert generation.services == ["auth", "profile"]
    en = json.loads(
        (project_dir / "profile" / "src" / "translations" / "en.json").read_text(
            encoding="utf-8"
        )
    )
    assert (
        en["PROFILE.PROFILE_SERVICE.TEMPLATE_LITERAL.THE_FIELD_FIELDNAME_IS_REQUIRED"]
        == "The field ${fieldName} is required"
    )

    # 3. 替换
    profile_file = project_dir / "profile" / "src" / "profile.service.ts"
    original = profile_file.read_bytes()
    replacement = await TranslationReplacer(config).replace(
        ReplacementOptions(path=".", keys_file=str(keys_file), backup=True, dry_run=False)
    )
    assert replacement.files_modified == 2
    assert replacement.files_failed == 0

    content = profile_file.read_text(encoding="utf-8")
    assert (
        "errors.push(this.translate("
        "'PROFILE.PROFILE_SERVICE.TEMPLATE_LITERAL.THE_FIELD_FIELDNAME_IS_REQUIRED'));"
    ) in content
    assert (
        "message: this.translate("
        "'PROFILE.PROFILE_SERVICE.RETURN_MESSAGE.PROFILE_UPDATED_SUCCESSFULLY')"
    ) in content
    assert Path(f"{profile_file}.backup").read_bytes() == original

    # 4. 替换后再次提取，已替换的字面量不再出现
    second = await extractor.extract(ExtractionOptions(path="."))
    assert second.keys == []


@pytest.mark.asyncio
async def test_workflow_from_sibling_directory(
    sibling_project: Path, config: TransExtractConfig
) -> None:
    """
    测试从项目外部运行的完整流程：在 `work/` 中以 `../proj` 提取，
    翻译文件按服务写在输出根目录之下，替换时每个服务使用自己的键。
    """
    work = Path.cwd()
    shared = "throw new NotFoundException('User not found');\n"
    for relative in (
        "auth/src/services/auth.service.ts",
        "profile/src/profile.service.ts",
    ):
        target = sibling_project / relative
        target.write_text(target.read_text(encoding="utf-8") + shared, encoding="utf-8")
    keys_file = work / "translation-keys.json"

    extractor = TranslationExtractor(config)
    report = await extractor.extract(ExtractionOptions(path="../proj"))
    save_dataset(extractor.build_dataset(report), keys_file)
    assert report.services == ["auth", "profile"]
    assert {k.file for k in report.keys} == {
        "auth/src/services/auth.service.ts",
        "profile/src/profile.service.ts",
    }

    generation = await TemplateGenerator(config).generate(
        GenerationOptions(input=str(keys_file), output_root="out", languages=["en"])
    )
    assert generation.services == ["auth", "profile"]
    assert generation.rejected_services == []
    assert all(
        Path(p).resolve().is_relative_to(work / "out")
        for p in generation.files_written
    )
    assert not (work.parent / "src").exists()
    profile_en = json.loads(
        (work / "out" / "profile" / "src" / "translations" / "en.json").read_text(
            encoding="utf-8"
        )
    )
    assert "PROFILE.PROFILE_SERVICE.EXCEPTION.USER_NOT_FOUND" in profile_en

    replacement = await TranslationReplacer(config).replace(
        ReplacementOptions(
            path="../proj", keys_file=str(keys_file), backup=False, dry_run=False
        )
    )
    assert replacement.files_modified == 2
    assert replacement.unmatched_texts == []
    profile = (sibling_project / "profile" / "src" / "profile.service.ts").read_text(
        encoding="utf-8"
    )
    assert "this.translate('PROFILE.PROFILE_SERVICE.EXCEPTION.USER_NOT_FOUND')" in profile
