# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from pytest_mock import MockerFixture
from rich.console import Console

from trans_extract.config import TransExtractConfig
from trans_extract.config_loader import default_config

AUTH_SERVICE_TS = """\
import { BadRequestException } from '@nestjs/common';

export class AuthService {
  async register(dto: RegisterDto) {
    // 邮箱已被占用
    if (await this.exists(dto.email)) {
      throw new BadRequestException('User already exists with this email');
    }
    return { message: 'Validation failed' };
  }
}
"""

PROFILE_SERVICE_TS = """\
export class ProfileService {
  update(errors: string[], fieldName: string) {
    errors.push(`The field ${fieldName} is required`);
    return { success: true, message: 'Profile updated successfully' };
  }
}
"""


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture
def config() -> TransExtractConfig:
    """只包含默认值的配置，不受运行环境中 TX_ 环境变量的影响。"""
    return default_config()


def _write_project(root: Path) -> None:
    auth_dir = root / "auth" / "src" / "services"
    auth_dir.mkdir(parents=True)
    (auth_dir / "auth.service.ts").write_text(AUTH_SERVICE_TS, encoding="utf-8")

    profile_dir = root / "profile" / "src"
    profile_dir.mkdir(parents=True)
    (profile_dir / "profile.service.ts").write_text(
        PROFILE_SERVICE_TS, encoding="utf-8"
    )


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """一个包含两个服务的最小项目，并把当前目录切换到项目根目录。"""
    _write_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def sibling_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    同样的双服务项目放在 `proj/` 下，当前目录切换到同级的 `work/`，
    用于从项目外部以 `../proj` 或绝对路径运行。
    """
    root = tmp_path / "proj"
    _write_project(root)
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return root
