# trans_extract/filesystem.py
"""
文件枚举与文件读写。

枚举结果的顺序是确定的（按路径排序），提取结果的顺序依赖于它。
忽略规则使用 glob 语法，匹配对象是相对于搜索根目录的 POSIX 路径。
"""

import os
import shutil
from collections.abc import Iterable, Sequence
from fnmatch import fnmatchcase
from pathlib import Path

import structlog

from trans_extract.exceptions import FileAccessError

logger = structlog.get_logger(__name__)

BYTES_PER_MB = 1024 * 1024
BACKUP_SUFFIX = ".backup"


def is_ignored(relative_path: str, ignore: Sequence[str]) -> bool:
    """
    判断相对路径是否命中任一忽略规则。

    `fnmatch` 中的 `*` 可以跨越 `/`，因此 `**/x/**` 可以匹配任意深度；
    以 `**/` 开头的规则还会去掉该前缀再匹配一次，以覆盖根目录下的直接子项。
    """
    for pattern in ignore:
        if fnmatchcase(relative_path, pattern):
            return True
        if pattern.startswith("**/") and fnmatchcase(relative_path, pattern[3:]):
            return True
    return False


def find_source_files(
    root: str | Path,
    extensions: Iterable[str] = (".ts",),
    ignore: Sequence[str] = (),
) -> list[str]:
    """
    递归枚举根目录下所有匹配扩展名、且未被忽略的文件。

    Returns:
        以根目录为前缀的 POSIX 路径列表，按字符串排序，可以直接用于读写。
        根目录为 `.` 时返回的路径不带前缀，例如 `auth/src/auth.service.ts`。
        需要相对路径时使用 `relative_to_root`。
    """
    root_path = Path(root)
    suffixes = tuple(extensions)
    found: list[str] = []

    for dirpath, dirnames, filenames in os.walk(root_path):
        rel_dir = Path(dirpath).relative_to(root_path).as_posix()
        rel_prefix = "" if rel_dir == "." else f"{rel_dir}/"
        # 提前剪掉被整体忽略的目录，避免遍历 node_modules 之类的大目录。
        dirnames[:] = sorted(
            d for d in dirnames if not is_ignored(f"{rel_prefix}{d}/", ignore)
        )
        for name in sorted(filenames):
            if not name.endswith(suffixes):
                continue
            relative = f"{rel_prefix}{name}"
            if is_ignored(relative, ignore):
                continue
            found.append((root_path / relative).as_posix())

    found.sort()
    return found


def relative_to_root(file_path: str, root: str | Path) -> str:
    """
    把 `find_source_files` 返回的路径还原为相对于根目录的 POSIX 路径。

    数据集只记录这种形式，因此按服务分组时不受根目录写法影响：
    `../proj/auth/src/a.ts` 与 `/tmp/proj/auth/src/a.ts` 都得到 `auth/src/a.ts`。
    """
    path = Path(file_path)
    root_path = Path(root)
    if path == root_path:
        return path.name
    return path.relative_to(root_path).as_posix()


def filter_files_by_size(
    files: Iterable[str], max_size_mb: float
) -> tuple[list[str], list[str]]:
    """
    按体积过滤文件。

    Returns:
        (保留的文件, 被跳过的文件)。无法获取大小的文件同样被跳过并记录警告。
    """
    kept: list[str] = []
    skipped: list[str] = []
    limit = max_size_mb * BYTES_PER_MB
    for file_path in files:
        try:
            size = os.stat(file_path).st_size
        except OSError as e:
            logger.warning("无法获取文件大小，已跳过。", file=file_path, error=str(e))
            skipped.append(file_path)
            continue
        if size > limit:
            logger.warning(
                "文件超过大小限制，已跳过。",
                file=file_path,
                size_mb=round(size / BYTES_PER_MB, 2),
                max_size_mb=max_size_mb,
            )
            skipped.append(file_path)
            continue
        kept.append(file_path)
    return kept, skipped


def read_source_file(file_path: str) -> str:
    """
    以 UTF-8 读取整个文件。保留原始换行符，替换引擎依赖字节级一致。
    """
    try:
        with open(file_path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(f"无法读取文件 {file_path}: {e}") from e


def write_source_file(file_path: str, content: str) -> None:
    try:
        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        raise FileAccessError(f"无法写入文件 {file_path}: {e}") from e


def backup_file(file_path: str) -> str:
    """把文件的原始字节复制到 `<file>.backup`，返回备份路径。"""
    backup_path = f"{file_path}{BACKUP_SUFFIX}"
    try:
        shutil.copyfile(file_path, backup_path)
    except OSError as e:
        raise FileAccessError(f"无法备份文件 {file_path}: {e}") from e
    return backup_path
