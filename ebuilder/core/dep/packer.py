"""二次归档打包

无法转换为归档 URL 的 Git 引用包（未知服务、镜像服务），
其存储目录会被分别打成 tar.gz，再整体打进一个 tar.gz，
由用户自行托管并加入 SRC_URI。

结构:
  <project>-<version>-git_dependencies.tar.gz
    ├── <hash>.tar.gz                     (Zig 0.14+ 新哈希格式)
    └── <name>-<hash>.tar.gz              (旧格式)

条目使用固定修改时间与属主，保证输出可复现。
"""

from __future__ import annotations

import gzip
import io
import logging
import tarfile
from pathlib import Path
from typing import BinaryIO

from ebuilder.core.dep.models import Package
from ebuilder.core.protocols import PackageStorage
from ebuilder.utils.fileio import atomic_write

GIT_COMMIT_TARBALLS_DIR = "git_commit_tarballs"
FIXED_MTIME = 1
DEFAULT_COMPRESSION_LEVEL = 6


def _normalize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.mtime = FIXED_MTIME
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    return info


def _gzip(data: bytes, compression_level: int) -> bytes:
    return gzip.compress(data, compresslevel=compression_level, mtime=0)


def pack_directory(directory: Path, compression_level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """把目录内容（相对路径、排序后）打成 tar.gz 字节串"""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w", format=tarfile.PAX_FORMAT) as tar:
        for path in sorted(directory.rglob("*")):
            arcname = path.relative_to(directory).as_posix()
            info = _normalize(tar.gettarinfo(str(path), arcname=arcname))
            if info.isreg():
                with open(path, "rb") as f:
                    tar.addfile(info, f)
            else:
                tar.addfile(info)
    return _gzip(buffer.getvalue(), compression_level)


def pack_git_commits(
    packages: list[Package],
    store: PackageStorage,
    writer: BinaryIO,
    *,
    new_hash_format: bool,
    events: logging.Logger,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> list[str]:
    """把所有 GitRef 包的存储目录打进一个 tar.gz，写入 writer

    返回写入的成员名列表。
    """
    buffer = io.BytesIO()
    members: list[str] = []
    with tarfile.open(fileobj=buffer, mode="w", format=tarfile.PAX_FORMAT) as tar:
        for package in packages:
            if not package.is_git_ref:
                continue

            package_dir = store.package_dir(package.hash)
            if not package_dir.is_dir():
                raise FileNotFoundError(f"包存储目录不存在: {package_dir}")

            file_name = package.distfile_name(new_hash_format)
            events.warning("正在打包 %s ...", file_name)
            content = pack_directory(package_dir, compression_level)

            info = _normalize(tarfile.TarInfo(file_name))
            info.size = len(content)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(content))
            members.append(file_name)

    events.warning("正在压缩为整体归档...")
    writer.write(_gzip(buffer.getvalue(), compression_level))
    return members


def secondary_archive_name(project_name: str, project_version: str) -> str:
    return f"{project_name}-{project_version}-git_dependencies.tar.gz"


def write_git_commits_archive(
    packages: list[Package],
    store: PackageStorage,
    cache_dir: Path,
    *,
    project_name: str,
    project_version: str,
    new_hash_format: bool,
    events: logging.Logger,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> Path:
    """生成二次归档文件并返回其路径"""
    target = cache_dir / GIT_COMMIT_TARBALLS_DIR / secondary_archive_name(
        project_name, project_version,
    )
    events.warning("正在打包为归档 %s ...", target.name)

    memory = io.BytesIO()
    pack_git_commits(
        packages, store, memory,
        new_hash_format=new_hash_format,
        events=events,
        compression_level=compression_level,
    )

    events.warning("正在写入磁盘...")
    atomic_write(target, memory.getvalue())
    return target
