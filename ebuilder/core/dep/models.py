"""依赖包数据模型

数据类:
- ArchiveFormat: 可识别的归档格式
- Archive / GitRef: 资源类型（带载荷的和类型）
- Package: 单个远程依赖的解析结果，以内容哈希为唯一键
- ResolvedDependencies: 依赖解析的最终输出
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import SplitResult

from ebuilder.core.dep.services import ResourceType, canonicalize
from ebuilder.core.exceptions import InvalidLocatorError
from ebuilder.utils.net import locator_host, render_locator, split_locator

PRISTINE_PACKAGE_NAME = "pristine_package"

_ARCHIVE_SCHEMES = ("http", "https")
_GIT_SCHEMES = ("git+http", "git+https")


class ArchiveFormat(Enum):
    TAR = "tar"
    TAR_GZ = "tar.gz"
    TAR_BZ2 = "tar.bz2"
    TAR_XZ = "tar.xz"
    TAR_ZST = "tar.zst"
    ZIP = "zip"

    @classmethod
    def from_path(cls, path: str) -> ArchiveFormat | None:
        """按文件后缀识别归档格式（大小写不敏感）"""
        lowered = path.lower()
        for suffix, fmt in _SUFFIXES:
            if lowered.endswith(suffix):
                return fmt
        return None


_SUFFIXES: tuple[tuple[str, ArchiveFormat], ...] = (
    (".tar", ArchiveFormat.TAR),
    (".tgz", ArchiveFormat.TAR_GZ),
    (".tar.gz", ArchiveFormat.TAR_GZ),
    (".tbz2", ArchiveFormat.TAR_BZ2),
    (".tar.bz2", ArchiveFormat.TAR_BZ2),
    (".txz", ArchiveFormat.TAR_XZ),
    (".tar.xz", ArchiveFormat.TAR_XZ),
    (".tzst", ArchiveFormat.TAR_ZST),
    (".tar.zst", ArchiveFormat.TAR_ZST),
    (".zip", ArchiveFormat.ZIP),
    (".jar", ArchiveFormat.ZIP),
)


@dataclass(frozen=True)
class Archive:
    """归档包（tarball / zip）"""

    format: ArchiveFormat


@dataclass(frozen=True)
class GitRef:
    """以不可变 commit 寻址的 Git 引用"""

    commit: str


PackageKind = Archive | GitRef


@dataclass
class Package:
    """单个远程依赖包

    name 为 None 表示 "pristine" 包：没有自己的 build.zig.zon，
    真实名称取决于引用它的清单。
    """

    name: str | None
    hash: str
    locator: str
    kind: PackageKind

    @classmethod
    def from_locator(
        cls,
        name: str | None,
        hash: str,  # noqa: A002
        locator: str,
        events: logging.Logger,
    ) -> Package:
        """从声明的定位符构造包：规范化 + 按 scheme 识别资源类型

        Raises:
            InvalidLocatorError: scheme 未知、归档格式未知、Git 引用缺少 commit
        """
        parts = split_locator(locator)
        scheme = parts.scheme.lower()

        if scheme in _ARCHIVE_SCHEMES:
            parts = canonicalize(parts, ResourceType.ARCHIVE)
            fmt = ArchiveFormat.from_path(parts.path)
            if fmt is None:
                events.error("未知的归档格式: %s (来自 URL %s)", parts.path, locator)
                raise InvalidLocatorError(f"未知的归档格式: {parts.path} (来自 URL {locator})")
            kind: PackageKind = Archive(fmt)
        elif scheme in _GIT_SCHEMES:
            parts = canonicalize(parts, ResourceType.GIT_REF)
            # 只接受 "git+https://host/user/repo?ref=main#<commit>" 形式，
            # 没有 fragment 的 URL 指向可变内容（分支/标签）
            if not parts.fragment:
                events.error("无效的 Git URI: %s", locator)
                events.error("该 URI 很可能指向可变内容（缺少 #<commit>）")
                raise InvalidLocatorError(f"无效的 Git URI（缺少 commit）: {locator}")
            kind = GitRef(parts.fragment)
        else:
            events.error("未知的 URI scheme: %s (来自 URL %s)", parts.scheme, locator)
            raise InvalidLocatorError(f"未知的 URI scheme: {parts.scheme} (来自 URL {locator})")

        return cls(name=name, hash=hash, locator=render_locator(parts), kind=kind)

    @property
    def parts(self) -> SplitResult:
        return split_locator(self.locator)

    @property
    def host(self) -> str | None:
        return locator_host(self.parts)

    @property
    def path(self) -> str:
        return self.parts.path

    @property
    def is_git_ref(self) -> bool:
        return isinstance(self.kind, GitRef)

    @property
    def display_name(self) -> str:
        return self.name if self.name is not None else "pristine package"

    def distfile_name(self, new_hash_format: bool) -> str:
        """ebuild 中 distfile 的文件名

        Zig 0.14 起新哈希格式已包含包名，旧格式需要拼上 name 前缀。
        Git 引用最终都以 tar.gz 形式出现（在二次归档中）。
        """
        ext = self.kind.format.value if isinstance(self.kind, Archive) else "tar.gz"
        if new_hash_format:
            return f"{self.hash}.{ext}"
        return f"{self.name or PRISTINE_PACKAGE_NAME}-{self.hash}.{ext}"

    def to_dict(self) -> dict[str, str | None]:
        if isinstance(self.kind, Archive):
            kind, detail = "archive", self.kind.format.value
        else:
            kind, detail = "git_ref", self.kind.commit
        return {
            "name": self.name,
            "hash": self.hash,
            "locator": self.locator,
            "kind": kind,
            "detail": detail,
        }


@dataclass
class ResolvedDependencies:
    """依赖解析结果

    packages 已排序，仅包含远程依赖，哈希两两不同。
    """

    root_name: str = ""
    root_version: str = ""
    packages: list[Package] = field(default_factory=list)

    @property
    def git_ref_count(self) -> int:
        return sum(1 for p in self.packages if p.is_git_ref)

    @property
    def git_ref_packages(self) -> list[Package]:
        return [p for p in self.packages if p.is_git_ref]
