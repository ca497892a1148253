"""build.zig.zon 清单模型

职责:
- 把 ZON 解析结果校验并转换为 Manifest
- 区分本地依赖（path）与远程依赖（url + hash）
- dependencies 为 None 表示清单没有依赖段（叶子节点）
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ebuilder.core import zon
from ebuilder.core.exceptions import ManifestError

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "build.zig.zon"


@dataclass(frozen=True)
class RemoteDependency:
    """远程依赖：定位符 + 声明的内容哈希"""

    url: str
    hash: str


@dataclass(frozen=True)
class LocalDependency:
    """本地依赖：相对于声明清单所在目录的路径"""

    path: str


Dependency = RemoteDependency | LocalDependency


@dataclass
class Manifest:
    """已解析的项目清单（只读）"""

    name: str = ""
    version: str = ""
    dependencies: dict[str, Dependency] | None = None
    paths: list[str] = field(default_factory=list)
    minimum_zig_version: str | None = None

    @classmethod
    def pristine(cls) -> Manifest:
        """没有 build.zig.zon 的包：名称未知，没有依赖"""
        return cls()

    @classmethod
    def from_zon(cls, data: Any, source: str = MANIFEST_FILE_NAME) -> Manifest:
        if not isinstance(data, dict):
            raise ManifestError(f"{source}: 顶层必须是结构体")

        name = data.get("name", "")
        if not isinstance(name, str):
            raise ManifestError(f"{source}: name 必须是字符串或枚举字面量")
        version = data.get("version", "")
        if not isinstance(version, str):
            raise ManifestError(f"{source}: version 必须是字符串")
        minimum = data.get("minimum_zig_version")
        if minimum is not None and not isinstance(minimum, str):
            raise ManifestError(f"{source}: minimum_zig_version 必须是字符串")

        raw_paths = data.get("paths", [])
        if raw_paths == {}:
            raw_paths = []
        if not isinstance(raw_paths, list) or not all(isinstance(p, str) for p in raw_paths):
            raise ManifestError(f"{source}: paths 必须是字符串元组")

        dependencies: dict[str, Dependency] | None = None
        if "dependencies" in data:
            raw_deps = data["dependencies"]
            if not isinstance(raw_deps, dict):
                raise ManifestError(f"{source}: dependencies 必须是结构体")
            dependencies = {
                dep_name: _parse_dependency(dep_name, info, source)
                for dep_name, info in raw_deps.items()
            }

        return cls(
            name=name,
            version=version,
            dependencies=dependencies,
            paths=list(raw_paths),
            minimum_zig_version=minimum,
        )

    @classmethod
    def loads(cls, text: str, source: str = MANIFEST_FILE_NAME) -> Manifest:
        return cls.from_zon(zon.loads(text, source), source)

    @property
    def remote_dependencies(self) -> dict[str, RemoteDependency]:
        return {
            k: v for k, v in (self.dependencies or {}).items()
            if isinstance(v, RemoteDependency)
        }


def _parse_dependency(name: str, info: Any, source: str) -> Dependency:
    if not isinstance(info, dict):
        raise ManifestError(f"{source}: 依赖 \"{name}\" 必须是结构体")

    # lazy 等字段不影响解析
    path = info.get("path")
    url = info.get("url")
    if path is not None and url is not None:
        raise ManifestError(f"{source}: 依赖 \"{name}\" 不能同时指定 path 和 url")
    if path is not None:
        if not isinstance(path, str):
            raise ManifestError(f"{source}: 依赖 \"{name}\" 的 path 必须是字符串")
        return LocalDependency(path=path)
    if url is None:
        raise ManifestError(f"{source}: 依赖 \"{name}\" 缺少 url 或 path")

    dep_hash = info.get("hash")
    if not isinstance(url, str) or not isinstance(dep_hash, str) or not dep_hash:
        raise ManifestError(f"{source}: 依赖 \"{name}\" 需要字符串 url 与非空 hash")
    return RemoteDependency(url=url, hash=dep_hash)


def read_manifest(path: Path) -> Manifest:
    """读取并解析清单文件，文件不存在时抛出 FileNotFoundError"""
    text = path.read_text(encoding="utf-8")
    manifest = Manifest.loads(text, source=str(path))
    logger.debug("已读取清单: %s (name=%s, version=%s)", path, manifest.name, manifest.version)
    return manifest
