"""领域协议定义

集中定义依赖解析引擎与外部协作者之间的接口契约（Protocol）。
使用 typing.Protocol 而非 ABC，测试中的假实现无需继承。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ebuilder.core.dep.fetcher import FetchMode
    from ebuilder.core.manifest import Manifest, RemoteDependency


# =========================================================================
# 拉取协议
# =========================================================================

class DependencyFetcher(Protocol):
    """远程依赖拉取者协议

    同步拉取到包存储，返回实际内容哈希；失败时抛出 FetchError。
    """

    def fetch(
        self,
        name: str,
        dependency: RemoteDependency,
        mode: FetchMode,
        *,
        cwd: Path,
        events: logging.Logger,
    ) -> str:
        ...


# =========================================================================
# 包存储协议
# =========================================================================

class PackageStorage(Protocol):
    """包存储访问协议

    read_nested_manifest 仅在文件不存在时返回 None，其余 IO 错误照常抛出。
    """

    def package_dir(self, package_hash: str) -> Path:
        ...

    def read_nested_manifest(self, directory: Path) -> Manifest | None:
        ...
