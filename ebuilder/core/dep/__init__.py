"""依赖解析与打包引擎

模块说明:
- models.py: Package 等数据模型
- services.py: 已知托管服务与定位符规范化
- policy.py: 重复包合并策略与排序
- transform.py: Git commit → 归档 转换
- fetcher.py: zig fetch 拉取
- store.py: 包存储访问
- walker.py: 依赖图遍历
- packer.py: 二次归档打包
"""

from ebuilder.core.dep.fetcher import FetchMode, ZigFetcher
from ebuilder.core.dep.models import (
    Archive,
    ArchiveFormat,
    GitRef,
    Package,
    ResolvedDependencies,
)
from ebuilder.core.dep.store import PackageStore
from ebuilder.core.dep.walker import DependencyWalker

__all__ = [
    "Archive",
    "ArchiveFormat",
    "DependencyWalker",
    "FetchMode",
    "GitRef",
    "Package",
    "PackageStore",
    "ResolvedDependencies",
    "ZigFetcher",
]
