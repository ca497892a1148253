"""依赖图遍历器

从项目根清单出发，按广度优先遍历整个依赖图:

  队列 (目录, 清单)  ──>  拉取远程依赖  ──>  读取嵌套清单  ──>  入队
                                 │
                                 └──>  构造 Package  ──>  按哈希合并

遍历结束后把能转换的 Git 引用改写为归档，再排序输出。
使用显式 FIFO 队列而非递归，深度只受内存限制。
任何致命错误（定位符无效、拉取失败、IO 错误）立即中止整个解析。
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from pathlib import Path

from ebuilder.core.dep.fetcher import FetchMode
from ebuilder.core.dep.models import Package, ResolvedDependencies
from ebuilder.core.dep.policy import MERGE_FALLBACK_INCOMING, merge_into, sort_packages
from ebuilder.core.dep.transform import transform_git_commit_to_archive
from ebuilder.core.exceptions import InvalidLocatorError
from ebuilder.core.manifest import LocalDependency, Manifest, RemoteDependency
from ebuilder.core.protocols import DependencyFetcher, PackageStorage
from ebuilder.utils.logger import child_logger
from ebuilder.utils.net import split_locator


@dataclass
class _ResolvedEntry:
    """已定位到目录的依赖；remote 为 None 表示本地依赖"""

    name: str
    directory: Path
    remote: RemoteDependency | None = None
    fetched_hash: str = ""


class DependencyWalker:
    """依赖图遍历器，单次 collect() 独占队列与哈希表"""

    def __init__(
        self,
        store: PackageStorage,
        fetcher: DependencyFetcher,
        events: logging.Logger,
        merge_fallback: str = MERGE_FALLBACK_INCOMING,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.events = events
        self.merge_fallback = merge_fallback

    def collect(
        self,
        project_root: Path,
        manifest: Manifest,
        mode: FetchMode,
    ) -> ResolvedDependencies:
        if mode is FetchMode.NONE:
            raise ValueError("FetchMode.NONE 时不应遍历依赖图")

        # 以哈希为键，检测重复
        packages: dict[str, Package] = {}
        queue: deque[tuple[Path, Manifest]] = deque([(project_root, manifest)])

        while queue:
            directory, current = queue.popleft()
            self.events.debug("清单: %s (%s)", current.name or "<pristine>", directory)

            if current.dependencies is None:
                continue

            for entry in self._resolve_directories(directory, current, mode):
                if not entry.directory.is_dir():
                    self.events.error("依赖 \"%s\" 的目录不存在: %s", entry.name, entry.directory)
                    raise FileNotFoundError(f"依赖 \"{entry.name}\" 的目录不存在: {entry.directory}")

                self.events.debug("搜索 %s ...", entry.directory)
                nested = self.store.read_nested_manifest(entry.directory)
                queue.append((entry.directory, nested or Manifest.pristine()))

                if entry.remote is None:
                    continue

                dep_name = nested.name if nested is not None and nested.name else None
                dep_events = child_logger(self.events, dep_name or "pristine package")
                package = Package.from_locator(
                    dep_name, entry.fetched_hash, entry.remote.url, dep_events,
                )
                merge_into(packages, package, dep_events, self.merge_fallback)

        self.events.info("包数量: %d", len(packages))

        # 原地把 Git commit 转换为归档（已知服务）
        for package in packages.values():
            if package.is_git_ref:
                transform_git_commit_to_archive(
                    package, child_logger(self.events, package.display_name),
                )

        return ResolvedDependencies(
            root_name=manifest.name,
            root_version=manifest.version,
            packages=sort_packages(list(packages.values())),
        )

    def _resolve_directories(
        self,
        directory: Path,
        manifest: Manifest,
        mode: FetchMode,
    ) -> list[_ResolvedEntry]:
        """按声明顺序拉取远程依赖，并计算每个依赖所在目录"""
        dependencies = manifest.dependencies or {}
        fetch_total = len(manifest.remote_dependencies)
        entries: list[_ResolvedEntry] = []

        fetch_index = 0
        for name, dependency in dependencies.items():
            if isinstance(dependency, LocalDependency):
                entries.append(_ResolvedEntry(name, directory / dependency.path))
                continue

            fetch_index += 1
            self.events.info("正在拉取 \"%s\" [%d/%d]...", name, fetch_index, fetch_total)
            try:
                split_locator(dependency.url)
            except InvalidLocatorError as e:
                self.events.error("无效的 URI: \"%s\": %s", dependency.url, e)
                raise

            fetched_hash = self.fetcher.fetch(
                name, dependency, mode, cwd=directory, events=self.events,
            )
            entries.append(_ResolvedEntry(
                name, self.store.package_dir(fetched_hash), dependency, fetched_hash,
            ))
        return entries
