"""生成服务: 一次完整的 ebuild 生成流程

流程:
  1. 定位项目（build.zig / build.zig.zon）与缓存目录
  2. 检测 Zig 版本
  3. 读取根清单并遍历依赖图（fetch=none 时跳过）
  4. 无法转换的 Git commit 依赖打进二次归档
  5. 可选: 通过 build runner 收集构建报告
  6. 渲染打包描述

任一步骤的致命错误直接向上传播，不输出残缺结果。
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ebuilder import __version__
from ebuilder.core.config import Config, get_config
from ebuilder.core.dep.fetcher import FetchMode, ZigFetcher
from ebuilder.core.dep.models import ResolvedDependencies
from ebuilder.core.dep.packer import write_git_commits_archive
from ebuilder.core.dep.store import PackageStore
from ebuilder.core.dep.walker import DependencyWalker
from ebuilder.core.locations import GeneratorLocations, ProjectLocation
from ebuilder.core.manifest import read_manifest
from ebuilder.core.recipe import build_context, render_recipe
from ebuilder.core.zig_process import BuildReport, ZigProcess
from ebuilder.utils.logger import child_logger, get_logger
from ebuilder.utils.shell import CommandExecutor


@dataclass
class GenerateRequest:
    """生成请求参数（CLI 选项）"""

    project_path: str | None = None
    fetch_mode: FetchMode = FetchMode.PLAIN
    template: str = "gentoo.ebuild"
    zig_build_args: list[str] = field(default_factory=list)


@dataclass
class GenerateResult:
    recipe: str
    dependencies: ResolvedDependencies
    secondary_archive: Path | None = None

    @property
    def git_ref_count(self) -> int:
        return self.dependencies.git_ref_count


class GenerateService:
    """ebuild 生成服务"""

    def __init__(
        self,
        config: Config | None = None,
        *,
        executor: CommandExecutor | None = None,
        environ: Mapping[str, str] | None = None,
        events: logging.Logger | None = None,
    ) -> None:
        self.config = config or get_config()
        self.environ = environ
        self.events = events or get_logger()
        self.zig = ZigProcess(
            self.config.zig_executable,
            executor=executor,
            timeout=self.config.fetch_timeout,
        )

    # ---- 依赖解析 ----

    def resolve(self, request: GenerateRequest) -> tuple[ProjectLocation, GeneratorLocations, ResolvedDependencies]:
        """定位项目并解析依赖，不做打包和渲染"""
        file_events = child_logger(self.events, "file")
        searching_events = child_logger(file_events, "searching")

        project = ProjectLocation.open(request.project_path, searching_events)
        searching_events.info("成功找到 \"build.zig\" 文件")
        locations = GeneratorLocations.make(self.config, self.environ, self.events)

        if request.fetch_mode is FetchMode.NONE:
            return project, locations, ResolvedDependencies()

        if project.build_zig_zon is None:
            searching_events.warning("未找到 \"build.zig.zon\"，跳过拉取")
            return project, locations, ResolvedDependencies()
        searching_events.info("找到 \"build.zig.zon\"，开始拉取依赖")

        manifest = read_manifest(project.build_zig_zon)
        walker = DependencyWalker(
            store=PackageStore(locations.dependencies_storage),
            fetcher=ZigFetcher(self.zig, locations.dependencies_storage),
            events=file_events,
            merge_fallback=self.config.merge_fallback,
        )
        dependencies = walker.collect(project.root, manifest, request.fetch_mode)
        file_events.debug("packages = %s", [p.to_dict() for p in dependencies.packages])
        return project, locations, dependencies

    # ---- 完整生成 ----

    def generate(self, request: GenerateRequest) -> GenerateResult:
        version = self.zig.version()
        self.events.info("Zig 版本: %s", version.raw)

        project, locations, dependencies = self.resolve(request)

        secondary_archive: Path | None = None
        git_ref_count = dependencies.git_ref_count
        if git_ref_count > 0:
            self.events.warning(
                "发现 %d 个无法从 Git commit 转换为归档的依赖，将打包为一个归档...",
                git_ref_count,
            )
            secondary_archive = write_git_commits_archive(
                dependencies.packages,
                PackageStore(locations.dependencies_storage),
                locations.cache,
                project_name=dependencies.root_name,
                project_version=dependencies.root_version,
                new_hash_format=version.new_package_format,
                events=self.events,
                compression_level=self.config.compression_level,
            )

        report = self._collect_report(project, request.zig_build_args)

        context = build_context(
            dependencies,
            generator_version=__version__,
            year=datetime.date.today().year,
            zig_slot=version.slot,
            new_hash_format=version.new_package_format,
            secondary_archive=secondary_archive,
            report=report,
        )
        recipe = render_recipe(request.template, context)
        return GenerateResult(
            recipe=recipe,
            dependencies=dependencies,
            secondary_archive=secondary_archive,
        )

    def _collect_report(self, project: ProjectLocation, extra_args: list[str]) -> BuildReport:
        if not self.config.build_runner:
            self.events.info("未配置 build_runner，跳过构建报告收集")
            return BuildReport()
        self.events.info("使用自定义 build runner 执行 \"zig build\"，参数见 DEBUG 日志")
        return self.zig.build_report(
            project.root,
            Path(self.config.build_runner).expanduser(),
            extra_args,
            child_logger(self.events, "report"),
        )
