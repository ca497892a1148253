"""打包描述（recipe）生成器 - Strategy 模式

每种发行版格式实现 RecipeFormatter 接口，通过注册制工厂调用。
新增格式只需继承 RecipeFormatter 并注册即可。
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from ebuilder.core.dep.models import Archive, ResolvedDependencies
from ebuilder.core.exceptions import RecipeError
from ebuilder.core.zig_process import BuildReport

logger = logging.getLogger(__name__)


@dataclass
class Distfile:
    """ebuild 中的一个下载文件；url 为空表示已打进二次归档"""

    name: str
    url: str = ""


@dataclass
class RecipeContext:
    """渲染所需的全部数据"""

    generator_version: str
    year: int
    zig_slot: str
    project_name: str = ""
    project_version: str = ""
    tarballs: list[Distfile] = field(default_factory=list)
    git_commits: list[Distfile] = field(default_factory=list)
    secondary_archive: Path | None = None
    report: BuildReport = field(default_factory=BuildReport)


def build_context(
    dependencies: ResolvedDependencies,
    *,
    generator_version: str,
    year: int,
    zig_slot: str,
    new_hash_format: bool,
    secondary_archive: Path | None = None,
    report: BuildReport | None = None,
) -> RecipeContext:
    """把解析结果转换为渲染上下文

    TODO: report.used_dependencies_hashes 可用于生成按 USE 条件的依赖，
    目前所有依赖都视为已使用。
    """
    tarballs: list[Distfile] = []
    git_commits: list[Distfile] = []
    for package in dependencies.packages:
        name = package.distfile_name(new_hash_format)
        if isinstance(package.kind, Archive):
            tarballs.append(Distfile(name=name, url=package.locator))
        else:
            git_commits.append(Distfile(name=name))

    logger.info("使用的归档: %d, 使用的 Git commit: %d", len(tarballs), len(git_commits))
    return RecipeContext(
        generator_version=generator_version,
        year=year,
        zig_slot=zig_slot,
        project_name=dependencies.root_name,
        project_version=dependencies.root_version,
        tarballs=tarballs,
        git_commits=git_commits,
        secondary_archive=secondary_archive,
        report=report or BuildReport(),
    )


# =========================================================================
# Strategy: RecipeFormatter
# =========================================================================


class RecipeFormatter(ABC):
    """打包描述格式化策略基类"""

    @abstractmethod
    def format(self, context: RecipeContext) -> str:
        """将上下文格式化为打包描述文本"""


class GentooEbuildFormatter(RecipeFormatter):
    """Gentoo ebuild（配合 zig.eclass）

    许可证头（Gentoo Authors / GPLv2）只是为 ::gentoo 与 ::guru 准备的默认值。
    """

    def format(self, context: RecipeContext) -> str:
        deps = "".join(
            f"\t[{d.name}]='{d.url}'\n" for d in context.tarballs
        )
        git_lines = "".join(f"#\t{d.name}\n" for d in context.git_commits)

        src_uri = '\thttps://example.com/${P}.tar.gz\n\t${ZBS_DEPENDENCIES_SRC_URI}\n'
        secondary = ""
        if context.secondary_archive is not None:
            secondary = (
                "# 以下 Git commit 依赖无法转换为归档 URL，已打包进二次归档，\n"
                "# 请自行托管并替换为实际地址:\n"
                f"{git_lines}"
                f"SRC_URI+=\" https://example.com/{context.secondary_archive.name}\"\n\n"
            )

        libraries = "".join(
            f"\t# {lib.name} (used by: {', '.join(lib.used_by) or '-'})\n"
            for lib in context.report.system_libraries
        )
        integrations = "".join(
            f"#\t{i.name}: {'enabled' if i.enabled else 'disabled'}\n"
            for i in context.report.system_integrations
        )
        options = ""
        for opt in context.report.user_options:
            values = f" [{', '.join(opt.values)}]" if opt.values else ""
            options += f"\t\t# -D{opt.name}=<{opt.type}>{values}: {opt.description}\n"

        return (
            f"# Copyright {context.year} Gentoo Authors\n"
            "# Distributed under the terms of the GNU General Public License v2\n"
            "\n"
            f"# Autogenerated by zig-ebuilder {context.generator_version}\n"
            "\n"
            "EAPI=8\n"
            "\n"
            'DESCRIPTION=""\n'
            'HOMEPAGE=""\n'
            "\n"
            "declare -g -r -A ZBS_DEPENDENCIES=(\n"
            f"{deps}"
            ")\n"
            f'ZIG_SLOT="{context.zig_slot}"\n'
            "inherit zig\n"
            "\n"
            'SRC_URI="\n'
            f"{src_uri}"
            '"\n'
            "\n"
            f"{secondary}"
            'LICENSE=""\n'
            'SLOT="0"\n'
            'KEYWORDS="~amd64"\n'
            "\n"
            "# System libraries:\n"
            'DEPEND="\n'
            f"{libraries}"
            '"\n'
            'RDEPEND="${DEPEND}"\n'
            "\n"
            "# System integrations:\n"
            f"{integrations}"
            "\n"
            "src_configure() {\n"
            "\tlocal my_zbs_args=(\n"
            f"{options}"
            "\t)\n"
            "\n"
            "\tzig_src_configure\n"
            "}\n"
        )


# =========================================================================
# 注册制工厂
# =========================================================================

_formatters: dict[str, type[RecipeFormatter]] = {
    "gentoo.ebuild": GentooEbuildFormatter,
}


def register_formatter(name: str, cls: type[RecipeFormatter]) -> None:
    """注册自定义打包描述格式"""
    _formatters[name] = cls


def available_formatters() -> list[str]:
    return sorted(_formatters)


def render_recipe(fmt: str, context: RecipeContext) -> str:
    formatter_cls = _formatters.get(fmt)
    if formatter_cls is None:
        raise RecipeError(
            f"不支持的格式: {fmt}（可用: {available_formatters()}）",
        )
    return formatter_cls().format(context)
