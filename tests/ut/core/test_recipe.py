"""打包描述生成测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from ebuilder.core.dep.models import Package, ResolvedDependencies
from ebuilder.core.exceptions import RecipeError
from ebuilder.core.recipe import (
    RecipeContext,
    RecipeFormatter,
    available_formatters,
    build_context,
    register_formatter,
    render_recipe,
)
from ebuilder.core.zig_process import BuildReport, SystemLibrary, UserOption


@pytest.fixture()
def dependencies(events):
    return ResolvedDependencies(
        root_name="app",
        root_version="1.0.0",
        packages=[
            Package.from_locator("x", "x-1.0.0-AAAA", "https://github.com/u/x/archive/v1.tar.gz", events),
            Package.from_locator(None, "y-0.1.0-BBBB", "git+https://example.org/u/y#c0ffee", events),
        ],
    )


def _context(dependencies, **kwargs):
    return build_context(
        dependencies, generator_version="0.1.0", year=2025, zig_slot="0.14",
        new_hash_format=True, **kwargs,
    )


class TestBuildContext:
    def test_split_tarballs_and_git_commits(self, dependencies):
        ctx = _context(dependencies)
        assert [(d.name, d.url) for d in ctx.tarballs] == [
            ("x-1.0.0-AAAA.tar.gz", "https://github.com/u/x/archive/v1.tar.gz"),
        ]
        assert [d.name for d in ctx.git_commits] == ["y-0.1.0-BBBB.tar.gz"]
        assert ctx.project_name == "app"


class TestGentooEbuild:
    def test_render(self, dependencies):
        text = render_recipe("gentoo.ebuild", _context(dependencies))
        assert "EAPI=8" in text
        assert "# Copyright 2025 Gentoo Authors" in text
        assert "declare -g -r -A ZBS_DEPENDENCIES=(\n" in text
        assert "\t[x-1.0.0-AAAA.tar.gz]='https://github.com/u/x/archive/v1.tar.gz'\n" in text
        assert 'ZIG_SLOT="0.14"' in text
        assert "inherit zig" in text
        assert "git_dependencies" not in text

    def test_secondary_archive(self, dependencies):
        ctx = _context(
            dependencies,
            secondary_archive=Path("/cache/app-1.0.0-git_dependencies.tar.gz"),
        )
        text = render_recipe("gentoo.ebuild", ctx)
        assert "#\ty-0.1.0-BBBB.tar.gz\n" in text
        assert 'SRC_URI+=" https://example.com/app-1.0.0-git_dependencies.tar.gz"' in text

    def test_report_sections(self, dependencies):
        report = BuildReport(
            system_libraries=[SystemLibrary("libz", ["app"])],
            user_options=[UserOption("backend", "渲染后端", "enum", ["gl", "vk"])],
        )
        text = render_recipe("gentoo.ebuild", _context(dependencies, report=report))
        assert "\t# libz (used by: app)\n" in text
        assert "# -Dbackend=<enum> [gl, vk]: 渲染后端" in text


class TestRegistry:
    def test_unknown_format(self, dependencies):
        with pytest.raises(RecipeError, match="不支持的格式"):
            render_recipe("rpm.spec", _context(dependencies))

    def test_register_custom(self, dependencies):
        class NamesOnly(RecipeFormatter):
            def format(self, context: RecipeContext) -> str:
                return "\n".join(d.name for d in context.tarballs)

        register_formatter("names.txt", NamesOnly)
        assert "names.txt" in available_formatters()
        assert render_recipe("names.txt", _context(dependencies)) == "x-1.0.0-AAAA.tar.gz"
