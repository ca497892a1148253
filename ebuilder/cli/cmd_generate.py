"""生成命令: generate"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from ebuilder.cli.errors import run_or_exit
from ebuilder.core.config import get_config
from ebuilder.core.dep.fetcher import FetchMode
from ebuilder.core.recipe import available_formatters
from ebuilder.services.generate_service import GenerateRequest, GenerateService
from ebuilder.utils.fileio import atomic_write

logger = logging.getLogger(__name__)

FETCH_CHOICES = [m.value for m in FetchMode]


def register(main: click.Group) -> None:
    """注册生成相关命令"""
    main.add_command(generate)


@click.command()
@click.argument("path", required=False)
@click.option("--fetch", "fetch_mode", type=click.Choice(FETCH_CHOICES), default=None,
              help="依赖解析策略（默认: plain；hashed 需要打过补丁的 Zig）")
@click.option("--template", default=None, help=f"打包描述格式（可用: {', '.join(available_formatters())}）")
@click.option("--zig", "zig_executable", default=None, help="Zig 可执行文件路径（默认从 PATH 查找）")
@click.option("--output", "-o", default=None, help="输出文件（默认写到 stdout）")
@click.option("--zig-build-args", "zig_build_args", multiple=True,
              help="原样传给 \"zig build\" 的参数，可重复（如 --zig-build-args=-Dcpu=baseline）")
def generate(
    path: str | None,
    fetch_mode: str | None,
    template: str | None,
    zig_executable: str | None,
    output: str | None,
    zig_build_args: tuple[str, ...],
) -> None:
    """为 PATH（build.zig 或其所在目录，默认当前目录）生成 ebuild"""
    cfg = run_or_exit(lambda: get_config().override(
        fetch_mode=fetch_mode, template=template, zig_executable=zig_executable,
    ))
    svc = GenerateService(cfg)
    result = run_or_exit(lambda: svc.generate(GenerateRequest(
        project_path=path,
        fetch_mode=FetchMode(cfg.fetch_mode),
        template=cfg.template,
        zig_build_args=list(zig_build_args),
    )))

    if output:
        run_or_exit(lambda: atomic_write(Path(output), result.recipe))
        logger.info("生成的 ebuild 已写入 %s", output)
    else:
        logger.info("将生成的 ebuild 写到 STDOUT...")
        click.echo(result.recipe, nl=False)

    if result.secondary_archive is not None:
        logger.warning(
            "注意: 项目中有 %d 个无法转换的 Git commit 依赖，"
            "请托管 \"%s\" 并将其加入 SRC_URI",
            result.git_ref_count, result.secondary_archive,
        )
