"""依赖查询命令: deps"""

from __future__ import annotations

import json

import click

from ebuilder.cli.errors import run_or_exit
from ebuilder.core.config import get_config
from ebuilder.core.dep.fetcher import FetchMode
from ebuilder.services.generate_service import GenerateRequest, GenerateService


def register(main: click.Group) -> None:
    """注册依赖查询命令"""
    main.add_command(list_deps)


@click.command(name="deps")
@click.argument("path", required=False)
@click.option("--fetch", "fetch_mode", type=click.Choice(["plain", "hashed"]), default=None,
              help="依赖解析策略")
@click.option("--zig", "zig_executable", default=None, help="Zig 可执行文件路径")
@click.option("--json", "as_json", is_flag=True, help="以 JSON 输出")
def list_deps(path: str | None, fetch_mode: str | None, zig_executable: str | None, as_json: bool) -> None:
    """解析并列出项目的全部远程依赖"""
    cfg = run_or_exit(lambda: get_config().override(
        fetch_mode=fetch_mode, zig_executable=zig_executable,
    ))
    mode = FetchMode(cfg.fetch_mode)
    if mode is FetchMode.NONE:
        mode = FetchMode.PLAIN
    svc = GenerateService(cfg)
    _, _, deps = run_or_exit(lambda: svc.resolve(GenerateRequest(project_path=path, fetch_mode=mode)))

    if as_json:
        click.echo(json.dumps([p.to_dict() for p in deps.packages], indent=2, ensure_ascii=False))
        return
    if not deps.packages:
        click.echo("没有远程依赖。")
        return
    for p in deps.packages:
        d = p.to_dict()
        click.echo(f"  {p.display_name:24s} [{d['kind']:7s}] {p.hash}  {p.locator}")
    click.echo(f"共 {len(deps.packages)} 个包，其中 Git commit: {deps.git_ref_count}")
